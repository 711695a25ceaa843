class DatabaseError(Exception):
    """Base exception for relational store errors."""


class RecordInsertError(DatabaseError):
    """Raised when a row cannot be inserted."""


class RecordNotFoundError(DatabaseError):
    """Raised when a row cannot be found by its identifier."""
