class StoreError(Exception):
    """Raised when the binary object store rejects or fails a write."""
