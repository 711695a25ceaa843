class ImagingError(Exception):
    """Base exception for local image handling errors."""


class CompressionError(ImagingError):
    """Raised when an image cannot be decoded or fitted into the byte budget."""
