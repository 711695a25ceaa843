class VerificationError(Exception):
    """Base exception for all verification upload errors.

    The message is safe to show to the user.
    """


class NotAuthenticatedError(VerificationError):
    """Raised when an upload is started without an authenticated owner."""


class BusyError(VerificationError):
    """Raised when an upload is started while another attempt is in flight."""


class AttemptCancelledError(VerificationError):
    """Raised when an attempt stops because it was cancelled before uploading."""


class ImageValidationError(VerificationError):
    """Raised when the selected image or the entered details are rejected."""


class ImageCompressionError(VerificationError):
    """Raised when the selected image cannot be compressed for upload."""


class UploadError(VerificationError):
    """Raised when the object store rejects the compressed image.

    Nothing has been persisted when this is raised.
    """


class RecordCreationError(VerificationError):
    """Raised when the image is stored but its verification record is not.

    The uploaded object is still referenced here so that record creation can
    be retried without uploading the image again.
    """

    def __init__(self, message: str, *, object_key: str, image_url: str) -> None:
        super().__init__(message)
        self.object_key = object_key
        self.image_url = image_url
