class ProviderError(Exception):
    """Raised when the image provider fails or returns an unusable response."""


class RateLimitError(ProviderError):
    """Raised when the provider quota is exhausted or the provider throttles us."""
