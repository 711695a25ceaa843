from abc import ABC, abstractmethod

from app.tree_images.exceptions import ProviderError


class BaseImageProvider(ABC):
    """Contract for external services that find a display image for a tree."""

    @abstractmethod
    def search(self, tree_name: str) -> str:
        """Return the URL of a representative image for the tree.

        Raises:
            RateLimitError: if the provider refuses the call because of quota.
            ProviderError: on any other failure, including empty results.
        """


class DisabledImageProvider(BaseImageProvider):
    """Provider used when no access key is configured. Never touches the network."""

    def search(self, tree_name: str) -> str:
        raise ProviderError(f"Image provider is not configured, cannot search '{tree_name}'")
