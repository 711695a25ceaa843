from abc import ABC, abstractmethod


class BaseObjectStore(ABC):
    """Contract for all binary object store adapters."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store bytes under a key.

        Args:
            key: Object key in the form ``{owner_id}/{name}``.
            data: Payload to persist.
            content_type: Media type recorded with the object.

        Returns:
            Public URL of the stored object.

        Raises:
            StoreError: if the object could not be persisted.
        """

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Return the public URL for a key. No I/O is performed."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True if an object is stored under the key."""
