from abc import ABC, abstractmethod


class BaseAuthProvider(ABC):
    """Supplies the identifier of the signed-in owner."""

    @abstractmethod
    def current_owner_id(self) -> str | None:
        """Return the owner identifier, or None when nobody is signed in."""


class StaticAuthProvider(BaseAuthProvider):
    """Auth provider with a fixed owner, for command-line use."""

    def __init__(self, owner_id: str | None) -> None:
        self._owner_id = owner_id

    def current_owner_id(self) -> str | None:
        return self._owner_id or None
