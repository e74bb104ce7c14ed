"""Protocols for dependency injection in the mindmap controller."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StorageProtocol(Protocol):
    """Protocol for durable storage of the serialized map collection."""

    def load(self) -> dict[str, Any] | None:
        """Return the stored workspace document, or None if nothing is stored."""
        ...

    def save(self, data: dict[str, Any]) -> None:
        """Persist the workspace document."""
        ...
