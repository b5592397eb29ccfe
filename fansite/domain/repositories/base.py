"""
Base Repository Interface.
Defines the standard contract for data access operations.
"""

from typing import Any, Callable, List, Optional, Protocol, TypeVar

T = TypeVar("T")


class BaseRepository(Protocol[T]):
    """Interface for generic CRUD operations."""

    def get_by_id(self, id: str) -> Optional[T]:
        """Get a single entity by ID."""
        ...

    def list(self, skip: int = 0, limit: Optional[int] = None) -> List[T]:
        """List entities in insertion order."""
        ...

    def find(self, predicate: Callable[[T], bool]) -> List[T]:
        """List entities matching a predicate, in insertion order."""
        ...

    def create(self, obj: T) -> T:
        """Insert a new entity."""
        ...

    def update(self, obj: T, fields: dict[str, Any]) -> T:
        """Apply field changes to an existing entity."""
        ...

    def delete(self, id: str) -> Optional[T]:
        """Delete an entity by ID."""
        ...

    def count(self) -> int:
        ...
