"""
In-memory implementation of the Base Repository.
"""

import threading
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

from fansite.domain.repositories.base import BaseRepository

ModelType = TypeVar("ModelType", bound=BaseModel)


class InMemoryRepository(BaseRepository[ModelType], Generic[ModelType]):
    """Generic repository over an insertion-ordered dict.

    Sync endpoints run in FastAPI's thread pool, so every read and write
    goes through a per-collection re-entrant lock.
    """

    def __init__(self):
        self._items: Dict[str, ModelType] = {}
        self.lock = threading.RLock()

    def get_by_id(self, id: str) -> Optional[ModelType]:
        with self.lock:
            return self._items.get(id)

    def list(self, skip: int = 0, limit: Optional[int] = None) -> List[ModelType]:
        with self.lock:
            items = list(self._items.values())
        end = None if limit is None else skip + limit
        return items[skip:end]

    def find(self, predicate: Callable[[ModelType], bool]) -> List[ModelType]:
        with self.lock:
            return [obj for obj in self._items.values() if predicate(obj)]

    def create(self, obj: ModelType) -> ModelType:
        with self.lock:
            if obj.id in self._items:
                raise KeyError(f"duplicate id {obj.id}")
            self._items[obj.id] = obj
        return obj

    def update(self, obj: ModelType, fields: dict[str, Any]) -> ModelType:
        with self.lock:
            for field, value in fields.items():
                if hasattr(obj, field):
                    setattr(obj, field, value)
        return obj

    def delete(self, id: str) -> Optional[ModelType]:
        with self.lock:
            return self._items.pop(id, None)

    def count(self) -> int:
        with self.lock:
            return len(self._items)

    def clear(self) -> None:
        with self.lock:
            self._items.clear()
