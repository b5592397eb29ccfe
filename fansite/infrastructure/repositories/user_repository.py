"""
In-memory implementation of the User Repository.
"""

from typing import Optional

from fansite.domain.models.user import User
from fansite.domain.repositories.user_repository import UserRepository
from fansite.infrastructure.repositories.base_repository import InMemoryRepository


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class InMemoryUserRepository(InMemoryRepository[User], UserRepository):
    def create(self, obj: User) -> User:
        with self.lock:
            if self.get_by_email(obj.email) is not None:
                raise KeyError(f"duplicate email {obj.email}")
            return super().create(obj)

    def get_by_email(self, email: str) -> Optional[User]:
        wanted = normalize_email(email)
        with self.lock:
            for user in self._items.values():
                if user.email == wanted:
                    return user
        return None

    def add_video_id(self, user_id: str, video_id: str) -> None:
        with self.lock:
            user = self._items.get(user_id)
            if user is not None and video_id not in user.uploaded_video_ids:
                user.uploaded_video_ids.append(video_id)

    def remove_video_id(self, user_id: str, video_id: str) -> None:
        with self.lock:
            user = self._items.get(user_id)
            if user is not None:
                user.uploaded_video_ids = [v for v in user.uploaded_video_ids if v != video_id]
