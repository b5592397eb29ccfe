"""
User Repository Interface.
Defines specific data access operations for Users.
"""

from typing import Optional

from fansite.domain.models.user import User
from fansite.domain.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Interface for User-specific operations."""

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup across active and inactive users."""
        ...

    def add_video_id(self, user_id: str, video_id: str) -> None:
        """Append a video id to the user's uploaded list."""
        ...

    def remove_video_id(self, user_id: str, video_id: str) -> None:
        """Remove a video id from the user's uploaded list (no-op if absent)."""
        ...
