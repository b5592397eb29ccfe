"""
Video Repository Interface.
Defines specific data access operations for Videos.
"""

from typing import List, Optional

from fansite.domain.models.video import Video
from fansite.domain.repositories.base import BaseRepository


class VideoRepository(BaseRepository[Video]):
    """Interface for Video-specific operations."""

    def list_by_owner(self, owner_id: str) -> List[Video]:
        """Get all videos owned by a user, in insertion order."""
        ...

    def increment_views(self, id: str) -> Optional[Video]:
        """Atomically add one view; returns None if the video is gone."""
        ...
