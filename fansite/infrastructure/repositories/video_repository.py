"""
In-memory implementation of the Video Repository.
"""

from typing import List, Optional

from fansite.domain.models.video import Video
from fansite.domain.repositories.video_repository import VideoRepository
from fansite.infrastructure.repositories.base_repository import InMemoryRepository


class InMemoryVideoRepository(InMemoryRepository[Video], VideoRepository):
    def list_by_owner(self, owner_id: str) -> List[Video]:
        return self.find(lambda v: v.owner_id == owner_id)

    def increment_views(self, id: str) -> Optional[Video]:
        with self.lock:
            video = self._items.get(id)
            if video is not None:
                video.view_count += 1
            return video
