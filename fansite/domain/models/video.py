"""Video domain model: uploaded files and YouTube links share one catalog."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from fansite.domain.models.user import utcnow


class VideoKind(str, Enum):
    """Wire values match the `tipo` query filter."""

    UPLOADED_FILE = "video"
    YOUTUBE_LINK = "youtube"


class ExternalMetadata(BaseModel):
    """Snapshot of YouTube metadata taken when the link was added."""

    video_id: str
    title: Optional[str] = None
    author: Optional[str] = None
    publish_date: Optional[str] = None
    external_view_count: Optional[int] = None


class Video(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    description: str = ""
    kind: VideoKind
    format: str  # file extension, or "youtube"
    source_url: str
    thumbnail_url: Optional[str] = None
    size_bytes: int = 0
    duration_seconds: int = 0
    uploaded_at: datetime = Field(default_factory=utcnow)
    owner_id: str
    view_count: int = 0
    is_public: bool = True
    original_name: Optional[str] = None

    # Server-local paths, uploaded files only
    storage_path: Optional[str] = None
    thumbnail_path: Optional[str] = None

    external_metadata: Optional[ExternalMetadata] = None

    @model_validator(mode="after")
    def _youtube_has_no_size(self) -> "Video":
        if self.kind == VideoKind.YOUTUBE_LINK and self.size_bytes != 0:
            raise ValueError("YouTube links cannot carry a file size")
        return self

    @property
    def is_uploaded_file(self) -> bool:
        return self.kind == VideoKind.UPLOADED_FILE

    def __repr__(self):
        return f"<Video {self.id} - {self.name}>"
