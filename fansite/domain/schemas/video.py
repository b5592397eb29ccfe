"""Pydantic schemas for the video library."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from fansite.domain.models.video import VideoKind
from fansite.domain.schemas.common import CamelModel, Pagination

# Older clients still send the original Spanish field names
LEGACY_SORT_FIELDS = {"fechaSubida": "uploadedAt", "nombre": "name", "views": "viewCount"}


class ExternalMetadataRead(CamelModel):
    video_id: str
    title: Optional[str] = None
    author: Optional[str] = None
    publish_date: Optional[str] = None
    external_view_count: Optional[int] = None


class VideoRead(CamelModel):
    id: str
    name: str
    description: str
    kind: VideoKind
    format: str
    source_url: str
    thumbnail_url: Optional[str] = None
    size_bytes: int
    duration_seconds: int
    uploaded_at: datetime
    owner_id: str
    view_count: int
    is_public: bool
    original_name: Optional[str] = None
    external_metadata: Optional[ExternalMetadataRead] = None


class VideoResponse(CamelModel):
    message: Optional[str] = None
    video: VideoRead


class YoutubeLinkCreate(BaseModel):
    url: str = ""
    name: str = Field("", validation_alias=AliasChoices("nombre", "name"))
    description: Optional[str] = Field(None, validation_alias=AliasChoices("descripcion", "description"))


class VideoUpdate(BaseModel):
    model_config = {"extra": "ignore"}

    name: Optional[str] = Field(None, validation_alias=AliasChoices("nombre", "name"))
    description: Optional[str] = Field(None, validation_alias=AliasChoices("descripcion", "description"))
    is_public: Optional[bool] = Field(None, validation_alias=AliasChoices("isPublic", "is_public"))


class VideoQuery(BaseModel):
    search: Optional[str] = None
    kind: Optional[VideoKind] = None
    owner_id: Optional[str] = None
    sort_by: Literal["uploadedAt", "name", "viewCount"] = "uploadedAt"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)

    @field_validator("sort_by", mode="before")
    @classmethod
    def _legacy_sort_field(cls, value):
        return LEGACY_SORT_FIELDS.get(value, value)


class VideoPage(CamelModel):
    videos: list[VideoRead]
    pagination: Pagination
