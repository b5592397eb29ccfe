"""Video pipeline: upload ingestion, YouTube links, listing, ownership-gated CRUD and streaming."""

from pathlib import Path
from typing import BinaryIO, Optional

import structlog

from fansite.application.services.authorization import DELETE, READ, UPDATE, can_access, ensure_access
from fansite.application.services.streaming import StreamResult, build_stream
from fansite.config import get_settings
from fansite.core.exceptions import (
    CorruptFileError,
    ForbiddenError,
    InvalidFileTypeError,
    InvalidSourceError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
)
from fansite.domain.models.user import User
from fansite.domain.models.video import ExternalMetadata, Video, VideoKind
from fansite.domain.repositories.user_repository import UserRepository
from fansite.domain.repositories.video_repository import VideoRepository
from fansite.domain.schemas.common import Pagination
from fansite.domain.schemas.video import VideoQuery
from fansite.infrastructure import youtube
from fansite.infrastructure.storage import VideoStorage
from fansite.infrastructure.thumbnails import ThumbnailGenerator
from fansite.infrastructure.youtube import YoutubeMetadataProvider

settings = get_settings()
logger = structlog.get_logger(__name__)

ALLOWED_TYPES = {
    "mp4": {"video/mp4"},
    "avi": {"video/avi", "video/x-msvideo", "video/msvideo"},
    "mov": {"video/quicktime", "video/mov"},
}
# ISO-BMFF box types QuickTime files may open with
MOV_BOXES = {b"ftyp", b"moov", b"mdat", b"wide", b"free", b"skip", b"pnot"}
SIGNATURE_LENGTH = 12

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 1000

SORT_KEYS = {
    "uploadedAt": lambda v: v.uploaded_at,
    "name": lambda v: v.name.casefold(),
    "viewCount": lambda v: v.view_count,
}


def file_extension(filename: str) -> str:
    return Path(filename or "").suffix.lstrip(".").lower()


def has_valid_signature(header: bytes, extension: str) -> bool:
    """Check the first bytes of a stored file against its container format."""
    if len(header) < SIGNATURE_LENGTH:
        return False
    if extension == "avi":
        return header[:4] == b"RIFF" and header[8:12] == b"AVI "
    if extension == "mp4":
        return header[4:8] == b"ftyp"
    if extension == "mov":
        return header[4:8] in MOV_BOXES
    return False


def check_file_type(filename: str, content_type: Optional[str]) -> str:
    """Return the extension if it and the MIME type are allowed and agree."""
    extension = file_extension(filename)
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime not in ALLOWED_TYPES.get(extension, set()):
        raise InvalidFileTypeError()
    return extension


def _required_name(value: Optional[str], field: str = "nombre") -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError("Video name is required", details=[{"field": field, "message": "Video name is required"}])
    return name


def _clean_name(value: Optional[str], field: str = "nombre") -> str:
    name = _required_name(value, field)
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(
            details=[{"field": field, "message": f"Video name must be at most {NAME_MAX_LENGTH} characters"}]
        )
    return name


def _clean_description(value: Optional[str], field: str = "descripcion") -> str:
    description = (value or "").strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            details=[{"field": field, "message": f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters"}]
        )
    return description


class VideoService:
    def __init__(
        self,
        videos: VideoRepository,
        users: UserRepository,
        storage: VideoStorage,
        thumbnails: ThumbnailGenerator,
        youtube_provider: YoutubeMetadataProvider,
        max_upload_bytes: Optional[int] = None,
    ):
        self.videos = videos
        self.users = users
        self.storage = storage
        self.thumbnails = thumbnails
        self.youtube_provider = youtube_provider
        self.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_BYTES

    def upload_file(
        self,
        owner_id: str,
        stream: Optional[BinaryIO],
        filename: Optional[str],
        content_type: Optional[str],
        declared_size: Optional[int],
        name: Optional[str],
        description: Optional[str] = None,
    ) -> Video:
        """Validate, store and catalog an uploaded video.

        Type and declared size are checked before anything touches the disk.
        Once the file is written, every later failure removes it (and its
        thumbnail) before the error propagates.
        """
        if stream is None or not filename:
            raise ValidationError("No video file provided")

        extension = check_file_type(filename, content_type)
        if declared_size is not None and declared_size > self.max_upload_bytes:
            raise PayloadTooLargeError()

        stored = self.storage.save(owner_id, stream, extension, self.max_upload_bytes)
        thumbnail_path = None
        try:
            # Uploads only require a name; the length caps apply to links and edits
            clean_name = _required_name(name)
            clean_description = (description or "").strip()

            if stored.size_bytes == 0:
                raise CorruptFileError("File validation failed: file is empty")
            if not has_valid_signature(self.storage.read_header(stored.path, SIGNATURE_LENGTH), extension):
                raise CorruptFileError()

            thumbnail_path = self.thumbnails.generate(stored.path, self.storage.thumbnail_path_for(stored.path))

            video = Video(
                name=clean_name,
                description=clean_description,
                kind=VideoKind.UPLOADED_FILE,
                format=extension,
                source_url=self.storage.stream_url(owner_id, stored.filename),
                thumbnail_url=self.storage.thumbnail_url(owner_id, thumbnail_path) if thumbnail_path else None,
                size_bytes=stored.size_bytes,
                owner_id=owner_id,
                original_name=filename,
                storage_path=str(stored.path),
                thumbnail_path=str(thumbnail_path) if thumbnail_path else None,
            )
            self.videos.create(video)
        except BaseException:
            self.storage.discard(stored.path)
            self.storage.discard(thumbnail_path)
            raise

        self.users.add_video_id(owner_id, video.id)
        logger.info(
            "video_uploaded",
            video_id=video.id,
            owner_id=owner_id,
            size_bytes=video.size_bytes,
            format=extension,
        )
        return video

    def add_youtube_link(
        self,
        owner_id: str,
        url: Optional[str],
        name: Optional[str],
        description: Optional[str] = None,
    ) -> Video:
        if not youtube.is_valid_url(url or ""):
            raise ValidationError(details=[{"field": "url", "message": "Please provide a valid URL"}])
        clean_name = _clean_name(name)
        clean_description = _clean_description(description)

        video_id = youtube.extract_video_id(url)
        if video_id is None:
            raise InvalidSourceError()

        canonical = youtube.canonical_url(video_id)
        meta = self.youtube_provider.fetch(canonical)

        video = Video(
            name=clean_name,
            description=clean_description or meta.description or "",
            kind=VideoKind.YOUTUBE_LINK,
            format="youtube",
            source_url=canonical,
            thumbnail_url=meta.thumbnail_url,
            size_bytes=0,
            duration_seconds=meta.duration_seconds,
            owner_id=owner_id,
            original_name=meta.title,
            external_metadata=ExternalMetadata(
                video_id=video_id,
                title=meta.title,
                author=meta.author,
                publish_date=meta.publish_date,
                external_view_count=meta.view_count,
            ),
        )
        self.videos.create(video)
        self.users.add_video_id(owner_id, video.id)
        logger.info("youtube_video_added", video_id=video.id, owner_id=owner_id, youtube_id=video_id)
        return video

    def list_videos(self, query: VideoQuery, requester: Optional[User] = None) -> tuple[list[Video], Pagination]:
        videos = self.videos.list()

        if query.search:
            term = query.search.strip().casefold()
            videos = [v for v in videos if term in v.name.casefold() or term in v.description.casefold()]
        if query.kind:
            videos = [v for v in videos if v.kind == query.kind]
        if query.owner_id:
            videos = [v for v in videos if v.owner_id == query.owner_id]
        videos = [v for v in videos if can_access(requester, v, READ)]

        # sorted() is stable, so ties keep insertion order
        videos = sorted(videos, key=SORT_KEYS[query.sort_by], reverse=query.sort_order == "desc")

        start = (query.page - 1) * query.limit
        pagination = Pagination.build(query.page, query.limit, len(videos))
        return videos[start:start + query.limit], pagination

    def get_video(self, video_id: str) -> Video:
        video = self.videos.get_by_id(video_id)
        if video is None:
            raise NotFoundError("Video not found")
        return video

    def get_by_id(self, video_id: str, requester: Optional[User] = None) -> Video:
        """Fetch a readable video and count the view."""
        video = self.get_video(video_id)
        if not can_access(requester, video, READ):
            raise ForbiddenError("Access denied to this video")
        viewed = self.videos.increment_views(video_id)
        if viewed is None:
            raise NotFoundError("Video not found")
        return viewed

    def update_video(self, video_id: str, requester: User, changes: dict) -> Video:
        video = self.get_video(video_id)
        ensure_access(requester, video, UPDATE)

        fields = {}
        if changes.get("name") is not None:
            fields["name"] = _clean_name(changes["name"], field="name")
        if changes.get("description") is not None:
            fields["description"] = _clean_description(changes["description"], field="description")
        if changes.get("is_public") is not None:
            fields["is_public"] = bool(changes["is_public"])

        self.videos.update(video, fields)
        logger.info("video_updated", video_id=video.id, user_id=requester.id, fields=sorted(fields))
        return video

    def delete_video(self, video_id: str, requester: User) -> Video:
        video = self.get_video(video_id)
        ensure_access(requester, video, DELETE)

        if video.is_uploaded_file:
            # Catalog removal goes ahead even if the files can't be removed
            self.storage.discard(Path(video.storage_path) if video.storage_path else None)
            self.storage.discard(Path(video.thumbnail_path) if video.thumbnail_path else None)

        self.users.remove_video_id(video.owner_id, video.id)
        self.videos.delete(video.id)
        logger.info("video_deleted", video_id=video.id, owner_id=video.owner_id, user_id=requester.id)
        return video

    def stream_file(self, owner_id: str, filename: str, range_header: Optional[str] = None) -> StreamResult:
        path = self.storage.resolve(owner_id, filename)
        return build_stream(path, range_header)
