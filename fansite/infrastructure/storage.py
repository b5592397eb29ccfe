"""Local file storage for uploaded videos and their thumbnails."""

import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

import structlog

from fansite.config import get_settings
from fansite.core.exceptions import NotFoundError, PayloadTooLargeError

settings = get_settings()
logger = structlog.get_logger(__name__)

SAFE_SEGMENT_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
THUMBNAIL_RE = re.compile(r"^thumb_[A-Za-z0-9._-]+\.png$")


@dataclass
class StoredFile:
    """A file written by VideoStorage.save."""

    path: Path
    filename: str
    size_bytes: int


class VideoStorage:
    """Stores uploads under <base>/videos/<owner_id>/.

    Thumbnails sit next to the video as thumb_<stem>.png; only those are
    served under /uploads, videos go through the range-aware stream route.
    """

    def __init__(self, base_path: Optional[Path] = None, chunk_size: Optional[int] = None):
        self.base_path = Path(base_path or settings.UPLOAD_DIR)
        self.videos_path = self.base_path / "videos"
        self.chunk_size = chunk_size or settings.UPLOAD_CHUNK_SIZE

    def owner_dir(self, owner_id: str) -> Path:
        return self.videos_path / owner_id

    def save(self, owner_id: str, stream: BinaryIO, extension: str, max_bytes: int) -> StoredFile:
        """Copy `stream` to disk in chunks.

        Any failure while copying (size cap, client disconnect, disk error)
        removes the partial file before the exception propagates.
        """
        directory = self.owner_dir(owner_id)
        directory.mkdir(parents=True, exist_ok=True)
        filename = f"{int(time.time() * 1000)}_{secrets.token_hex(6)}.{extension}"
        path = directory / filename

        written = 0
        try:
            with open(path, "wb") as out:
                while True:
                    chunk = stream.read(self.chunk_size)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > max_bytes:
                        raise PayloadTooLargeError()
                    out.write(chunk)
        except BaseException:
            self.discard(path)
            raise

        logger.info("upload_stored", owner_id=owner_id, filename=filename, size_bytes=written)
        return StoredFile(path=path, filename=filename, size_bytes=written)

    def resolve(self, owner_id: str, filename: str) -> Path:
        """Map URL segments to a stored file; rejects anything that could escape the upload dir."""
        if not (SAFE_SEGMENT_RE.match(owner_id or "") and SAFE_SEGMENT_RE.match(filename or "")):
            raise NotFoundError("Video file not found")
        path = self.owner_dir(owner_id) / filename
        if not path.is_file():
            raise NotFoundError("Video file not found")
        return path

    @staticmethod
    def thumbnail_path_for(video_path: Path) -> Path:
        return video_path.parent / f"thumb_{video_path.stem}.png"

    @staticmethod
    def is_thumbnail(filename: str) -> bool:
        return bool(THUMBNAIL_RE.match(filename))

    @staticmethod
    def stream_url(owner_id: str, filename: str) -> str:
        return f"/api/videos/stream/{owner_id}/{filename}"

    @staticmethod
    def thumbnail_url(owner_id: str, thumbnail_path: Path) -> str:
        return f"/uploads/videos/{owner_id}/{thumbnail_path.name}"

    @staticmethod
    def read_header(path: Path, size: int = 12) -> bytes:
        with open(path, "rb") as f:
            return f.read(size)

    @staticmethod
    def discard(path: Optional[Path]) -> bool:
        """Best-effort delete; failures are logged, never raised."""
        if path is None:
            return False
        try:
            Path(path).unlink(missing_ok=True)
            return True
        except OSError as exc:
            logger.warning("file_delete_failed", path=str(path), error=str(exc))
            return False
