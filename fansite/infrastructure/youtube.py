"""YouTube URL parsing and metadata lookup through yt-dlp."""

import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol
from urllib.parse import parse_qs, urlparse

import structlog
import yt_dlp

from fansite.config import get_settings
from fansite.core.exceptions import MetadataFetchError

settings = get_settings()
logger = structlog.get_logger(__name__)

YOUTUBE_HOSTS = {
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "youtube-nocookie.com",
    "www.youtube-nocookie.com",
}
SHORT_HOSTS = {"youtu.be", "www.youtu.be"}
PATH_PREFIXES = ("embed", "shorts", "v", "live")
VIDEO_ID_RE = re.compile(r"^[0-9A-Za-z_-]{11}$")


def is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse((url or "").strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc) and "." in parsed.netloc


def extract_video_id(url: str) -> Optional[str]:
    """Return the 11-character id of a YouTube video URL, or None."""
    parsed = urlparse((url or "").strip())
    host = (parsed.hostname or "").lower()
    segments = [s for s in parsed.path.split("/") if s]

    candidate = None
    if host in SHORT_HOSTS:
        candidate = segments[0] if segments else None
    elif host in YOUTUBE_HOSTS:
        if parsed.path == "/watch":
            candidate = (parse_qs(parsed.query).get("v") or [None])[0]
        elif len(segments) >= 2 and segments[0] in PATH_PREFIXES:
            candidate = segments[1]

    if candidate and VIDEO_ID_RE.match(candidate):
        return candidate
    return None


def canonical_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


@dataclass
class YoutubeMetadata:
    video_id: str
    title: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    publish_date: Optional[str] = None
    view_count: Optional[int] = None
    duration_seconds: int = 0
    thumbnail_url: Optional[str] = None


class YoutubeMetadataProvider(Protocol):
    def fetch(self, url: str) -> YoutubeMetadata:
        """Raise MetadataFetchError when the lookup fails."""
        ...


def _publish_date(upload_date: Optional[str]) -> Optional[str]:
    # yt-dlp reports YYYYMMDD
    if upload_date and len(upload_date) == 8 and upload_date.isdigit():
        return f"{upload_date[:4]}-{upload_date[4:6]}-{upload_date[6:]}"
    return upload_date


def metadata_from_info(info: dict[str, Any]) -> YoutubeMetadata:
    thumbnail = info.get("thumbnail")
    if not thumbnail and info.get("thumbnails"):
        thumbnail = info["thumbnails"][0].get("url")
    return YoutubeMetadata(
        video_id=info.get("id") or "",
        title=info.get("title"),
        author=info.get("uploader") or info.get("channel"),
        description=info.get("description"),
        publish_date=_publish_date(info.get("upload_date")),
        view_count=info.get("view_count"),
        duration_seconds=int(info.get("duration") or 0),
        thumbnail_url=thumbnail,
    )


class YtDlpMetadataProvider:
    """Looks a video up without downloading it."""

    def __init__(self, timeout: Optional[int] = None):
        self.ydl_opts = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "noplaylist": True,
            "socket_timeout": timeout or settings.YOUTUBE_LOOKUP_TIMEOUT,
        }

    def fetch(self, url: str) -> YoutubeMetadata:
        try:
            with yt_dlp.YoutubeDL(self.ydl_opts) as ydl:
                info = ydl.extract_info(url, download=False)
        except Exception as exc:
            logger.warning("youtube_lookup_failed", url=url, error=str(exc))
            raise MetadataFetchError() from exc

        if not info:
            logger.warning("youtube_lookup_empty", url=url)
            raise MetadataFetchError()
        return metadata_from_info(info)
