"""Byte-range streaming of stored video files."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from fansite.core.exceptions import RangeNotSatisfiableError

MEDIA_TYPES = {
    "mp4": "video/mp4",
    "avi": "video/x-msvideo",
    "mov": "video/quicktime",
}
RANGE_RE = re.compile(r"^\s*bytes=(\d*)-(\d*)\s*$")


@dataclass
class StreamResult:
    path: Path
    file_size: int
    start: int
    end: int
    media_type: str
    partial: bool

    @property
    def status(self) -> str:
        return "partial" if self.partial else "full"

    @property
    def status_code(self) -> int:
        return 206 if self.partial else 200

    @property
    def content_length(self) -> int:
        return self.end - self.start + 1 if self.file_size else 0

    def headers(self) -> dict[str, str]:
        headers = {
            "Accept-Ranges": "bytes",
            "Content-Length": str(self.content_length),
        }
        if self.partial:
            headers["Content-Range"] = f"bytes {self.start}-{self.end}/{self.file_size}"
        return headers


def parse_range(header: str, file_size: int) -> tuple[int, int]:
    """Parse a single `bytes=` range into inclusive offsets.

    Supports `a-b`, open-ended `a-` and suffix `-n`; the end is clamped to
    the last byte. Multi-range and unsatisfiable requests raise
    RangeNotSatisfiableError.
    """
    match = RANGE_RE.match(header)
    if not match or match.group(1) == match.group(2) == "":
        raise RangeNotSatisfiableError(file_size)

    first, last = match.groups()
    if first == "":
        suffix = int(last)
        if suffix == 0:
            raise RangeNotSatisfiableError(file_size)
        start = max(0, file_size - suffix)
        end = file_size - 1
    else:
        start = int(first)
        end = int(last) if last else file_size - 1
        end = min(end, file_size - 1)

    if start >= file_size or start > end:
        raise RangeNotSatisfiableError(file_size)
    return start, end


def media_type_for(path: Path) -> str:
    return MEDIA_TYPES.get(path.suffix.lstrip(".").lower(), "application/octet-stream")


def build_stream(path: Path, range_header: Optional[str]) -> StreamResult:
    file_size = path.stat().st_size
    media_type = media_type_for(path)
    if range_header:
        start, end = parse_range(range_header, file_size)
        return StreamResult(path, file_size, start, end, media_type, partial=True)
    return StreamResult(path, file_size, 0, max(file_size - 1, 0), media_type, partial=False)


def iter_file(result: StreamResult, chunk_size: int) -> Iterator[bytes]:
    remaining = result.content_length
    with open(result.path, "rb") as f:
        f.seek(result.start)
        while remaining > 0:
            chunk = f.read(min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk
