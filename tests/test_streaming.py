"""Tests for byte-range parsing and file streaming."""

import pytest

from fansite.application.services.streaming import build_stream, iter_file, parse_range
from fansite.core.exceptions import RangeNotSatisfiableError

SIZE = 1000


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(bytes(i % 256 for i in range(SIZE)))
    return path


@pytest.mark.parametrize(
    "header,expected",
    [
        ("bytes=100-199", (100, 199)),
        ("bytes=0-0", (0, 0)),
        ("bytes=900-", (900, 999)),
        ("bytes=-100", (900, 999)),
        ("bytes=-5000", (0, 999)),
        ("bytes=990-5000", (990, 999)),
    ],
)
def test_parse_range(header, expected) -> None:
    assert parse_range(header, SIZE) == expected


@pytest.mark.parametrize(
    "header",
    ["bytes=1000-", "bytes=500-100", "bytes=-0", "bytes=-", "items=0-10", "bytes=0-1,5-6", "garbage"],
)
def test_unsatisfiable_range(header) -> None:
    with pytest.raises(RangeNotSatisfiableError) as exc_info:
        parse_range(header, SIZE)
    assert exc_info.value.file_size == SIZE
    assert exc_info.value.status_code == 416


def test_partial_stream(video_file) -> None:
    result = build_stream(video_file, "bytes=100-199")

    assert result.status == "partial"
    assert result.status_code == 206
    assert result.content_length == 100
    assert result.headers()["Content-Range"] == f"bytes 100-199/{SIZE}"
    assert result.headers()["Accept-Ranges"] == "bytes"
    assert result.media_type == "video/mp4"

    body = b"".join(iter_file(result, chunk_size=32))
    assert body == video_file.read_bytes()[100:200]


def test_full_stream(video_file) -> None:
    result = build_stream(video_file, None)

    assert result.status == "full"
    assert result.status_code == 200
    assert result.content_length == SIZE
    assert "Content-Range" not in result.headers()
    assert b"".join(iter_file(result, chunk_size=64)) == video_file.read_bytes()


def test_media_type_from_extension(tmp_path) -> None:
    path = tmp_path / "clip.mov"
    path.write_bytes(b"\x00" * 16)

    assert build_stream(path, None).media_type == "video/quicktime"
