"""Tests for the video pipeline service."""

import io
from pathlib import Path

import pytest

from fansite.application.services.video_service import VideoService, has_valid_signature
from fansite.core.exceptions import (
    CorruptFileError,
    ForbiddenError,
    InvalidFileTypeError,
    InvalidSourceError,
    MetadataFetchError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
)
from fansite.domain.models.video import VideoKind
from fansite.domain.schemas.video import VideoQuery

YOUTUBE_URL = "https://www.youtube.com/watch?v=btmN-bWwv0A"


def _stored_files(service: VideoService) -> list[Path]:
    return [p for p in service.storage.videos_path.rglob("*") if p.is_file()]


def _upload(service, owner, data, filename="clip.mp4", content_type="video/mp4", name="Clip", **kwargs):
    return service.upload_file(
        owner_id=owner.id,
        stream=io.BytesIO(data),
        filename=filename,
        content_type=content_type,
        declared_size=kwargs.pop("declared_size", len(data)),
        name=name,
        **kwargs,
    )


def test_upload_mp4(video_service, make_user, mp4_bytes, db) -> None:
    owner = make_user()

    video = _upload(video_service, owner, mp4_bytes, description="  Seattle day one ")

    assert video.kind == VideoKind.UPLOADED_FILE
    assert video.size_bytes == len(mp4_bytes)
    assert video.format == "mp4"
    assert video.duration_seconds == 0
    assert video.description == "Seattle day one"
    assert video.original_name == "clip.mp4"
    assert Path(video.storage_path).read_bytes() == mp4_bytes
    assert video.source_url == f"/api/videos/stream/{owner.id}/{Path(video.storage_path).name}"
    assert Path(video.thumbnail_path).is_file()
    assert video.thumbnail_url.startswith(f"/uploads/videos/{owner.id}/thumb_")
    assert db.users.get_by_id(owner.id).uploaded_video_ids == [video.id]


def test_upload_avi(video_service, make_user, avi_bytes) -> None:
    video = _upload(video_service, make_user(), avi_bytes, filename="clip.AVI", content_type="video/x-msvideo")

    assert video.format == "avi"


def test_declared_oversize_rejected_before_writing(video_service, make_user, mp4_bytes, db) -> None:
    with pytest.raises(PayloadTooLargeError):
        _upload(video_service, make_user(), mp4_bytes, declared_size=600 * 1024 * 1024)

    assert db.videos.count() == 0
    assert _stored_files(video_service) == []


def test_byte_cap_enforced_while_copying(db, tmp_path, youtube_provider, make_user, mp4_bytes) -> None:
    from fansite.infrastructure.storage import VideoStorage
    from fansite.infrastructure.thumbnails import PlaceholderThumbnailGenerator

    service = VideoService(
        db.videos,
        db.users,
        VideoStorage(base_path=tmp_path, chunk_size=64),
        PlaceholderThumbnailGenerator(),
        youtube_provider,
        max_upload_bytes=100,
    )

    with pytest.raises(PayloadTooLargeError):
        _upload(service, make_user(), mp4_bytes, declared_size=None)

    assert db.videos.count() == 0
    assert _stored_files(service) == []


@pytest.mark.parametrize(
    "filename,content_type",
    [
        ("clip.mp4", "video/quicktime"),
        ("clip.mkv", "video/x-matroska"),
        ("clip.mp4", "application/octet-stream"),
        ("clip", "video/mp4"),
    ],
)
def test_rejects_bad_file_type(video_service, make_user, mp4_bytes, filename, content_type) -> None:
    with pytest.raises(InvalidFileTypeError):
        _upload(video_service, make_user(), mp4_bytes, filename=filename, content_type=content_type)

    assert _stored_files(video_service) == []


def test_missing_file(video_service, make_user) -> None:
    with pytest.raises(ValidationError):
        video_service.upload_file(make_user().id, None, None, None, None, "Clip")


def test_corrupt_file_is_removed(video_service, make_user, db) -> None:
    with pytest.raises(CorruptFileError):
        _upload(video_service, make_user(), b"this is not a video at all")

    assert db.videos.count() == 0
    assert _stored_files(video_service) == []


def test_empty_file_is_corrupt(video_service, make_user) -> None:
    with pytest.raises(CorruptFileError):
        _upload(video_service, make_user(), b"")

    assert _stored_files(video_service) == []


def test_blank_name_removes_file(video_service, make_user, mp4_bytes, db) -> None:
    with pytest.raises(ValidationError):
        _upload(video_service, make_user(), mp4_bytes, name="   ")

    assert db.videos.count() == 0
    assert _stored_files(video_service) == []


def test_upload_has_no_length_caps(video_service, make_user, mp4_bytes) -> None:
    video = _upload(video_service, make_user(), mp4_bytes, name="x" * 150, description=" " + "d" * 1500)

    assert video.name == "x" * 150
    assert video.description == "d" * 1500
    assert Path(video.storage_path).is_file()


def test_stream_error_while_copying_removes_file(video_service, make_user, mp4_bytes, db) -> None:
    class DroppedConnection(io.BytesIO):
        reads = 0

        def read(self, size=-1):
            self.reads += 1
            if self.reads > 1:
                raise ConnectionResetError("client went away")
            return super().read(size)

    video_service.storage.chunk_size = 64

    with pytest.raises(ConnectionResetError):
        video_service.upload_file(
            owner_id=make_user().id,
            stream=DroppedConnection(mp4_bytes),
            filename="clip.mp4",
            content_type="video/mp4",
            declared_size=None,
            name="Clip",
        )

    assert db.videos.count() == 0
    assert _stored_files(video_service) == []


def test_thumbnail_failure_is_not_fatal(video_service, make_user, mp4_bytes) -> None:
    class BrokenThumbnails:
        def generate(self, video_path, output_path):
            return None

    video_service.thumbnails = BrokenThumbnails()

    video = _upload(video_service, make_user(), mp4_bytes)

    assert video.thumbnail_url is None
    assert video.thumbnail_path is None


def test_signatures() -> None:
    assert has_valid_signature(b"\x00\x00\x00\x18ftypmp42", "mp4")
    assert has_valid_signature(b"\x00\x00\x00\x08moov\x00\x00\x00\x00", "mov")
    assert not has_valid_signature(b"\x00\x00\x00\x08moov\x00\x00\x00\x00", "mp4")
    assert has_valid_signature(b"RIFF\x00\x00\x00\x00AVI ", "avi")
    assert not has_valid_signature(b"RIFF\x00\x00\x00\x00WAVE", "avi")
    assert not has_valid_signature(b"ftyp", "mp4")


def test_add_youtube_link(video_service, make_user, youtube_provider, db) -> None:
    owner = make_user()

    video = video_service.add_youtube_link(owner.id, "https://youtu.be/btmN-bWwv0A", "Trailer", None)

    assert video.kind == VideoKind.YOUTUBE_LINK
    assert video.format == "youtube"
    assert video.size_bytes == 0
    assert video.duration_seconds == 300
    assert video.source_url == YOUTUBE_URL
    assert video.description == "Description from YouTube"
    assert video.external_metadata.video_id == "btmN-bWwv0A"
    assert video.external_metadata.author == "Stub Channel"
    assert youtube_provider.calls == [YOUTUBE_URL]
    assert db.users.get_by_id(owner.id).uploaded_video_ids == [video.id]


def test_youtube_description_wins_when_given(video_service, make_user) -> None:
    video = video_service.add_youtube_link(make_user().id, YOUTUBE_URL, "Trailer", "Mine")

    assert video.description == "Mine"


@pytest.mark.parametrize(
    "url,name,error",
    [
        ("not a url", "Trailer", ValidationError),
        (YOUTUBE_URL, "", ValidationError),
        (YOUTUBE_URL, "x" * 101, ValidationError),
        ("https://vimeo.com/12345", "Trailer", InvalidSourceError),
        ("https://www.youtube.com/watch?v=short", "Trailer", InvalidSourceError),
    ],
)
def test_youtube_link_rejected(video_service, make_user, db, url, name, error) -> None:
    with pytest.raises(error):
        video_service.add_youtube_link(make_user().id, url, name, None)

    assert db.videos.count() == 0


def test_youtube_lookup_failure_creates_nothing(video_service, make_user, youtube_provider, db) -> None:
    youtube_provider.fail = True

    with pytest.raises(MetadataFetchError):
        video_service.add_youtube_link(make_user().id, YOUTUBE_URL, "Trailer", None)

    assert db.videos.count() == 0


def test_private_videos_hidden_from_others(video_service, make_user, admin, mp4_bytes) -> None:
    owner = make_user()
    other = make_user(name="Abby")
    public = _upload(video_service, owner, mp4_bytes, name="Public")
    private = _upload(video_service, owner, mp4_bytes, name="Private")
    video_service.update_video(private.id, owner, {"is_public": False})

    def ids(requester):
        videos, _ = video_service.list_videos(VideoQuery(), requester)
        return {v.id for v in videos}

    assert ids(owner) == {public.id, private.id}
    assert ids(other) == {public.id}
    assert ids(None) == {public.id}
    assert ids(admin) == {public.id}

    with pytest.raises(ForbiddenError):
        video_service.get_by_id(private.id, other)


def test_list_filters_sort_and_pagination(video_service, make_user, mp4_bytes) -> None:
    owner = make_user()
    other = make_user(name="Abby")
    for name in ("Charlie", "alpha", "Bravo"):
        _upload(video_service, owner, mp4_bytes, name=name)
    video_service.add_youtube_link(other.id, YOUTUBE_URL, "Delta trailer", "bravo cut")

    videos, _ = video_service.list_videos(VideoQuery(sort_by="name", sort_order="asc"))
    assert [v.name for v in videos] == ["alpha", "Bravo", "Charlie", "Delta trailer"]

    videos, _ = video_service.list_videos(VideoQuery(search="BRAVO"))
    assert {v.name for v in videos} == {"Bravo", "Delta trailer"}

    videos, _ = video_service.list_videos(VideoQuery(kind=VideoKind.YOUTUBE_LINK))
    assert [v.name for v in videos] == ["Delta trailer"]

    videos, _ = video_service.list_videos(VideoQuery(owner_id=other.id))
    assert [v.owner_id for v in videos] == [other.id]

    videos, pagination = video_service.list_videos(VideoQuery(sort_by="nombre", sort_order="asc", page=2, limit=3))
    assert [v.name for v in videos] == ["Delta trailer"]
    assert pagination.current_page == 2
    assert pagination.total_pages == 2
    assert pagination.total_count == 4
    assert pagination.has_prev and not pagination.has_next


@pytest.mark.parametrize("sort_order", ["asc", "desc"])
def test_sort_ties_keep_insertion_order(video_service, make_user, mp4_bytes, sort_order) -> None:
    owner = make_user()
    created = [_upload(video_service, owner, mp4_bytes, name=f"Clip {i}").id for i in range(5)]

    videos, _ = video_service.list_videos(VideoQuery(sort_by="viewCount", sort_order=sort_order))

    assert [v.id for v in videos] == created


def test_get_by_id_counts_views(video_service, make_user, mp4_bytes) -> None:
    owner = make_user()
    video = _upload(video_service, owner, mp4_bytes)

    for _ in range(5):
        video_service.get_by_id(video.id, None)

    assert video_service.get_video(video.id).view_count == 5


def test_get_unknown_video(video_service) -> None:
    with pytest.raises(NotFoundError):
        video_service.get_by_id("missing", None)


def test_update_video(video_service, make_user, admin, mp4_bytes) -> None:
    owner = make_user()
    video = _upload(video_service, owner, mp4_bytes)

    updated = video_service.update_video(video.id, owner, {"name": " Renamed ", "description": "New"})
    assert updated.name == "Renamed"
    assert updated.description == "New"

    video_service.update_video(video.id, admin, {"is_public": False})
    assert video_service.get_video(video.id).is_public is False

    with pytest.raises(ForbiddenError):
        video_service.update_video(video.id, make_user(name="Abby"), {"name": "Mine now"})
    with pytest.raises(ValidationError):
        video_service.update_video(video.id, owner, {"name": "x" * 101})
    with pytest.raises(ValidationError):
        video_service.update_video(video.id, owner, {"description": "x" * 1001})


def test_delete_video(video_service, make_user, mp4_bytes, db) -> None:
    owner = make_user()
    video = _upload(video_service, owner, mp4_bytes)

    video_service.delete_video(video.id, owner)

    assert db.videos.get_by_id(video.id) is None
    assert db.users.get_by_id(owner.id).uploaded_video_ids == []
    assert _stored_files(video_service) == []


def test_delete_survives_file_removal_failure(video_service, make_user, admin, mp4_bytes, db, tmp_path) -> None:
    owner = make_user()
    video = _upload(video_service, owner, mp4_bytes)
    # A directory can't be unlinked, so the physical delete fails
    blocker = tmp_path / "not-a-file"
    blocker.mkdir()
    video.storage_path = str(blocker)

    video_service.delete_video(video.id, admin)

    assert db.users.get_by_id(owner.id).uploaded_video_ids == []
    videos, _ = video_service.list_videos(VideoQuery(), owner)
    assert video.id not in {v.id for v in videos}


def test_delete_by_stranger(video_service, make_user, mp4_bytes) -> None:
    video = _upload(video_service, make_user(), mp4_bytes)

    with pytest.raises(ForbiddenError):
        video_service.delete_video(video.id, make_user(name="Abby"))


def test_stream_file(video_service, make_user, mp4_bytes) -> None:
    owner = make_user()
    video = _upload(video_service, owner, mp4_bytes)
    filename = Path(video.storage_path).name

    result = video_service.stream_file(owner.id, filename, "bytes=100-199")
    assert result.content_length == 100

    with pytest.raises(NotFoundError):
        video_service.stream_file(owner.id, "../../etc/passwd")
    with pytest.raises(NotFoundError):
        video_service.stream_file(owner.id, "missing.mp4")
