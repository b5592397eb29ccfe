"""Tests for the demo fixture data."""

from fansite.application.services.auth_service import authenticate_user
from fansite.config import get_settings
from fansite.domain.models.video import VideoKind
from fansite.infrastructure.seed import ADMIN_ID, DEMO_USER_ID, seed_demo_data


def test_seed_demo_data(db) -> None:
    settings = get_settings()

    seed_demo_data(db)
    seed_demo_data(db)

    assert db.users.count() == 2
    assert db.videos.count() == 2
    admin = authenticate_user(db.users, settings.DEFAULT_ADMIN_EMAIL, settings.DEFAULT_ADMIN_PASSWORD)
    assert admin.id == ADMIN_ID
    assert admin.is_admin
    assert db.users.get_by_id(DEMO_USER_ID).preferences.quality == "1080p"

    for video in db.videos.list():
        assert video.kind == VideoKind.YOUTUBE_LINK
        assert video.size_bytes == 0
        assert video.id in db.users.get_by_id(video.owner_id).uploaded_video_ids
