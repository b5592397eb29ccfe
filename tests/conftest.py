"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="fansite-test-")
os.environ["SECRET_KEY"] = "test-access-secret"
os.environ["REFRESH_SECRET_KEY"] = "test-refresh-secret"

from fansite.application.services.auth_service import create_user  # noqa: E402
from fansite.application.services.video_service import VideoService  # noqa: E402
from fansite.core.exceptions import MetadataFetchError  # noqa: E402
from fansite.domain.models.user import ROLE_ADMIN, User  # noqa: E402
from fansite.infrastructure.database import InMemoryDatabase, get_db  # noqa: E402
from fansite.infrastructure.storage import VideoStorage  # noqa: E402
from fansite.infrastructure.thumbnails import PlaceholderThumbnailGenerator  # noqa: E402
from fansite.infrastructure.youtube import YoutubeMetadata, extract_video_id  # noqa: E402

STRONG_PASSWORD = "TestPassword123!"

# ftyp box header followed by padding, enough for range requests
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00\x00\x00\x00mp42isom" + bytes(range(256)) * 4
AVI_BYTES = b"RIFF\x00\x10\x00\x00AVI LIST" + b"\x00" * 256


class StubYoutubeProvider:
    """Offline stand-in for the yt-dlp lookup."""

    def __init__(self):
        self.fail = False
        self.calls: list[str] = []

    def fetch(self, url: str) -> YoutubeMetadata:
        self.calls.append(url)
        if self.fail:
            raise MetadataFetchError()
        video_id = extract_video_id(url)
        return YoutubeMetadata(
            video_id=video_id,
            title="Stub title",
            author="Stub Channel",
            description="Description from YouTube",
            publish_date="2020-05-07",
            view_count=1234,
            duration_seconds=300,
            thumbnail_url=f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
        )


@pytest.fixture(autouse=True)
def db() -> Generator[InMemoryDatabase, None, None]:
    """Fresh in-memory store for every test."""
    database = get_db()
    database.reset()
    yield database
    database.reset()


@pytest.fixture
def youtube_provider() -> StubYoutubeProvider:
    return StubYoutubeProvider()


@pytest.fixture
def make_user(db: InMemoryDatabase) -> Callable[..., User]:
    """Insert a user directly, skipping the registration policy."""
    counter = {"n": 0}

    def _make(name: str = "Ellie", role: str = "user", **extra) -> User:
        counter["n"] += 1
        return create_user(
            db.users,
            name=name,
            last_name="Williams",
            email=extra.pop("email", f"{name.lower()}{counter['n']}@jackson.com"),
            password=STRONG_PASSWORD,
            country="Estados Unidos",
            role=role,
            **extra,
        )

    return _make


@pytest.fixture
def admin(make_user) -> User:
    return make_user(name="Admin", role=ROLE_ADMIN)


@pytest.fixture
def video_service(db: InMemoryDatabase, tmp_path, youtube_provider) -> VideoService:
    return VideoService(
        db.videos,
        db.users,
        VideoStorage(base_path=tmp_path),
        PlaceholderThumbnailGenerator(),
        youtube_provider,
    )


@pytest.fixture
def test_client(youtube_provider) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app; cookies never leak between tests."""
    from fansite.interfaces.deps import get_youtube_provider
    from fansite.main import app

    app.dependency_overrides[get_youtube_provider] = lambda: youtube_provider
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def register(test_client: TestClient) -> Callable[..., tuple[dict, str]]:
    """Register through the API; returns (user payload, access token)."""

    def _register(email: str = "ellie@jackson.com", name: str = "Ellie", **overrides) -> tuple[dict, str]:
        body = {
            "name": name,
            "lastName": "Williams",
            "email": email,
            "password": STRONG_PASSWORD,
            "country": "Estados Unidos",
            **overrides,
        }
        response = test_client.post("/api/auth/register", json=body)
        assert response.status_code == 201, response.text
        data = response.json()
        return data["user"], data["accessToken"]

    return _register


@pytest.fixture
def password() -> str:
    return STRONG_PASSWORD


@pytest.fixture
def mp4_bytes() -> bytes:
    return MP4_BYTES


@pytest.fixture
def avi_bytes() -> bytes:
    return AVI_BYTES
