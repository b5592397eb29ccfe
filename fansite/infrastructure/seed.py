"""Demo fixture data loaded at startup when SEED_DEMO_DATA is on."""

from datetime import datetime, timezone

import structlog

from fansite.application.services.auth_service import create_user
from fansite.config import get_settings
from fansite.domain.models.user import ROLE_ADMIN, UserPreferences
from fansite.domain.models.video import ExternalMetadata, Video, VideoKind
from fansite.infrastructure.database import InMemoryDatabase
from fansite.infrastructure.youtube import canonical_url

settings = get_settings()
logger = structlog.get_logger(__name__)

ADMIN_ID = "admin_001"
DEMO_USER_ID = "user_001"


def _date(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def seed_users(db: InMemoryDatabase) -> None:
    create_user(
        db.users,
        name="Admin",
        last_name="User",
        email=settings.DEFAULT_ADMIN_EMAIL,
        password=settings.DEFAULT_ADMIN_PASSWORD,
        country="Estados Unidos",
        role=ROLE_ADMIN,
        id=ADMIN_ID,
        registered_at=_date("2024-01-01"),
    )
    create_user(
        db.users,
        name="Ellie",
        last_name="Williams",
        email="ellie@jackson.com",
        password=settings.DEMO_USER_PASSWORD,
        country="Estados Unidos",
        id=DEMO_USER_ID,
        registered_at=_date("2024-01-15"),
        preferences=UserPreferences(theme="dark", autoplay=False, quality="1080p"),
    )


def seed_videos(db: InMemoryDatabase) -> None:
    fixtures = [
        Video(
            name="Trailer Oficial - The Last of Us 2",
            description="Trailer oficial revelando la historia de Ellie",
            kind=VideoKind.YOUTUBE_LINK,
            format="youtube",
            source_url=canonical_url("btmN-bWwv0A"),
            thumbnail_url="https://images.pexels.com/photos/1413412/pexels-photo-1413412.jpeg",
            duration_seconds=300,
            uploaded_at=_date("2024-01-10"),
            owner_id=ADMIN_ID,
            view_count=52428800,
            external_metadata=ExternalMetadata(
                video_id="btmN-bWwv0A",
                title="The Last of Us Part II - Official Trailer",
                author="PlayStation",
                publish_date="2020-05-07",
                external_view_count=52428800,
            ),
        ),
        Video(
            name="Gameplay - Seattle Exploration",
            description="Exploración de Seattle en busca de Abby",
            kind=VideoKind.YOUTUBE_LINK,
            format="youtube",
            source_url=canonical_url("TLkA0RELQ1g"),
            thumbnail_url="https://uploads.worldanvil.com/uploads/images/2b15c848c6f3e46aba209c5e36443d3a.jpg",
            duration_seconds=450,
            uploaded_at=_date("2024-01-25"),
            owner_id=DEMO_USER_ID,
            view_count=104857600,
            external_metadata=ExternalMetadata(
                video_id="TLkA0RELQ1g",
                title="Elephant's Dream",
                author="Blender Foundation",
                publish_date="2006-05-18",
                external_view_count=104857600,
            ),
        ),
    ]
    for video in fixtures:
        db.videos.create(video)
        db.users.add_video_id(video.owner_id, video.id)


def seed_demo_data(db: InMemoryDatabase) -> None:
    """Idempotent: skipped when the admin account already exists."""
    if db.users.get_by_email(settings.DEFAULT_ADMIN_EMAIL) is not None:
        return
    seed_users(db)
    seed_videos(db)
    logger.info("demo_data_seeded", users=db.users.count(), videos=db.videos.count())
