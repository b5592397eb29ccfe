"""
API Dependencies.
"""

from fastapi import Depends

from fansite.application.services.token_service import TokenService
from fansite.application.services.video_service import VideoService
from fansite.domain.repositories.refresh_token_repository import RefreshTokenRepository
from fansite.domain.repositories.user_repository import UserRepository
from fansite.domain.repositories.video_repository import VideoRepository
from fansite.infrastructure.database import InMemoryDatabase, get_db
from fansite.infrastructure.storage import VideoStorage
from fansite.infrastructure.thumbnails import PlaceholderThumbnailGenerator, ThumbnailGenerator
from fansite.infrastructure.youtube import YoutubeMetadataProvider, YtDlpMetadataProvider


def get_user_repository(db: InMemoryDatabase = Depends(get_db)) -> UserRepository:
    """Get user repository instance."""
    return db.users


def get_video_repository(db: InMemoryDatabase = Depends(get_db)) -> VideoRepository:
    """Get video repository instance."""
    return db.videos


def get_refresh_token_repository(db: InMemoryDatabase = Depends(get_db)) -> RefreshTokenRepository:
    return db.refresh_tokens


def get_token_service(
    refresh_tokens: RefreshTokenRepository = Depends(get_refresh_token_repository),
    users: UserRepository = Depends(get_user_repository),
) -> TokenService:
    return TokenService(refresh_tokens, users)


def get_video_storage() -> VideoStorage:
    return VideoStorage()


def get_thumbnail_generator() -> ThumbnailGenerator:
    return PlaceholderThumbnailGenerator()


def get_youtube_provider() -> YoutubeMetadataProvider:
    return YtDlpMetadataProvider()


def get_video_service(
    videos: VideoRepository = Depends(get_video_repository),
    users: UserRepository = Depends(get_user_repository),
    storage: VideoStorage = Depends(get_video_storage),
    thumbnails: ThumbnailGenerator = Depends(get_thumbnail_generator),
    youtube_provider: YoutubeMetadataProvider = Depends(get_youtube_provider),
) -> VideoService:
    return VideoService(videos, users, storage, thumbnails, youtube_provider)
