"""User directory: profile statistics, public video lists, user search and dashboards."""

from typing import Optional

import structlog

from fansite.application.services.auth_service import merge_preferences
from fansite.core.exceptions import NotFoundError, ValidationError
from fansite.domain.models.user import User, UserPreferences
from fansite.domain.models.video import Video, VideoKind
from fansite.domain.repositories.user_repository import UserRepository
from fansite.domain.repositories.video_repository import VideoRepository
from fansite.domain.schemas.common import Pagination
from fansite.domain.schemas.user import AccountInfo, DashboardStats, VideoStats

logger = structlog.get_logger(__name__)

RECENT_LIMIT = 5
POPULAR_LIMIT = 5
SEARCH_MIN_LENGTH = 2
STORAGE_LIMIT_BYTES = 5 * 1024 * 1024 * 1024


def newest_first(videos: list[Video]) -> list[Video]:
    return sorted(videos, key=lambda v: v.uploaded_at, reverse=True)


def video_stats(videos: list[Video]) -> VideoStats:
    public = sum(1 for v in videos if v.is_public)
    return VideoStats(
        total_videos=len(videos),
        total_views=sum(v.view_count for v in videos),
        total_size=sum(v.size_bytes for v in videos),
        public_videos=public,
        private_videos=len(videos) - public,
    )


def get_profile_overview(videos: VideoRepository, user: User) -> tuple[VideoStats, list[Video]]:
    owned = videos.list_by_owner(user.id)
    return video_stats(owned), newest_first(owned)[:RECENT_LIMIT]


def get_public_videos_of(
    users: UserRepository,
    videos: VideoRepository,
    user_id: str,
    page: int = 1,
    limit: int = 10,
) -> tuple[User, list[Video], Pagination]:
    user = users.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")

    public = newest_first([v for v in videos.list_by_owner(user_id) if v.is_public])
    start = (page - 1) * limit
    return user, public[start:start + limit], Pagination.build(page, limit, len(public))


def search_users(
    users: UserRepository,
    videos: VideoRepository,
    q: Optional[str],
    limit: int = 10,
) -> list[tuple[User, int]]:
    """Active users matching `q` in name, last name or email, with their public video count."""
    term = (q or "").strip().casefold()
    if len(term) < SEARCH_MIN_LENGTH:
        raise ValidationError(
            f"Search query must be at least {SEARCH_MIN_LENGTH} characters",
            details=[{"field": "q", "message": f"Must be at least {SEARCH_MIN_LENGTH} characters"}],
        )

    matches = users.find(
        lambda u: u.is_active
        and (term in u.name.casefold() or term in u.last_name.casefold() or term in u.email.casefold())
    )
    return [
        (user, sum(1 for v in videos.list_by_owner(user.id) if v.is_public))
        for user in matches[:limit]
    ]


def update_preferences(users: UserRepository, user: User, changes: Optional[dict]) -> UserPreferences:
    if not changes:
        raise ValidationError(details=[{"field": "preferences", "message": "Preferences are required"}])
    preferences = merge_preferences(user.preferences, changes)
    users.update(user, {"preferences": preferences})
    logger.info("preferences_updated", user_id=user.id)
    return preferences


def get_dashboard(videos: VideoRepository, user: User) -> dict:
    owned = videos.list_by_owner(user.id)
    base = video_stats(owned)
    stats = DashboardStats(
        **base.model_dump(),
        uploaded_videos=sum(1 for v in owned if v.kind == VideoKind.UPLOADED_FILE),
        youtube_videos=sum(1 for v in owned if v.kind == VideoKind.YOUTUBE_LINK),
        average_views=round(base.total_views / len(owned)) if owned else 0,
    )
    return {
        "stats": stats,
        "recent_videos": newest_first(owned)[:RECENT_LIMIT],
        "popular_videos": sorted(owned, key=lambda v: v.view_count, reverse=True)[:POPULAR_LIMIT],
        "storage_used": base.total_size,
        "storage_limit": STORAGE_LIMIT_BYTES,
        "account_info": AccountInfo(member_since=user.registered_at, last_login=user.last_login, role=user.role),
    }
