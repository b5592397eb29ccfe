"""User directory routes: profile stats, public videos, search, preferences, dashboard."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from fansite.application.services import user_service
from fansite.domain.models.user import User
from fansite.domain.repositories.user_repository import UserRepository
from fansite.domain.repositories.video_repository import VideoRepository
from fansite.domain.schemas.auth import PreferencesRead, UserRead
from fansite.domain.schemas.user import (
    Dashboard,
    DashboardResponse,
    PreferencesPatch,
    PreferencesResponse,
    PublicOwner,
    UserProfile,
    UserProfileResponse,
    UserSearchResponse,
    UserSummary,
    UserVideosResponse,
)
from fansite.domain.schemas.video import VideoRead
from fansite.interfaces.api.deps import get_current_user
from fansite.interfaces.deps import get_user_repository, get_video_repository

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/profile", response_model=UserProfileResponse)
def get_profile(
    user: User = Depends(get_current_user),
    videos: VideoRepository = Depends(get_video_repository),
):
    stats, recent = user_service.get_profile_overview(videos, user)
    profile = UserProfile(
        **UserRead.model_validate(user).model_dump(),
        stats=stats,
        recent_videos=[VideoRead.model_validate(v) for v in recent],
    )
    return UserProfileResponse(user=profile)


@router.get("/search", response_model=UserSearchResponse)
def search_users(
    q: Optional[str] = Query(None),
    limit: int = Query(10, ge=1, le=50),
    user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
    videos: VideoRepository = Depends(get_video_repository),
):
    results = user_service.search_users(users, videos, q, limit)
    summaries = [
        UserSummary(
            id=found.id,
            name=found.name,
            last_name=found.last_name,
            country=found.country,
            registered_at=found.registered_at,
            video_count=count,
        )
        for found, count in results
    ]
    return UserSearchResponse(users=summaries, total=len(summaries))


@router.patch("/preferences", response_model=PreferencesResponse)
def update_preferences(
    body: PreferencesPatch,
    user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    changes = body.preferences.model_dump(exclude_unset=True) if body.preferences else None
    preferences = user_service.update_preferences(users, user, changes)
    return PreferencesResponse(
        message="Preferences updated successfully",
        preferences=PreferencesRead.model_validate(preferences),
    )


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    user: User = Depends(get_current_user),
    videos: VideoRepository = Depends(get_video_repository),
):
    data = user_service.get_dashboard(videos, user)
    data["recent_videos"] = [VideoRead.model_validate(v) for v in data["recent_videos"]]
    data["popular_videos"] = [VideoRead.model_validate(v) for v in data["popular_videos"]]
    return DashboardResponse(dashboard=Dashboard(**data))


@router.get("/{user_id}/videos", response_model=UserVideosResponse)
def get_user_videos(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    users: UserRepository = Depends(get_user_repository),
    videos: VideoRepository = Depends(get_video_repository),
):
    owner, public, pagination = user_service.get_public_videos_of(users, videos, user_id, page, limit)
    return UserVideosResponse(
        user=PublicOwner(id=owner.id, name=owner.name, last_name=owner.last_name),
        videos=[VideoRead.model_validate(v) for v in public],
        pagination=pagination,
    )
