"""Pydantic schemas for the user directory (profiles, search, dashboard)."""

from datetime import datetime
from typing import Optional

from fansite.domain.schemas.auth import PreferencesRead, PreferencesUpdate, UserRead
from fansite.domain.schemas.common import CamelModel, Pagination
from fansite.domain.schemas.video import VideoRead


class VideoStats(CamelModel):
    total_videos: int = 0
    total_views: int = 0
    total_size: int = 0
    public_videos: int = 0
    private_videos: int = 0


class DashboardStats(VideoStats):
    uploaded_videos: int = 0
    youtube_videos: int = 0
    average_views: int = 0


class UserProfile(UserRead):
    stats: VideoStats
    recent_videos: list[VideoRead]


class UserProfileResponse(CamelModel):
    user: UserProfile


class UserSummary(CamelModel):
    id: str
    name: str
    last_name: str
    country: str
    registered_at: datetime
    video_count: int


class UserSearchResponse(CamelModel):
    users: list[UserSummary]
    total: int


class PublicOwner(CamelModel):
    id: str
    name: str
    last_name: str


class UserVideosResponse(CamelModel):
    user: PublicOwner
    videos: list[VideoRead]
    pagination: Pagination


class PreferencesPatch(CamelModel):
    preferences: Optional[PreferencesUpdate] = None


class PreferencesResponse(CamelModel):
    message: str
    preferences: PreferencesRead


class AccountInfo(CamelModel):
    member_since: datetime
    last_login: Optional[datetime] = None
    role: str


class Dashboard(CamelModel):
    stats: DashboardStats
    recent_videos: list[VideoRead]
    popular_videos: list[VideoRead]
    storage_used: int
    storage_limit: int
    account_info: AccountInfo


class DashboardResponse(CamelModel):
    dashboard: Dashboard
