"""User domain model, held in the in-memory user store."""

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

ROLE_USER = "user"
ROLE_ADMIN = "admin"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_user_id() -> str:
    return f"user_{uuid.uuid4().hex[:16]}"


class UserPreferences(BaseModel):
    theme: Literal["light", "dark"] = "dark"
    autoplay: bool = True
    quality: Literal["auto", "720p", "1080p"] = "auto"


class User(BaseModel):
    id: str = Field(default_factory=new_user_id)
    name: str
    last_name: str
    email: str  # stored lower-cased
    password_hash: str
    country: str
    role: str = ROLE_USER  # user, admin
    registered_at: datetime = Field(default_factory=utcnow)
    is_active: bool = True
    last_login: Optional[datetime] = None
    uploaded_video_ids: list[str] = Field(default_factory=list)
    preferences: UserPreferences = Field(default_factory=UserPreferences)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self):
        return f"<User {self.email}>"
