"""Pydantic schemas for User and Auth."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, Field

from fansite.domain.schemas.common import CamelModel


class PreferencesRead(CamelModel):
    theme: str
    autoplay: bool
    quality: str


class UserRead(CamelModel):
    """Public user shape; never carries the password hash."""

    id: str
    name: str
    last_name: str
    email: str
    country: str
    role: str
    registered_at: datetime
    is_active: bool
    last_login: Optional[datetime] = None
    uploaded_video_ids: list[str]
    preferences: PreferencesRead


class RegisterRequest(BaseModel):
    # Rules are checked by the auth service so all violations are reported together
    name: str = Field("", validation_alias=AliasChoices("name", "nombre"))
    last_name: str = Field("", validation_alias=AliasChoices("lastName", "last_name", "apellidos"))
    email: str = ""
    password: str = ""
    country: str = Field("", validation_alias=AliasChoices("country", "pais"))


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=1)


class AuthResponse(CamelModel):
    message: str
    user: UserRead
    access_token: str


class AccessTokenResponse(CamelModel):
    access_token: str


class PreferencesUpdate(BaseModel):
    model_config = {"extra": "ignore"}

    theme: Optional[Literal["light", "dark"]] = None
    autoplay: Optional[bool] = None
    quality: Optional[Literal["auto", "720p", "1080p"]] = None


class ProfileUpdate(BaseModel):
    """Only these fields are mutable; anything else in the body is dropped."""

    model_config = {"extra": "ignore"}

    name: Optional[str] = Field(None, validation_alias=AliasChoices("name", "nombre"))
    last_name: Optional[str] = Field(None, validation_alias=AliasChoices("lastName", "last_name", "apellidos"))
    country: Optional[str] = Field(None, validation_alias=AliasChoices("country", "pais"))
    preferences: Optional[PreferencesUpdate] = None


class ProfileResponse(CamelModel):
    message: Optional[str] = None
    user: UserRead
