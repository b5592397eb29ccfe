"""Token service: signed access/refresh tokens and the refresh allow-list."""

import hashlib
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from jose import ExpiredSignatureError, JWTError, jwt

from fansite.config import get_settings
from fansite.core.exceptions import (
    ExpiredTokenError,
    InvalidSignatureError,
    InvalidTokenError,
    NotAllowListedError,
    UserInactiveError,
)
from fansite.domain.models.refresh_token import RefreshTokenRecord
from fansite.domain.models.user import User
from fansite.domain.repositories.refresh_token_repository import RefreshTokenRepository
from fansite.domain.repositories.user_repository import UserRepository

settings = get_settings()
logger = structlog.get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str


def token_id(token: str) -> str:
    """Allow-list key for a refresh token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def user_claims(user: User) -> dict:
    return {"sub": user.id, "id": user.id, "email": user.email, "role": user.role}


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire, "type": ACCESS_TOKEN_TYPE})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> tuple[str, datetime]:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    )
    # jti keeps two refresh tokens minted in the same second distinct
    to_encode.update({"exp": expire, "type": REFRESH_TOKEN_TYPE, "jti": uuid.uuid4().hex})
    token = jwt.encode(to_encode, settings.REFRESH_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return token, expire


def decode_refresh_token(token: str) -> dict:
    payload = jwt.decode(token, settings.REFRESH_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise JWTError("not a refresh token")
    return payload


class TokenService:
    """Mints and verifies tokens; owns the refresh-token allow-list."""

    def __init__(self, refresh_tokens: RefreshTokenRepository, users: UserRepository):
        self.refresh_tokens = refresh_tokens
        self.users = users

    def _mint(self, user: User) -> tuple[TokenPair, RefreshTokenRecord]:
        claims = user_claims(user)
        access = create_access_token(claims)
        refresh, expires_at = create_refresh_token(claims)
        record = RefreshTokenRecord(token_id=token_id(refresh), user_id=user.id, expires_at=expires_at)
        return TokenPair(access_token=access, refresh_token=refresh), record

    def issue_token_pair(self, user: User) -> TokenPair:
        self.refresh_tokens.purge_expired(datetime.now(timezone.utc))
        pair, record = self._mint(user)
        self.refresh_tokens.add(record)
        return pair

    def verify_access(self, token: Optional[str]) -> dict:
        if not token:
            raise InvalidSignatureError()
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        except ExpiredSignatureError:
            raise ExpiredTokenError()
        except JWTError:
            raise InvalidSignatureError()
        if payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("id"):
            raise InvalidSignatureError()
        return payload

    def rotate_refresh(self, old_token: str) -> tuple[User, TokenPair]:
        """Exchange an allow-listed refresh token for a new pair; the old one dies."""
        old_id = token_id(old_token)
        if self.refresh_tokens.get(old_id) is None:
            raise NotAllowListedError()

        try:
            payload = decode_refresh_token(old_token)
        except JWTError:
            self.refresh_tokens.remove(old_id)
            raise InvalidTokenError()

        user = self.users.get_by_id(payload.get("id", ""))
        if user is None or not user.is_active:
            self.refresh_tokens.remove(old_id)
            raise UserInactiveError()

        pair, record = self._mint(user)
        if not self.refresh_tokens.replace(old_id, record):
            # Lost a race with a concurrent rotation or logout of the same token
            raise NotAllowListedError()
        logger.info("refresh_token_rotated", user_id=user.id)
        return user, pair

    def revoke(self, refresh_token: Optional[str]) -> None:
        if refresh_token:
            self.refresh_tokens.remove(token_id(refresh_token))
