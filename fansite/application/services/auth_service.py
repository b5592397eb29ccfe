"""Auth service: registration, login, refresh-token sessions and profile updates."""

import re
from datetime import datetime, timezone
from typing import Any, Optional

import pydantic
import structlog
from passlib.context import CryptContext

from fansite.application.services.authorization import UPDATE, ensure_access
from fansite.application.services.token_service import TokenPair, TokenService
from fansite.config import get_settings
from fansite.core.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    InvalidRefreshError,
    MissingTokenError,
    RefreshTokenError,
    ValidationError,
)
from fansite.domain.models.user import ROLE_USER, User, UserPreferences
from fansite.domain.repositories.user_repository import UserRepository
from fansite.infrastructure.repositories.user_repository import normalize_email

settings = get_settings()
logger = structlog.get_logger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)

PASSWORD_MIN_LENGTH = 8
PASSWORD_SYMBOLS = "@$!%*?&"
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def password_policy_errors(password: str) -> list[str]:
    errors = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    if not any(ch in PASSWORD_SYMBOLS for ch in password):
        errors.append(f"Password must contain at least one special character ({PASSWORD_SYMBOLS})")
    return errors


def _length_error(field: str, label: str, value: str) -> Optional[dict]:
    if not NAME_MIN_LENGTH <= len(value.strip()) <= NAME_MAX_LENGTH:
        return {"field": field, "message": f"{label} must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"}
    return None


def validate_registration(name: str, last_name: str, email: str, password: str, country: str) -> list[dict]:
    """Collect every violated rule instead of stopping at the first."""
    details = [
        err
        for err in (
            _length_error("name", "Name", name),
            _length_error("lastName", "Last name", last_name),
            _length_error("country", "Country", country),
        )
        if err
    ]
    if not EMAIL_RE.match(normalize_email(email)):
        details.append({"field": "email", "message": "Please provide a valid email"})
    details.extend({"field": "password", "message": msg} for msg in password_policy_errors(password))
    return details


def get_user_by_email(users: UserRepository, email: str) -> Optional[User]:
    return users.get_by_email(email)


def create_user(
    users: UserRepository,
    name: str,
    last_name: str,
    email: str,
    password: str,
    country: str,
    role: str = ROLE_USER,
    **extra: Any,
) -> User:
    """Insert a user without policy checks (seed data and register share it)."""
    user = User(
        name=name.strip(),
        last_name=last_name.strip(),
        email=normalize_email(email),
        password_hash=hash_password(password),
        country=country.strip(),
        role=role,
        **extra,
    )
    try:
        return users.create(user)
    except KeyError:
        raise ConflictError("User already exists with this email")


def register_user(
    users: UserRepository,
    tokens: TokenService,
    name: str,
    last_name: str,
    email: str,
    password: str,
    country: str,
) -> tuple[User, TokenPair]:
    details = validate_registration(name, last_name, email, password, country)
    if details:
        raise ValidationError(details=details)

    if get_user_by_email(users, email) is not None:
        raise ConflictError("User already exists with this email")

    user = create_user(users, name, last_name, email, password, country)
    logger.info("user_registered", user_id=user.id)
    return user, tokens.issue_token_pair(user)


def authenticate_user(users: UserRepository, email: str, password: str) -> User:
    """Unknown email, wrong password and deactivated account look the same to callers."""
    user = get_user_by_email(users, email)
    if user is None:
        # Spend the same bcrypt time as a real check
        pwd_context.dummy_verify()
        raise InvalidCredentialsError()
    if not verify_password(password, user.password_hash) or not user.is_active:
        raise InvalidCredentialsError()
    return user


def login(users: UserRepository, tokens: TokenService, email: str, password: str) -> tuple[User, TokenPair]:
    user = authenticate_user(users, email, password)
    users.update(user, {"last_login": datetime.now(timezone.utc)})
    logger.info("user_logged_in", user_id=user.id)
    return user, tokens.issue_token_pair(user)


def refresh_session(tokens: TokenService, refresh_token: Optional[str]) -> TokenPair:
    if not refresh_token:
        raise MissingTokenError()
    try:
        _, pair = tokens.rotate_refresh(refresh_token)
    except RefreshTokenError as exc:
        logger.info("refresh_rejected", reason=exc.__class__.__name__)
        raise InvalidRefreshError()
    return pair


def logout(tokens: TokenService, refresh_token: Optional[str]) -> None:
    tokens.revoke(refresh_token)


def merge_preferences(current: UserPreferences, changes: dict) -> UserPreferences:
    merged = {**current.model_dump(), **{k: v for k, v in changes.items() if v is not None}}
    try:
        return UserPreferences(**merged)
    except pydantic.ValidationError as exc:
        raise ValidationError(
            details=[
                {"field": "preferences." + ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in exc.errors()
            ]
        )


def update_profile(users: UserRepository, actor: User, target: User, changes: dict) -> User:
    """Apply an allow-listed profile patch; `changes` uses model field names."""
    ensure_access(actor, target, UPDATE)

    details = []
    fields: dict[str, Any] = {}
    for field, wire_name, label in (
        ("name", "name", "Name"),
        ("last_name", "lastName", "Last name"),
        ("country", "country", "Country"),
    ):
        value = changes.get(field)
        if value is None:
            continue
        err = _length_error(wire_name, label, value)
        if err:
            details.append(err)
        else:
            fields[field] = value.strip()

    if changes.get("preferences") is not None:
        try:
            fields["preferences"] = merge_preferences(target.preferences, changes["preferences"])
        except ValidationError as exc:
            details.extend(exc.details)

    if details:
        raise ValidationError(details=details)

    return users.update(target, fields)
