"""FastAPI dependency: Bearer token authentication."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fansite.application.services.token_service import TokenService
from fansite.core.exceptions import AuthenticationError, AuthorizationError
from fansite.domain.models.user import User
from fansite.domain.repositories.user_repository import UserRepository
from fansite.interfaces.deps import get_token_service, get_user_repository

# auto_error=False so a missing header goes through our own error envelope
security = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    """Extract and validate the current user from the access token."""
    if credentials is None:
        raise AuthenticationError("Access token required")

    payload = tokens.verify_access(credentials.credentials)

    user = users.get_by_id(payload["id"])
    if user is None or not user.is_active:
        raise AuthorizationError("User not found or inactive")
    # Picked up by RequestLoggingMiddleware when the request completes
    request.state.user_id = user.id
    return user


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
    users: UserRepository = Depends(get_user_repository),
) -> Optional[User]:
    """Like get_current_user, but anonymous or unusable tokens yield None."""
    if credentials is None:
        return None
    try:
        return get_current_user(request, credentials, tokens, users)
    except (AuthenticationError, AuthorizationError):
        return None

