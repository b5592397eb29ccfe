"""Auth API routes: register, login, refresh, logout, profile."""

from fastapi import APIRouter, Depends, Request, Response, status

from fansite.application.services import auth_service
from fansite.application.services.token_service import TokenService
from fansite.config import get_settings
from fansite.core.exceptions import InvalidRefreshError, error_response
from fansite.domain.models.user import User
from fansite.domain.repositories.user_repository import UserRepository
from fansite.domain.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    ProfileUpdate,
    RegisterRequest,
    UserRead,
)
from fansite.domain.schemas.common import MessageResponse
from fansite.interfaces.api.cookies import clear_refresh_cookie, set_refresh_cookie
from fansite.interfaces.api.deps import get_current_user
from fansite.interfaces.deps import get_token_service, get_user_repository

settings = get_settings()
router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    response: Response,
    users: UserRepository = Depends(get_user_repository),
    tokens: TokenService = Depends(get_token_service),
):
    user, pair = auth_service.register_user(
        users,
        tokens,
        name=body.name,
        last_name=body.last_name,
        email=body.email,
        password=body.password,
        country=body.country,
    )
    set_refresh_cookie(response, pair.refresh_token)
    return AuthResponse(
        message="User registered successfully",
        user=UserRead.model_validate(user),
        access_token=pair.access_token,
    )


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    response: Response,
    users: UserRepository = Depends(get_user_repository),
    tokens: TokenService = Depends(get_token_service),
):
    user, pair = auth_service.login(users, tokens, body.email, body.password)
    set_refresh_cookie(response, pair.refresh_token)
    return AuthResponse(
        message="Login successful",
        user=UserRead.model_validate(user),
        access_token=pair.access_token,
    )


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh(request: Request, response: Response, tokens: TokenService = Depends(get_token_service)):
    try:
        pair = auth_service.refresh_session(tokens, request.cookies.get(settings.REFRESH_COOKIE_NAME))
    except InvalidRefreshError as exc:
        # The failed token is useless to the client, drop it
        failure = error_response(request, exc)
        clear_refresh_cookie(failure)
        return failure

    set_refresh_cookie(response, pair.refresh_token)
    return AccessTokenResponse(access_token=pair.access_token)


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request, response: Response, tokens: TokenService = Depends(get_token_service)):
    auth_service.logout(tokens, request.cookies.get(settings.REFRESH_COOKIE_NAME))
    clear_refresh_cookie(response)
    return MessageResponse(message="Logout successful")


@router.get("/profile", response_model=ProfileResponse)
def get_profile(user: User = Depends(get_current_user)):
    return ProfileResponse(user=UserRead.model_validate(user))


@router.patch("/profile", response_model=ProfileResponse)
def update_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    updated = auth_service.update_profile(users, user, user, body.model_dump(exclude_unset=True))
    return ProfileResponse(message="Profile updated successfully", user=UserRead.model_validate(updated))
