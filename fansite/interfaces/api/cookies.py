"""Refresh-token cookie helpers."""

from fastapi import Response

from fansite.config import get_settings

settings = get_settings()


def _cookie_kwargs() -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "strict",
        "path": "/",
    }


def set_refresh_cookie(response: Response, token: str) -> None:
    max_age = settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 3600
    response.set_cookie(settings.REFRESH_COOKIE_NAME, token, max_age=max_age, **_cookie_kwargs())


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(settings.REFRESH_COOKIE_NAME, **_cookie_kwargs())
