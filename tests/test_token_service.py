"""Tests for the token service and refresh allow-list."""

from datetime import datetime, timedelta, timezone

import pytest

from fansite.application.services.token_service import (
    TokenService,
    create_access_token,
    create_refresh_token,
    token_id,
    user_claims,
)
from fansite.core.exceptions import (
    AuthorizationError,
    ExpiredTokenError,
    InvalidSignatureError,
    InvalidTokenError,
    NotAllowListedError,
    UserInactiveError,
)
from fansite.domain.models.refresh_token import RefreshTokenRecord


@pytest.fixture
def tokens(db) -> TokenService:
    return TokenService(db.refresh_tokens, db.users)


def test_issue_token_pair_allow_lists_refresh(tokens, make_user, db) -> None:
    user = make_user()
    pair = tokens.issue_token_pair(user)

    assert db.refresh_tokens.get(token_id(pair.refresh_token)) is not None
    claims = tokens.verify_access(pair.access_token)
    assert claims["id"] == user.id
    assert claims["email"] == user.email
    assert claims["role"] == "user"


def test_refresh_tokens_are_unique(tokens, make_user) -> None:
    user = make_user()
    first = tokens.issue_token_pair(user)
    second = tokens.issue_token_pair(user)

    assert first.refresh_token != second.refresh_token


def test_expired_access_token(tokens, make_user) -> None:
    token = create_access_token(user_claims(make_user()), expires_delta=timedelta(seconds=-1))

    with pytest.raises(ExpiredTokenError):
        tokens.verify_access(token)


def test_refresh_token_is_not_an_access_token(tokens, make_user) -> None:
    pair = tokens.issue_token_pair(make_user())

    with pytest.raises(InvalidSignatureError):
        tokens.verify_access(pair.refresh_token)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_access_token(tokens, token) -> None:
    with pytest.raises(InvalidSignatureError):
        tokens.verify_access(token)


def test_rotate_refresh_replaces_entry(tokens, make_user, db) -> None:
    user = make_user()
    old = tokens.issue_token_pair(user)

    rotated_user, new = tokens.rotate_refresh(old.refresh_token)

    assert rotated_user.id == user.id
    assert db.refresh_tokens.get(token_id(old.refresh_token)) is None
    assert db.refresh_tokens.get(token_id(new.refresh_token)) is not None
    assert tokens.verify_access(new.access_token)["id"] == user.id


def test_rotated_refresh_token_cannot_be_reused(tokens, make_user) -> None:
    old = tokens.issue_token_pair(make_user())
    tokens.rotate_refresh(old.refresh_token)

    with pytest.raises(AuthorizationError):
        tokens.rotate_refresh(old.refresh_token)


def test_rotate_unknown_token(tokens, make_user) -> None:
    token, _ = create_refresh_token(user_claims(make_user()))

    with pytest.raises(NotAllowListedError):
        tokens.rotate_refresh(token)


def test_rotate_undecodable_token_drops_entry(tokens, make_user, db) -> None:
    user = make_user()
    bogus = "definitely.not.valid"
    db.refresh_tokens.add(
        RefreshTokenRecord(
            token_id=token_id(bogus),
            user_id=user.id,
            expires_at=datetime.now(timezone.utc) + timedelta(days=1),
        )
    )

    with pytest.raises(InvalidTokenError):
        tokens.rotate_refresh(bogus)
    assert db.refresh_tokens.get(token_id(bogus)) is None


def test_rotate_for_inactive_user(tokens, make_user, db) -> None:
    user = make_user()
    pair = tokens.issue_token_pair(user)
    db.users.update(user, {"is_active": False})

    with pytest.raises(UserInactiveError):
        tokens.rotate_refresh(pair.refresh_token)
    assert db.refresh_tokens.get(token_id(pair.refresh_token)) is None


def test_revoke_is_idempotent(tokens, make_user, db) -> None:
    pair = tokens.issue_token_pair(make_user())

    tokens.revoke(pair.refresh_token)
    tokens.revoke(pair.refresh_token)
    tokens.revoke(None)

    assert db.refresh_tokens.count() == 0


def test_issuing_purges_expired_entries(tokens, make_user, db) -> None:
    db.refresh_tokens.add(
        RefreshTokenRecord(
            token_id="stale",
            user_id="user_gone",
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )
    )

    tokens.issue_token_pair(make_user())

    assert db.refresh_tokens.get("stale") is None
    assert db.refresh_tokens.count() == 1
