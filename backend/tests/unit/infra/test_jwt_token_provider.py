"""
Unit tests for JWTTokenProvider.

Covers issuing and verifying both token families, expiry (with freezegun),
secret/kind separation and malformed input.
"""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest
from freezegun import freeze_time

from vidstream.infra.jwt.jwt_token_provider import JWTTokenProvider, SigningConfig, TokenSettings
from vidstream.services._shared.ports import InvalidTokenError, TokenKind


def _settings(**overrides) -> TokenSettings:
    data = {
        "access": SigningConfig(secret="access-secret", expires=timedelta(minutes=15)),
        "refresh": SigningConfig(secret="refresh-secret", expires=timedelta(days=10)),
    }
    data.update(overrides)
    return TokenSettings(**data)


@pytest.fixture()
def provider() -> JWTTokenProvider:
    return JWTTokenProvider(_settings())


def test_access_token_roundtrip(provider):
    token = provider.issue_access(7, {"username": "alice", "email": "a@example.com"})

    claims = provider.verify(token, TokenKind.ACCESS)

    assert claims.user_id == 7
    assert claims.kind is TokenKind.ACCESS
    assert claims.extra == {"username": "alice", "email": "a@example.com"}
    assert claims.expires_at - claims.issued_at == timedelta(minutes=15)


def test_refresh_token_carries_identity_only(provider):
    claims = provider.verify(provider.issue_refresh(7), TokenKind.REFRESH)

    assert claims.user_id == 7
    assert claims.extra == {}
    assert claims.expires_at - claims.issued_at == timedelta(days=10)


def test_registered_claims_cannot_be_overridden(provider):
    token = provider.issue_access(7, {"sub": "999", "typ": "refresh"})

    claims = provider.verify(token, TokenKind.ACCESS)

    assert claims.user_id == 7


def test_every_token_is_unique(provider):
    first = provider.issue_refresh(1)
    second = provider.issue_refresh(1)

    assert first != second
    assert (
        provider.verify(first, TokenKind.REFRESH).jti
        != provider.verify(second, TokenKind.REFRESH).jti
    )


@pytest.mark.parametrize(
    ("issue", "kind"),
    [("issue_refresh", TokenKind.ACCESS), ("issue_access", TokenKind.REFRESH)],
)
def test_token_kinds_are_not_interchangeable(provider, issue, kind):
    token = getattr(provider, issue)(3)

    with pytest.raises(InvalidTokenError):
        provider.verify(token, kind)


def test_kind_is_checked_even_with_matching_secret(provider):
    # Signed with the access secret but claiming to be a refresh token.
    forged = jwt.encode(
        {"sub": "3", "typ": "refresh", "iat": 0, "exp": 4102444800, "jti": "x"},
        "access-secret",
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError, match="expected access token"):
        provider.verify(forged, TokenKind.ACCESS)


def test_expired_token_is_rejected(provider):
    with freeze_time("2024-01-01 12:00:00"):
        token = provider.issue_access(1)

    with freeze_time("2024-01-01 12:14:59"):
        assert provider.verify(token, TokenKind.ACCESS).user_id == 1

    with freeze_time("2024-01-01 12:15:01"), pytest.raises(InvalidTokenError, match="expired"):
        provider.verify(token, TokenKind.ACCESS)


def test_token_from_other_secret_is_rejected(provider):
    other = JWTTokenProvider(
        _settings(access=SigningConfig(secret="elsewhere", expires=timedelta(minutes=15)))
    )

    with pytest.raises(InvalidTokenError):
        provider.verify(other.issue_access(1), TokenKind.ACCESS)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", None])
def test_malformed_tokens_are_rejected(provider, token):
    with pytest.raises(InvalidTokenError):
        provider.verify(token, TokenKind.ACCESS)


def test_missing_required_claim_is_rejected(provider):
    token = jwt.encode({"sub": "1", "typ": "access"}, "access-secret", algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        provider.verify(token, TokenKind.ACCESS)


def test_non_numeric_subject_is_rejected(provider):
    token = jwt.encode(
        {"sub": "abc", "typ": "access", "iat": 0, "exp": 4102444800, "jti": "x"},
        "access-secret",
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError, match="malformed"):
        provider.verify(token, TokenKind.ACCESS)


class TestTokenSettings:
    def test_secrets_must_differ(self):
        with pytest.raises(ValueError, match="distinct"):
            _settings(refresh=SigningConfig(secret="access-secret", expires=timedelta(days=1)))

    def test_secrets_must_be_set(self):
        with pytest.raises(ValueError):
            _settings(access=SigningConfig(secret="", expires=timedelta(days=1)))

    def test_from_mapping(self):
        settings = TokenSettings.from_mapping(
            {
                "ACCESS_TOKEN_SECRET": "a",
                "ACCESS_TOKEN_EXPIRY": "15m",
                "REFRESH_TOKEN_SECRET": "r",
                "REFRESH_TOKEN_EXPIRY": "10d",
            }
        )

        assert settings.access.expires == timedelta(minutes=15)
        assert settings.refresh.expires == timedelta(days=10)
        assert settings.access.algorithm == "HS256"
