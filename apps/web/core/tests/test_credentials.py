"""Tests for credential verifiers."""

from datetime import UTC, datetime, timedelta

from django.test import RequestFactory

import jwt
import pytest

from apps.web.core.credentials import (
    ProviderTokenVerifier,
    SessionCookieVerifier,
    authenticate,
    build_verifiers,
)
from apps.web.core.models import Role
from apps.web.core.sessions import Identity, Rejected, RejectReason, SessionCodec

PROVIDER_SECRET = "provider-secret-that-is-long-enough-for-hs256"


@pytest.fixture
def rf() -> RequestFactory:
    return RequestFactory()


def _provider_token(secret: str = PROVIDER_SECRET, **claims) -> str:
    payload = {
        "sub": "7",
        "email": "oauth@example.com",
        "exp": datetime.now(UTC) + timedelta(minutes=5),
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


class TestSessionCookieVerifier:
    """Tests for the session cookie scheme."""

    def test_valid_cookie(self, rf, session_secret):
        """A valid cookie yields a session identity."""
        token = SessionCodec(session_secret).issue(
            Identity(user_id=3, email="a@example.com", role=Role.ADMIN)
        )
        request = rf.get("/", HTTP_COOKIE=f"admin_session={token}")

        result = SessionCookieVerifier("admin_session").verify(request)

        assert result == Identity(
            user_id=3, email="a@example.com", role=Role.ADMIN, scheme="session"
        )

    def test_missing_cookie(self, rf):
        """No cookie is reported as missing."""
        result = SessionCookieVerifier("admin_session").verify(rf.get("/"))

        assert result == Rejected(RejectReason.MISSING)

    def test_cookie_for_other_gateway_ignored(self, rf, session_secret):
        """Only the configured cookie name is read."""
        token = SessionCodec(session_secret).issue(
            Identity(user_id=3, email="a@example.com", role=Role.USER)
        )
        request = rf.get("/", HTTP_COOKIE=f"customer_session={token}")

        result = SessionCookieVerifier("admin_session").verify(request)

        assert isinstance(result, Rejected)
        assert result.reason == RejectReason.MISSING


class TestProviderTokenVerifier:
    """Tests for third-party provider tokens."""

    def test_bearer_header(self, rf):
        """A valid bearer token yields a provider identity with USER role."""
        request = rf.get("/", HTTP_AUTHORIZATION=f"Bearer {_provider_token()}")

        result = ProviderTokenVerifier(secret=PROVIDER_SECRET).verify(request)

        assert isinstance(result, Identity)
        assert result.email == "oauth@example.com"
        assert result.role == Role.USER
        assert result.user_id == 7
        assert result.scheme == "provider"

    def test_cookie(self, rf):
        """The provider cookie is read before the header."""
        request = rf.get("/", HTTP_COOKIE=f"provider_session={_provider_token()}")

        result = ProviderTokenVerifier(secret=PROVIDER_SECRET).verify(request)

        assert isinstance(result, Identity)

    def test_disabled_without_secret(self, rf):
        """With no secret configured the scheme never accepts."""
        request = rf.get("/", HTTP_AUTHORIZATION=f"Bearer {_provider_token()}")

        result = ProviderTokenVerifier(secret="").verify(request)

        assert isinstance(result, Rejected)
        assert result.reason == RejectReason.MISSING

    def test_expired(self, rf):
        """An expired provider token is reported as expired."""
        token = _provider_token(exp=datetime.now(UTC) - timedelta(minutes=1))
        request = rf.get("/", HTTP_AUTHORIZATION=f"Bearer {token}")

        result = ProviderTokenVerifier(secret=PROVIDER_SECRET).verify(request)

        assert isinstance(result, Rejected)
        assert result.reason == RejectReason.EXPIRED

    def test_wrong_secret(self, rf):
        """A token from another issuer has a bad signature."""
        token = _provider_token(secret="someone-elses-secret-long-enough-for-hs256")
        request = rf.get("/", HTTP_AUTHORIZATION=f"Bearer {token}")

        result = ProviderTokenVerifier(secret=PROVIDER_SECRET).verify(request)

        assert isinstance(result, Rejected)
        assert result.reason == RejectReason.BAD_SIGNATURE

    def test_requires_email(self, rf):
        """A token without an email claim is malformed."""
        token = _provider_token(email="")
        request = rf.get("/", HTTP_AUTHORIZATION=f"Bearer {token}")

        result = ProviderTokenVerifier(secret=PROVIDER_SECRET).verify(request)

        assert isinstance(result, Rejected)
        assert result.reason == RejectReason.MALFORMED


class TestAuthenticate:
    """Tests for running the verifier chain."""

    def test_first_identity_wins(self, rf, session_secret):
        """The session cookie is tried before the provider token."""
        session = SessionCodec(session_secret).issue(
            Identity(user_id=1, email="s@example.com", role=Role.USER)
        )
        request = rf.get(
            "/",
            HTTP_COOKIE=f"customer_session={session}",
            HTTP_AUTHORIZATION=f"Bearer {_provider_token()}",
        )
        verifiers = [
            SessionCookieVerifier("customer_session"),
            ProviderTokenVerifier(secret=PROVIDER_SECRET),
        ]

        result = authenticate(request, verifiers)

        assert isinstance(result, Identity)
        assert result.scheme == "session"

    def test_falls_back_to_provider(self, rf):
        """Without a session cookie the provider token is used."""
        request = rf.get("/", HTTP_AUTHORIZATION=f"Bearer {_provider_token()}")
        verifiers = [
            SessionCookieVerifier("customer_session"),
            ProviderTokenVerifier(secret=PROVIDER_SECRET),
        ]

        result = authenticate(request, verifiers)

        assert isinstance(result, Identity)
        assert result.scheme == "provider"

    def test_invalid_credential_outranks_missing(self, rf):
        """A present-but-bad cookie is reported over an absent provider token."""
        request = rf.get("/", HTTP_COOKIE="customer_session=garbage")
        verifiers = [
            SessionCookieVerifier("customer_session"),
            ProviderTokenVerifier(secret=PROVIDER_SECRET),
        ]

        result = authenticate(request, verifiers)

        assert isinstance(result, Rejected)
        assert result.reason == RejectReason.MALFORMED

    def test_no_verifiers(self, rf):
        """An empty chain rejects as missing."""
        assert authenticate(rf.get("/"), []) == Rejected(RejectReason.MISSING)


def test_build_verifiers_passes_session_cookie():
    """Session verifiers get the gateway's cookie name."""
    verifiers = build_verifiers(
        [
            "apps.web.core.credentials.SessionCookieVerifier",
            "apps.web.core.credentials.ProviderTokenVerifier",
        ],
        "admin_session",
    )

    assert isinstance(verifiers[0], SessionCookieVerifier)
    assert verifiers[0].cookie_name == "admin_session"
    assert isinstance(verifiers[1], ProviderTokenVerifier)
