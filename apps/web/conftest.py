"""
Pytest configuration for Django app tests.
"""

from collections.abc import Callable

from django.test import Client as DjangoClient

import pytest

from apps.web.core.models import Role, User
from apps.web.core.sessions import Identity, SessionCodec

TEST_SESSION_SECRET = "test-session-secret-with-enough-bytes-for-hs256"


@pytest.fixture(autouse=True)
def session_secret(settings):
    """Sign session tokens with a fixed secret."""
    settings.SESSION_TOKEN_SECRET = TEST_SESSION_SECRET
    settings.PROVIDER_TOKEN_SECRET = ""
    return TEST_SESSION_SECRET


@pytest.fixture
def api_client() -> DjangoClient:
    """Django test client."""
    return DjangoClient()


@pytest.fixture
def customer(db) -> User:
    """A USER account."""
    return User.objects.create_user(
        email="alice@example.com",
        password="secret123",
        name="Alice Nguyen",
    )


@pytest.fixture
def admin_user(db) -> User:
    """An ADMIN account."""
    return User.objects.create_user(
        email="admin@example.com",
        password="admin-pass",
        name="Admin",
        role=Role.ADMIN,
    )


@pytest.fixture
def admin_gateway(settings):
    """Serve the admin gateway for the duration of a test."""
    settings.GATEWAY = "admin"
    settings.ROOT_URLCONF = "apps.web.config.urls_admin"
    settings.ACCESS_GUARD = settings.ACCESS_GUARDS["admin"]
    return settings


@pytest.fixture
def customer_gateway(settings):
    """Serve the customer gateway for the duration of a test."""
    settings.GATEWAY = "customer"
    settings.ROOT_URLCONF = "apps.web.config.urls_customer"
    settings.ACCESS_GUARD = settings.ACCESS_GUARDS["customer"]
    return settings


@pytest.fixture
def issue_token(session_secret) -> Callable[..., str]:
    """Build a signed session token for a user."""

    def _issue(user: User, **kwargs) -> str:
        codec = SessionCodec(session_secret)
        identity = Identity(user_id=user.pk, email=user.email, role=user.role)
        return codec.issue(identity, **kwargs)

    return _issue


@pytest.fixture
def sign_in(issue_token, settings) -> Callable[[DjangoClient, User], DjangoClient]:
    """Put a session cookie for ``user`` on a test client."""

    def _sign_in(http_client: DjangoClient, user: User) -> DjangoClient:
        cookie = settings.ACCESS_GUARD["SESSION_COOKIE"]
        http_client.cookies[cookie] = issue_token(user)
        return http_client

    return _sign_in
