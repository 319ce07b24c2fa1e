"""
Access guard configuration and path classification.

Each gateway describes its guard in settings.ACCESS_GUARD:

    ACCESS_GUARD = {
        "SESSION_COOKIE": "admin_session",
        "LOGIN_URL": "/login",
        "CALLBACK_PARAM": "callbackUrl",
        "PUBLIC_PATHS": [...],      # matched exactly
        "PUBLIC_PREFIXES": [...],   # "/x/" matches by prefix, "/x" matches /x and /x/...
        "API_PREFIXES": ["/api/"],  # rejected with JSON 401 instead of a redirect
        "CLEAR_COOKIES": [...],     # deleted on rejection
        "VERIFIERS": [...],         # dotted paths, tried in order
    }
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from django.conf import settings
from django.http import HttpRequest

from .credentials import CredentialVerifier, authenticate, build_verifiers
from .managers import normalize_email
from .models import User
from .sessions import Identity, Rejected


class AccessState(StrEnum):
    """Guard outcome for one request."""

    PUBLIC = "public"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class GuardConfig:
    """Per-gateway guard settings."""

    session_cookie: str
    login_url: str = "/login"
    callback_param: str = "from"
    public_paths: tuple[str, ...] = ()
    public_prefixes: tuple[str, ...] = ()
    api_prefixes: tuple[str, ...] = ("/api/",)
    clear_cookies: tuple[str, ...] = ()
    verifier_paths: tuple[str, ...] = field(default=())

    @classmethod
    def from_settings(cls, conf: dict[str, Any] | None = None) -> "GuardConfig":
        conf = conf if conf is not None else settings.ACCESS_GUARD
        session_cookie = conf["SESSION_COOKIE"]
        return cls(
            session_cookie=session_cookie,
            login_url=conf.get("LOGIN_URL", "/login"),
            callback_param=conf.get("CALLBACK_PARAM", "from"),
            public_paths=tuple(conf.get("PUBLIC_PATHS", ())),
            public_prefixes=tuple(conf.get("PUBLIC_PREFIXES", ())),
            api_prefixes=tuple(conf.get("API_PREFIXES", ("/api/",))),
            clear_cookies=tuple(conf.get("CLEAR_COOKIES", (session_cookie,))),
            verifier_paths=tuple(conf.get("VERIFIERS", ())),
        )

    def is_public(self, path: str) -> bool:
        """Check whether ``path`` skips authentication."""
        if path in self.public_paths:
            return True
        return any(_matches_prefix(path, prefix) for prefix in self.public_prefixes)

    def is_api(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.api_prefixes)

    def verifiers(self) -> list[CredentialVerifier]:
        return build_verifiers(self.verifier_paths, self.session_cookie)


def _matches_prefix(path: str, prefix: str) -> bool:
    if prefix.endswith("/"):
        return path.startswith(prefix)
    return path == prefix or path.startswith(f"{prefix}/")


def identify(request: HttpRequest, config: GuardConfig | None = None) -> Identity | Rejected:
    """
    Resolve the identity behind a request, caching it on the request.

    The guard sets request.identity for protected paths; public endpoints
    that optionally use an identity call this to run the same verifier chain.
    """
    cached = getattr(request, "identity", None)
    if isinstance(cached, Identity):
        return cached

    config = config or GuardConfig.from_settings()
    result = authenticate(request, config.verifiers())
    if isinstance(result, Identity):
        request.identity = result  # type: ignore[attr-defined]
    return result


def current_user(request: HttpRequest) -> User | None:
    """
    The local account behind the request's identity, if any.

    Session identities are resolved by id. Provider identities carry no
    local id, so they are matched by email.
    """
    identity = identify(request)
    if not isinstance(identity, Identity):
        return None

    user = None
    if identity.scheme == "session":
        user = User.objects.filter(pk=identity.user_id).first()
    if user is None:
        user = User.objects.filter(email=normalize_email(identity.email)).first()
    return user
