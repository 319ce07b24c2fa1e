"""
Credential verifiers - one interface for every way a request can prove identity.

The guard tries verifiers in a fixed priority order and stops at the first
Identity:
1. SessionCookieVerifier: our signed session cookie
2. ProviderTokenVerifier: a token issued by a third-party identity provider
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable

from django.conf import settings
from django.http import HttpRequest
from django.utils.module_loading import import_string

import jwt

from .models import Role
from .sessions import Claim, Identity, Rejected, RejectReason, get_session_codec

logger = logging.getLogger(__name__)

# Lower rank = less informative outcome when every verifier fails
_REJECTION_RANK = {
    RejectReason.MISSING: 0,
    RejectReason.MALFORMED: 1,
    RejectReason.BAD_SIGNATURE: 2,
    RejectReason.EXPIRED: 3,
}


class CredentialVerifier(ABC):
    """Extracts and checks one kind of credential from a request."""

    scheme: str = ""

    @abstractmethod
    def verify(self, request: HttpRequest) -> Identity | Rejected:
        """Return the proven Identity, or Rejected (MISSING if absent)."""


class SessionCookieVerifier(CredentialVerifier):
    """Verifies the gateway's own signed session cookie."""

    scheme = "session"

    def __init__(self, cookie_name: str) -> None:
        self.cookie_name = cookie_name

    def verify(self, request: HttpRequest) -> Identity | Rejected:
        token = request.COOKIES.get(self.cookie_name)
        if not token:
            return Rejected(RejectReason.MISSING)

        result = get_session_codec().verify(token)
        if isinstance(result, Claim):
            return result.to_identity(scheme=self.scheme)
        return result


class ProviderTokenVerifier(CredentialVerifier):
    """
    Verifies a JWT issued by an external identity provider.

    The token is read from the provider cookie or an
    ``Authorization: Bearer`` header. It must carry an ``email`` claim;
    provider users default to the USER role.

    Disabled when PROVIDER_TOKEN_SECRET is blank.
    """

    scheme = "provider"
    algorithms = ["HS256"]

    def __init__(self, cookie_name: str = "", secret: str | None = None) -> None:
        self.cookie_name = cookie_name or getattr(
            settings, "PROVIDER_TOKEN_COOKIE", "provider_session"
        )
        self.secret = secret if secret is not None else settings.PROVIDER_TOKEN_SECRET

    def _extract(self, request: HttpRequest) -> str:
        token = request.COOKIES.get(self.cookie_name, "")
        if token:
            return token
        header = request.headers.get("Authorization", "")
        if header.startswith("Bearer "):
            return header.removeprefix("Bearer ").strip()
        return ""

    def verify(self, request: HttpRequest) -> Identity | Rejected:
        if not self.secret:
            return Rejected(RejectReason.MISSING, "provider tokens disabled")

        token = self._extract(request)
        if not token:
            return Rejected(RejectReason.MISSING)

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=self.algorithms,
                options={"verify_sub": False},
            )
        except jwt.ExpiredSignatureError:
            return Rejected(RejectReason.EXPIRED)
        except jwt.InvalidSignatureError:
            return Rejected(RejectReason.BAD_SIGNATURE)
        except jwt.PyJWTError as e:
            return Rejected(RejectReason.MALFORMED, str(e))

        email = payload.get("email")
        if not email:
            return Rejected(RejectReason.MALFORMED, "token has no email")

        role = payload.get("role") or Role.USER
        if role not in Role.values:
            role = Role.USER

        try:
            user_id = int(payload.get("id") or payload.get("sub") or 0)
        except (TypeError, ValueError):
            user_id = 0

        return Identity(user_id=user_id, email=str(email), role=role, scheme=self.scheme)


def build_verifiers(paths: Iterable[str], session_cookie: str) -> list[CredentialVerifier]:
    """Instantiate verifier classes from dotted paths."""
    verifiers: list[CredentialVerifier] = []
    for path in paths:
        verifier_class = import_string(path)
        if issubclass(verifier_class, SessionCookieVerifier):
            verifiers.append(verifier_class(session_cookie))
        else:
            verifiers.append(verifier_class())
    return verifiers


def authenticate(
    request: HttpRequest, verifiers: Iterable[CredentialVerifier]
) -> Identity | Rejected:
    """
    Run verifiers in order and return the first Identity.

    When all fail, returns the most specific rejection, so a present but
    invalid credential is reported over a missing one.
    """
    worst: Rejected = Rejected(RejectReason.MISSING)
    for verifier in verifiers:
        result = verifier.verify(request)
        if isinstance(result, Identity):
            return result
        logger.debug("%s credential rejected: %s", verifier.scheme, result.reason)
        if _REJECTION_RANK[result.reason] > _REJECTION_RANK[worst.reason]:
            worst = result
    return worst
