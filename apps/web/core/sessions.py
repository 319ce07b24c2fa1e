"""
Session codec - signed, time-limited session tokens.

A token is an HS256 JWT carrying one Claim:
    {"sub": "<user id>", "email": ..., "role": "ADMIN" | "USER", "iat": ..., "exp": ...}

verify() never raises: a bad token is an expected outcome, reported as
Rejected with a reason.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from django.conf import settings

import jwt

from .models import Role

DEFAULT_TTL = timedelta(minutes=10)


class RejectReason(StrEnum):
    """Why a credential was not accepted."""

    MISSING = "missing"
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Identity:
    """An authenticated subject, independent of how it was proven."""

    user_id: int
    email: str
    role: str
    scheme: str = "session"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class Claim:
    """Decoded contents of a session token."""

    user_id: int
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime

    def to_identity(self, scheme: str = "session") -> Identity:
        return Identity(
            user_id=self.user_id, email=self.email, role=self.role, scheme=scheme
        )


@dataclass(frozen=True)
class Rejected:
    """A credential that failed verification."""

    reason: RejectReason
    detail: str = ""


class SessionCodec:
    """
    Issues and verifies session tokens with a process-wide secret.

    Usage:
        codec = get_session_codec()
        token = codec.issue(identity, Role.ADMIN)
        result = codec.verify(token)  # Claim or Rejected
    """

    algorithm = "HS256"

    def __init__(self, secret: str, ttl: timedelta = DEFAULT_TTL) -> None:
        if not secret:
            raise ValueError("Session token secret must not be empty")
        self.secret = secret
        self.ttl = ttl

    def issue(
        self,
        identity: Identity,
        role: str | None = None,
        ttl: timedelta | None = None,
        now: datetime | None = None,
    ) -> str:
        """
        Sign a new token for ``identity``.

        Args:
            identity: Subject the token asserts
            role: Role to assert (defaults to the identity's role)
            ttl: Lifetime (defaults to the codec's ttl)
            now: Issue time (defaults to the current time)

        Returns:
            Serialized token suitable for a cookie value
        """
        issued_at = (now or datetime.now(UTC)).replace(microsecond=0)
        expires_at = issued_at + (ttl if ttl is not None else self.ttl)
        payload = {
            "sub": str(identity.user_id),
            "email": identity.email,
            "role": role or identity.role,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str, now: datetime | None = None) -> Claim | Rejected:
        """
        Check signature and expiry of ``token``.

        A token is valid while now <= expiry.

        Returns:
            Claim on success, Rejected(MALFORMED | BAD_SIGNATURE | EXPIRED) otherwise
        """
        if not token or not isinstance(token, str):
            return Rejected(RejectReason.MALFORMED, "empty token")

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidSignatureError:
            return Rejected(RejectReason.BAD_SIGNATURE, "signature mismatch")
        except jwt.PyJWTError as e:
            return Rejected(RejectReason.MALFORMED, str(e))

        claim = _claim_from_payload(payload)
        if claim is None:
            return Rejected(RejectReason.MALFORMED, "incomplete claim")

        current = now or datetime.now(UTC)
        if current > claim.expires_at:
            return Rejected(RejectReason.EXPIRED, f"expired at {claim.expires_at}")

        return claim


def _claim_from_payload(payload: dict[str, object]) -> Claim | None:
    """Build a Claim from a decoded payload, or None if fields are missing."""
    try:
        user_id = int(str(payload["sub"]))
        email = str(payload["email"])
        role = str(payload["role"])
        issued_at = datetime.fromtimestamp(int(str(payload["iat"])), tz=UTC)
        expires_at = datetime.fromtimestamp(int(str(payload["exp"])), tz=UTC)
    except (KeyError, TypeError, ValueError, OverflowError):
        return None

    if role not in Role.values:
        return None

    return Claim(
        user_id=user_id,
        email=email,
        role=role,
        issued_at=issued_at,
        expires_at=expires_at,
    )


def get_session_codec() -> SessionCodec:
    """Build the codec from settings."""
    return SessionCodec(
        secret=settings.SESSION_TOKEN_SECRET,
        ttl=getattr(settings, "SESSION_TOKEN_TTL", DEFAULT_TTL),
    )
