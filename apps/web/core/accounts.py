"""
Account operations shared by both gateways.
"""

import logging
import re

from django.db import IntegrityError, transaction

from .exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from .managers import normalize_email
from .models import Role, User

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def authenticate_user(email: str, password: str) -> User:
    """
    Check an email/password pair.

    Raises:
        ValidationError: If either field is blank
        AuthenticationError: If the account is unknown or the password wrong
    """
    if not email.strip() or not password:
        raise ValidationError("Email and password are required")

    try:
        user = User.objects.get_by_email(email)
    except User.DoesNotExist as exc:
        logger.info("Login failed for unknown account %s", normalize_email(email))
        raise AuthenticationError("Invalid email or password") from exc

    if not user.check_password(password):
        logger.info("Login failed for %s: wrong password", user.email)
        raise AuthenticationError("Invalid email or password")
    return user


def register_user(name: str, email: str, password: str) -> User:
    """
    Create a USER account.

    Raises:
        ValidationError: On a missing field, bad email or short password
        ConflictError: If the email is already registered
    """
    name = name.strip()
    email = normalize_email(email)
    if not name or not email or not password:
        raise ValidationError("Name, email and password are required")
    if not EMAIL_RE.match(email):
        raise ValidationError("Please enter a valid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )

    if User.objects.filter(email=email).exists():
        raise ConflictError("A user with this email already exists")
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email, password=password, name=name, role=Role.USER
            )
    except IntegrityError as exc:
        raise ConflictError("A user with this email already exists") from exc

    logger.info("Registered user %s", user.email)
    return user


def request_password_reset(email: str) -> User:
    """
    Look up the account a reset was requested for.

    Delivery of the reset link is out of scope; the request is only logged.

    Raises:
        ValidationError: If the email is blank
        NotFoundError: If no account uses this email
    """
    if not email.strip():
        raise ValidationError("Email is required")
    try:
        user = User.objects.get_by_email(email)
    except User.DoesNotExist as exc:
        raise NotFoundError("User not found. Please sign up first.") from exc

    logger.info("Password reset requested for %s", user.email)
    return user
