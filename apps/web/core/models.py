"""
Core models - accounts and shared model bases.

Users are plain rows: the gateways keep no server-side session table,
so authentication state lives entirely in signed cookies.
"""

from django.contrib.auth.hashers import check_password, make_password
from django.db import models

from .managers import UserManager


class TimeStampedModel(models.Model):
    """
    Abstract base for persisted entities.

    Provides created/updated timestamps.
    """

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Role(models.TextChoices):
    """Roles a session claim can carry."""

    ADMIN = "ADMIN", "Admin"
    USER = "USER", "User"


class User(TimeStampedModel):
    """
    Account that can sign in to either gateway.

    Only ADMIN users may sign in to the back office.
    """

    name = models.CharField(max_length=200, blank=True)
    email = models.EmailField(unique=True)
    password = models.CharField(max_length=128, help_text="Password hash")
    role = models.CharField(
        max_length=10,
        choices=Role.choices,
        default=Role.USER,
    )

    objects = UserManager()

    class Meta:
        ordering = ["email"]

    def __str__(self) -> str:
        return self.email

    def set_password(self, raw_password: str) -> None:
        self.password = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return bool(self.password) and check_password(raw_password, self.password)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
