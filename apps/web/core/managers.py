"""
Custom managers.

UserManager normalizes emails so lookups and uniqueness are case-insensitive.
SearchQuerySet adds the catalogue's free-text search.
"""

from typing import TYPE_CHECKING, Any, TypeVar

from django.db import models

if TYPE_CHECKING:
    from .models import User

_T = TypeVar("_T", bound=models.Model)


def normalize_email(email: str) -> str:
    """Lower-case and strip an email address."""
    return email.strip().lower()


class UserManager(models.Manager["User"]):
    """
    Manager for User accounts.

    Usage:
        user = User.objects.create_user(email="a@b.co", password="secret")
        user = User.objects.get_by_email(" A@B.co ")
    """

    def create_user(self, email: str, password: str, **extra: Any) -> "User":
        user = self.model(email=normalize_email(email), **extra)
        user.set_password(password)
        user.save()
        return user

    def get_by_email(self, email: str) -> "User":
        """
        Fetch a user by email, ignoring case and surrounding whitespace.

        Raises:
            User.DoesNotExist: If no account uses this email
        """
        return self.get(email=normalize_email(email))


class SearchQuerySet(models.QuerySet[_T]):
    """
    QuerySet with case-insensitive search over a model's text fields.

    Models list the searched columns in ``search_fields``.
    """

    def search(self, query: str) -> "SearchQuerySet[_T]":
        """
        Filter to rows where any search field contains ``query``.

        A blank query returns the queryset unchanged.
        """
        query = query.strip()
        if not query:
            return self

        condition = models.Q()
        for field in getattr(self.model, "search_fields", ()):
            condition |= models.Q(**{f"{field}__icontains": query})
        return self.filter(condition)
