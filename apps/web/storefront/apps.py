"""Django app configuration for the storefront (customer gateway)."""

from django.apps import AppConfig


class StorefrontConfig(AppConfig):
    """Customer gateway endpoints."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.web.storefront"
    verbose_name = "Storefront"
