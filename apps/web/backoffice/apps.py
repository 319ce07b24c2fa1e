"""Django app configuration for the back office (admin gateway)."""

from django.apps import AppConfig


class BackofficeConfig(AppConfig):
    """Admin gateway endpoints."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.web.backoffice"
    verbose_name = "Back office"
