"""
Django settings for the restaurant gateways.

One codebase serves two front doors. GATEWAY selects which one this process is:
- admin: back-office API (ROOT_URLCONF = urls_admin)
- customer: storefront API (ROOT_URLCONF = urls_customer)

Secrets come from the environment - never hardcode credentials.
Run with: GATEWAY=admin python manage.py runserver 3002
"""

from datetime import timedelta
from decimal import Decimal
from pathlib import Path

import environ  # type: ignore[import-untyped]

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Initialize environ
env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, ["localhost", "127.0.0.1", "testserver"]),
    GATEWAY=(str, "customer"),
    SESSION_TOKEN_TTL=(int, 600),
    SESSION_COOKIE_SECURE=(bool, False),
    PROVIDER_TOKEN_SECRET=(str, ""),
    STRIPE_SECRET_KEY=(str, ""),
)

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY", default="insecure-local-development-key")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env("DEBUG")

ALLOWED_HOSTS = env("ALLOWED_HOSTS")

# Application definition
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.staticfiles",
    # Local apps
    "apps.web.core",
    "apps.web.restaurant",
    "apps.web.backoffice",
    "apps.web.storefront",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Custom middleware
    "apps.web.core.middleware.AccessGuardMiddleware",
]

# Which front door this process serves
GATEWAY = env("GATEWAY")

ROOT_URLCONF = f"apps.web.config.urls_{GATEWAY}"

WSGI_APPLICATION = "apps.web.config.wsgi.application"

# Database
# https://docs.djangoproject.com/en/5.1/ref/settings/#databases
# Connection string from the environment: DATABASE_URL
DATABASES = {
    "default": env.db("DATABASE_URL", default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
}
DATABASES["default"]["CONN_MAX_AGE"] = env.int("CONN_MAX_AGE", default=60)

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR.parent.parent / "staticfiles"  # /app/staticfiles in production

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# =============================================================================
# Sessions and carts (cookie-held, no server-side session table)
# =============================================================================

SESSION_TOKEN_SECRET = env("SESSION_TOKEN_SECRET", default=SECRET_KEY)
SESSION_TOKEN_TTL = timedelta(seconds=env("SESSION_TOKEN_TTL"))
SESSION_COOKIE_SECURE = env("SESSION_COOKIE_SECURE")

# Third-party provider tokens (blank = provider scheme disabled)
PROVIDER_TOKEN_SECRET = env("PROVIDER_TOKEN_SECRET")
PROVIDER_TOKEN_COOKIE = "provider_session"

CART_COOKIE_NAME = "cart"
CART_COOKIE_MAX_AGE = 60 * 60 * 24 * 7  # 7 days
CART_TAX_RATE = Decimal(env("CART_TAX_RATE", default="0.10"))

# =============================================================================
# Access guard - one entry per gateway
# =============================================================================

_SESSION_VERIFIER = "apps.web.core.credentials.SessionCookieVerifier"
_PROVIDER_VERIFIER = "apps.web.core.credentials.ProviderTokenVerifier"

ACCESS_GUARDS = {
    "admin": {
        "SESSION_COOKIE": "admin_session",
        "LOGIN_URL": "/login",
        "CALLBACK_PARAM": "callbackUrl",
        "PUBLIC_PATHS": ["/favicon.ico", "/api/auth", "/api/logout"],
        "PUBLIC_PREFIXES": ["/login", "/signin", "/static/"],
        "API_PREFIXES": ["/api/"],
        "CLEAR_COOKIES": ["admin_session", PROVIDER_TOKEN_COOKIE],
        "VERIFIERS": [_SESSION_VERIFIER, _PROVIDER_VERIFIER],
    },
    "customer": {
        "SESSION_COOKIE": "customer_session",
        "LOGIN_URL": "/login",
        "CALLBACK_PARAM": "from",
        "PUBLIC_PATHS": [
            "/",
            "/favicon.ico",
            "/api/auth",
            "/api/auth/me",
            "/api/login",
            "/api/logout",
            "/api/signup",
            "/api/signin",
            "/api/forgotpassword",
            "/api/payment",
            "/api/payment/intent",
            "/api/search",
        ],
        "PUBLIC_PREFIXES": [
            "/login",
            "/signup",
            "/forgotpassword",
            "/order-success",
            "/item/",
            "/detail/",
            "/static/",
            "/api/cart",
            "/api/categories",
            "/api/items",
        ],
        "API_PREFIXES": ["/api/"],
        "CLEAR_COOKIES": ["customer_session", PROVIDER_TOKEN_COOKIE],
        "VERIFIERS": [_SESSION_VERIFIER, _PROVIDER_VERIFIER],
    },
}

ACCESS_GUARD = ACCESS_GUARDS[GATEWAY]

# =============================================================================
# Payments
# =============================================================================

STRIPE_SECRET_KEY = env("STRIPE_SECRET_KEY")

# =============================================================================
# Logging
# =============================================================================

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "apps": {
            "handlers": ["console"],
            "level": env("LOG_LEVEL", default="INFO"),
        },
    },
}
