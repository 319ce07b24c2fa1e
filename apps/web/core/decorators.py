"""
Decorators for request handling and authorization.
"""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.conf import settings
from django.http import HttpRequest, JsonResponse

from .exceptions import AuthenticationError, AuthorizationError, GatewayError
from .guard import identify
from .sessions import Identity

logger = logging.getLogger(__name__)


def api_view(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that maps raised errors to JSON responses.

    GatewayError subclasses become {"error": message} with their status code.
    Anything else is logged and reported as a generic 500; the exception text
    is only exposed when DEBUG is on.

    Usage:
        @api_view
        def delete_item(request, item_id):
            ...
    """

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        try:
            return view_func(request, *args, **kwargs)
        except GatewayError as e:
            body: dict[str, Any] = {"error": e.message}
            if e.details:
                body["details"] = e.details
            return JsonResponse(body, status=e.status_code)
        except Exception as e:
            logger.exception(
                "Unhandled error in %s %s: %s", request.method, request.path, e
            )
            body = {"error": "Internal server error"}
            if settings.DEBUG:
                body["details"] = str(e)
            return JsonResponse(body, status=500)

    return wrapper


def identity_required(
    role: str | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator that requires an authenticated identity, optionally with a role.

    Raises AuthenticationError (401) without an identity and
    AuthorizationError (403) on a role mismatch. Place it under @api_view.

    Usage:
        @api_view
        @identity_required(role=Role.ADMIN)
        def create_item(request):
            ...
    """

    def decorator(view_func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view_func)
        def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
            identity = identify(request)
            if not isinstance(identity, Identity):
                raise AuthenticationError("Unauthorized")
            if role is not None and identity.role != role:
                logger.warning(
                    "Role %s required for %s, got %s (%s)",
                    role,
                    request.path,
                    identity.role,
                    identity.email,
                )
                raise AuthorizationError("Forbidden")
            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator
