"""
HTTP helpers shared by both gateways - JSON bodies and session cookies.
"""

import json
from typing import Any, TypeVar

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .sessions import Identity, get_session_codec

_S = TypeVar("_S", bound=BaseModel)


def json_response(data: Any, status: int = 200) -> JsonResponse:
    """Create a JSON response; lists are allowed at the top level."""
    return JsonResponse(data, status=status, safe=False)


def parse_json(request: HttpRequest) -> Any:
    """
    Decode a JSON request body.

    Raises:
        ValidationError: If the body is not valid JSON
    """
    try:
        return json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("Invalid JSON in request body") from exc


def parse_body(request: HttpRequest, schema: type[_S]) -> _S:
    """
    Decode and validate a JSON request body against a pydantic schema.

    Raises:
        ValidationError: With one detail per failing field
    """
    body = parse_json(request)
    try:
        return schema.model_validate(body)
    except PydanticValidationError as e:
        details = [
            {
                "field": ".".join(str(loc) for loc in err["loc"]),
                "message": err["msg"],
            }
            for err in e.errors()
        ]
        message = details[0]["message"] if details else "Invalid request"
        raise ValidationError(message, details=details) from e


def set_session_cookie(response: HttpResponse, cookie_name: str, identity: Identity) -> str:
    """Issue a session token for ``identity`` and store it in an HTTP-only cookie."""
    codec = get_session_codec()
    token = codec.issue(identity)
    response.set_cookie(
        cookie_name,
        token,
        max_age=int(codec.ttl.total_seconds()),
        httponly=True,
        samesite="Lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )
    return token


def clear_session_cookie(response: HttpResponse, cookie_name: str) -> None:
    """Overwrite the session cookie with an empty, already-expired one."""
    response.delete_cookie(cookie_name, path="/", samesite="Lax")


def session_cookie_name() -> str:
    """Session cookie of the gateway this process serves."""
    return settings.ACCESS_GUARD["SESSION_COOKIE"]
