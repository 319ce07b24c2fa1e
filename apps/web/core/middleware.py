"""
Access guard middleware - gates every request before it reaches a view.
"""

import logging
from collections.abc import Callable
from urllib.parse import urlencode

from django.http import HttpRequest, HttpResponse, HttpResponseRedirect, JsonResponse

from .guard import AccessState, GuardConfig, identify
from .sessions import Identity, Rejected

logger = logging.getLogger(__name__)


class AccessGuardMiddleware:
    """
    Middleware that classifies the request path and authenticates protected ones.

    - Public paths pass through without inspecting credentials.
    - Protected paths must carry a credential one of the configured verifiers
      accepts. The resulting Identity is attached as request.identity.
    - Otherwise page routes are redirected to the login page with the
      requested path as a callback parameter, and API routes get a JSON 401.
      Stale auth cookies are cleared in both cases.

    The guard proves identity only. Role checks happen in the views.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        config = GuardConfig.from_settings()
        request.identity = None  # type: ignore[attr-defined]

        state, result = self.classify(request, config)
        request.access_state = state  # type: ignore[attr-defined]

        if isinstance(result, Rejected):
            logger.info(
                "Rejected %s %s: %s", request.method, request.path, result.reason
            )
            return self._reject(request, config)

        return self.get_response(request)

    def classify(
        self, request: HttpRequest, config: GuardConfig
    ) -> tuple[AccessState, Identity | Rejected | None]:
        """Decide the access state for a request."""
        if config.is_public(request.path):
            return AccessState.PUBLIC, None

        result = identify(request, config)
        if isinstance(result, Identity):
            return AccessState.AUTHENTICATED, result
        return AccessState.UNAUTHENTICATED, result

    def _reject(self, request: HttpRequest, config: GuardConfig) -> HttpResponse:
        response: HttpResponse
        if config.is_api(request.path):
            response = JsonResponse({"error": "Authentication required"}, status=401)
        else:
            query = urlencode({config.callback_param: request.path}, safe="/")
            response = HttpResponseRedirect(f"{config.login_url}?{query}")

        for name in config.clear_cookies:
            if name in request.COOKIES:
                response.delete_cookie(name, samesite="Lax")
        return response
