"""
Back office API views - Admin gateway endpoints.

Every endpoint except sign-in and sign-out requires an ADMIN session. The
access guard has already proven an identity for protected paths; the role
is checked again here.
"""

import logging

from django.conf import settings
from django.http import HttpRequest, HttpResponse, HttpResponseRedirect, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.web.core.accounts import authenticate_user
from apps.web.core.decorators import api_view, identity_required
from apps.web.core.exceptions import AuthorizationError
from apps.web.core.http import (
    clear_session_cookie,
    json_response,
    parse_body,
    session_cookie_name,
    set_session_cookie,
)
from apps.web.core.models import Role
from apps.web.core.sessions import Identity
from apps.web.restaurant import services
from apps.web.restaurant.models import Category
from apps.web.restaurant.serializers import (
    CategorySchema,
    ItemCreateRequest,
    ItemEditRequest,
    ItemUpdateRequest,
    LoginRequest,
)

logger = logging.getLogger(__name__)


def _item_list(items) -> list[dict]:
    return [services.serialize_item_summary(item).model_dump(mode="json") for item in items]


def _item_detail(item_id: int) -> dict:
    return services.serialize_item_detail(services.get_item(item_id)).model_dump(mode="json")


def _category_list() -> list[dict]:
    return [
        CategorySchema.model_validate(category).model_dump()
        for category in Category.objects.order_by("name")
    ]


# =============================================================================
# Authentication
# =============================================================================


@csrf_exempt
@require_POST
@api_view
def sign_in(request: HttpRequest) -> JsonResponse:
    """
    POST /api/auth

    Sign an administrator in and set the admin session cookie.

    Request body:
        {"email": "...", "password": "..."}

    Returns:
        200: {"success": true}
        400: Missing email or password
        401: Unknown account or wrong password
        403: Account is not an administrator
    """
    data = parse_body(request, LoginRequest)
    user = authenticate_user(data.email, data.password)
    if not user.is_admin:
        logger.warning("Non-admin %s attempted back office sign-in", user.email)
        raise AuthorizationError("Access denied. Admins only.")

    response = json_response({"success": True})
    set_session_cookie(
        response,
        session_cookie_name(),
        Identity(user_id=user.pk, email=user.email, role=user.role),
    )
    logger.info("Admin %s signed in", user.email)
    return response


@require_GET
def sign_out(request: HttpRequest) -> HttpResponse:
    """
    GET /api/logout

    Clear the admin session and go back to the login page.
    """
    response = HttpResponseRedirect(settings.ACCESS_GUARD.get("LOGIN_URL", "/login"))
    clear_session_cookie(response, session_cookie_name())
    return response


# =============================================================================
# Items
# =============================================================================


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_view
@identity_required(role=Role.ADMIN)
def item_collection(request: HttpRequest) -> JsonResponse:
    """
    GET  /api/items - All items with their category.
    POST /api/items - Create an item; 201 with the new item.
    """
    if request.method == "GET":
        return json_response(_item_list(services.list_items()))

    data = parse_body(request, ItemCreateRequest)
    item = services.create_item(data)
    return json_response(_item_detail(item.pk), status=201)


@csrf_exempt
@require_POST
@api_view
@identity_required(role=Role.ADMIN)
def item_create(request: HttpRequest) -> JsonResponse:
    """
    POST /api/items/create

    Same contract as POST /api/items, wrapped as {"success": true, "item": ...}.
    """
    data = parse_body(request, ItemCreateRequest)
    item = services.create_item(data)
    return json_response({"success": True, "item": _item_detail(item.pk)}, status=201)


@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@api_view
@identity_required(role=Role.ADMIN)
def item_resource(request: HttpRequest, item_id: int) -> JsonResponse:
    """
    GET    /api/items/{id} - Item detail with like count and ordered quantity.
    PUT    /api/items/{id} - Update; name, fullDescription and price required.
    DELETE /api/items/{id} - Delete the item with its likes and order lines.
    """
    if request.method == "GET":
        return json_response(_item_detail(item_id))

    if request.method == "PUT":
        data = parse_body(request, ItemUpdateRequest)
        services.update_item(item_id, data)
        return json_response(_item_detail(item_id))

    services.delete_item(item_id)
    return json_response({"message": "Item deleted successfully"})


@csrf_exempt
@require_POST
@api_view
@identity_required(role=Role.ADMIN)
def item_edit(request: HttpRequest, item_id: int) -> JsonResponse:
    """
    POST /api/items/{id}/edit

    Full update from the edit form; name, price and image are required.
    """
    data = parse_body(request, ItemEditRequest)
    services.update_item(item_id, data)
    return json_response({"success": True, "item": _item_detail(item_id)})


@csrf_exempt
@require_http_methods(["DELETE"])
@api_view
@identity_required(role=Role.ADMIN)
def item_delete(request: HttpRequest, item_id: int) -> JsonResponse:
    """DELETE /api/items/{id}/delete"""
    services.delete_item(item_id)
    return json_response({"success": True})


# =============================================================================
# Categories & search
# =============================================================================


@require_GET
@api_view
@identity_required(role=Role.ADMIN)
def category_list(request: HttpRequest) -> JsonResponse:
    """GET /api/categories"""
    return json_response(_category_list())


@require_GET
@api_view
@identity_required(role=Role.ADMIN)
def category_items(request: HttpRequest, category_id: int) -> JsonResponse:
    """GET /api/categories/{id}/items"""
    return json_response(_item_list(services.list_items(category_id=category_id)))


@require_GET
@api_view
@identity_required(role=Role.ADMIN)
def search(request: HttpRequest) -> JsonResponse:
    """
    GET /api/search?q=

    Case-insensitive match on name or description. A blank query matches
    nothing.
    """
    query = request.GET.get("q", "").strip()
    if not query:
        return json_response([])
    return json_response(_item_list(services.list_items(search=query)))


# =============================================================================
# Pages
# =============================================================================


@require_GET
def login_page(request: HttpRequest) -> JsonResponse:
    """GET /login"""
    param = settings.ACCESS_GUARD.get("CALLBACK_PARAM", "callbackUrl")
    return json_response({"page": "login", param: request.GET.get(param, "/")})


@require_GET
@api_view
@identity_required(role=Role.ADMIN)
def home_page(request: HttpRequest) -> JsonResponse:
    """GET / - Item dashboard."""
    return json_response(
        {
            "page": "home",
            "categories": _category_list(),
            "items": _item_list(services.list_items()),
        }
    )


@require_GET
@api_view
@identity_required(role=Role.ADMIN)
def create_page(request: HttpRequest) -> JsonResponse:
    """GET /create - Item creation form."""
    return json_response({"page": "create", "categories": _category_list()})


@require_GET
@api_view
@identity_required(role=Role.ADMIN)
def detail_page(request: HttpRequest, item_id: int) -> JsonResponse:
    """GET /detail/{id} - Item detail with edit form."""
    return json_response({"page": "detail", "item": _item_detail(item_id)})
