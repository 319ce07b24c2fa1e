"""
Storefront API views - Customer gateway endpoints.

Catalogue, cart and sign-in endpoints are public. Order history, likes and
the verified /api/orders checkout need an identity; /api/payment accepts
guests and records the signed-in customer when there is one.
"""

import logging
from typing import Any

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from pydantic import ValidationError as PydanticValidationError

from apps.web.core.accounts import authenticate_user, register_user, request_password_reset
from apps.web.core.decorators import api_view, identity_required
from apps.web.core.exceptions import (
    AuthenticationError,
    NotFoundError,
    PaymentRequiredError,
    UnexpectedError,
    ValidationError,
)
from apps.web.core.guard import current_user, identify
from apps.web.core.http import (
    clear_session_cookie,
    json_response,
    parse_body,
    session_cookie_name,
    set_session_cookie,
)
from apps.web.core.models import User
from apps.web.core.sessions import Identity
from apps.web.payments.services import (
    PaymentError,
    create_payment_intent,
    verify_payment_intent,
)
from apps.web.restaurant import services
from apps.web.restaurant.cart import Cart, LineItem, clear_cart, read_cart, write_cart
from apps.web.restaurant.models import Category, PaymentMethod
from apps.web.restaurant.serializers import (
    CartAddRequest,
    CartLineSchema,
    CartQuantityRequest,
    CartReplaceRequest,
    CategorySchema,
    ForgotPasswordRequest,
    LikeRequest,
    LoginRequest,
    OrderCreateRequest,
    PaymentIntentRequest,
    PaymentRequest,
    SignupRequest,
    UserSchema,
)

logger = logging.getLogger(__name__)


def _user_data(user: User) -> dict[str, Any]:
    return UserSchema.model_validate(user).model_dump()


def _identity_data(identity: Identity) -> dict[str, Any]:
    return {"id": identity.user_id, "email": identity.email, "role": identity.role}


def _item_list(items) -> list[dict[str, Any]]:
    return [services.serialize_item_summary(item).model_dump(mode="json") for item in items]


def _category_list() -> list[dict[str, Any]]:
    return [
        CategorySchema.model_validate(category).model_dump()
        for category in Category.objects.order_by("name")
    ]


def _require_user(request: HttpRequest) -> User:
    """Local account for an authenticated request."""
    user = current_user(request)
    if user is None:
        raise AuthenticationError("Unauthorized")
    return user


# =============================================================================
# Authentication
# =============================================================================


def _sign_in(request: HttpRequest) -> JsonResponse:
    data = parse_body(request, LoginRequest)
    user = authenticate_user(data.email, data.password)

    response = json_response({"user": _user_data(user)})
    set_session_cookie(
        response,
        session_cookie_name(),
        Identity(user_id=user.pk, email=user.email, role=user.role),
    )
    logger.info("Customer %s signed in", user.email)
    return response


def _sign_out() -> JsonResponse:
    response = json_response({"success": True, "message": "Logged out successfully"})
    clear_session_cookie(response, session_cookie_name())
    clear_session_cookie(response, settings.PROVIDER_TOKEN_COOKIE)
    return response


@csrf_exempt
@require_POST
@api_view
def login(request: HttpRequest) -> JsonResponse:
    """
    POST /api/login

    Request body:
        {"email": "...", "password": "..."}

    Returns:
        200: {"user": {...}} and a customer_session cookie
        400: Missing email or password
        401: Unknown account or wrong password
    """
    return _sign_in(request)


@csrf_exempt
@require_http_methods(["GET", "POST", "DELETE"])
@api_view
def auth(request: HttpRequest) -> JsonResponse:
    """
    POST   /api/auth - Sign in (same contract as /api/login).
    GET    /api/auth - Session check; 401 {"authenticated": false} without one.
    DELETE /api/auth - Sign out.
    """
    if request.method == "POST":
        return _sign_in(request)
    if request.method == "DELETE":
        return _sign_out()

    identity = identify(request)
    if not isinstance(identity, Identity):
        return json_response({"authenticated": False}, status=401)
    return json_response({"authenticated": True, "user": _identity_data(identity)})


@require_GET
@api_view
def me(request: HttpRequest) -> JsonResponse:
    """GET /api/auth/me - The signed-in identity, or 401."""
    identity = identify(request)
    if not isinstance(identity, Identity):
        raise AuthenticationError("Not authenticated")
    return json_response(_identity_data(identity))


@csrf_exempt
@require_POST
@api_view
def logout(request: HttpRequest) -> JsonResponse:
    """POST /api/logout"""
    return _sign_out()


@csrf_exempt
@require_POST
@api_view
def signup(request: HttpRequest) -> JsonResponse:
    """
    POST /api/signup (also /api/signin)

    Register a customer account.

    Returns:
        201: {"success": true, "user": {...}}
        400: Missing field, invalid email or short password
        409: Email already registered
    """
    data = parse_body(request, SignupRequest)
    user = register_user(data.name, data.email, data.password)
    return json_response(
        {
            "success": True,
            "message": "Account created successfully",
            "user": _user_data(user),
        },
        status=201,
    )


@csrf_exempt
@require_POST
@api_view
def forgot_password(request: HttpRequest) -> JsonResponse:
    """
    POST /api/forgotpassword

    Returns:
        200: Account exists
        400: Missing email
        404: Unknown account
    """
    data = parse_body(request, ForgotPasswordRequest)
    request_password_reset(data.email)
    return json_response(
        {
            "success": True,
            "message": "If this were live, a password reset email would be on its way.",
        }
    )


# =============================================================================
# Cart
# =============================================================================


def _cart_response(cart: Cart, status: int = 200) -> JsonResponse:
    """Cart summary response that also stores the cart cookie."""
    response = json_response(
        {"success": True, **cart.summary(settings.CART_TAX_RATE)}, status=status
    )
    write_cart(response, cart)
    return response


@csrf_exempt
@require_http_methods(["GET", "POST", "DELETE"])
@api_view
def cart(request: HttpRequest) -> JsonResponse:
    """
    GET    /api/cart - Current cart with totals.
    POST   /api/cart - Replace the cart: {"cart": [{id, name, price, quantity}, ...]}
    DELETE /api/cart - Empty the cart.
    """
    if request.method == "GET":
        return json_response(read_cart(request).summary(settings.CART_TAX_RATE))

    if request.method == "DELETE":
        response = json_response({"success": True, "cart": []})
        clear_cart(response)
        return response

    data = parse_body(request, CartReplaceRequest)
    try:
        replacement = Cart.from_lines(data.cart)
    except (PydanticValidationError, ValueError) as e:
        raise ValidationError("Invalid cart line") from e
    return _cart_response(replacement)


@csrf_exempt
@require_POST
@api_view
def cart_add(request: HttpRequest) -> JsonResponse:
    """
    POST /api/cart/items

    Add an item from the catalogue; an item already in the cart has its
    quantity increased.

    Request body:
        {"id": 1, "quantity": 2}
    """
    data = parse_body(request, CartAddRequest)
    item = services.get_item(data.id)
    line = LineItem(
        id=item.pk,
        name=item.name,
        price=item.price,
        description=item.description,
        image=item.image,
    )
    return _cart_response(read_cart(request).add(line, data.quantity))


@csrf_exempt
@require_http_methods(["PUT", "DELETE"])
@api_view
def cart_line(request: HttpRequest, item_id: int) -> JsonResponse:
    """
    PUT    /api/cart/items/{id} - Set quantity; zero or less removes the line.
    DELETE /api/cart/items/{id} - Remove the line.
    """
    current = read_cart(request)
    if not current.contains(item_id):
        raise NotFoundError("Item not in cart")

    if request.method == "DELETE":
        return _cart_response(current.remove(item_id))

    data = parse_body(request, CartQuantityRequest)
    return _cart_response(current.update_quantity(item_id, data.quantity))


# =============================================================================
# Catalogue
# =============================================================================


@require_GET
@api_view
def category_list(request: HttpRequest) -> JsonResponse:
    """GET /api/categories"""
    return json_response(_category_list())


@require_GET
@api_view
def category_items(request: HttpRequest, category_id: int) -> JsonResponse:
    """GET /api/categories/{id}/items"""
    return json_response(_item_list(services.list_items(category_id=category_id)))


@require_GET
@api_view
def item_list(request: HttpRequest) -> JsonResponse:
    """
    GET /api/items?search=&category=

    A missing or zero category means all categories.
    """
    raw_category = request.GET.get("category", "").strip()
    try:
        category_id = int(raw_category) if raw_category else None
    except ValueError as e:
        raise ValidationError("Invalid category") from e

    items = services.list_items(
        search=request.GET.get("search", ""),
        category_id=category_id or None,
    )
    return json_response({"items": _item_list(items)})


@require_GET
@api_view
def item_detail(request: HttpRequest, item_id: int) -> JsonResponse:
    """GET /api/items/{id}"""
    item = services.get_item(item_id)
    return json_response(services.serialize_item_detail(item).model_dump(mode="json"))


@csrf_exempt
@require_http_methods(["POST", "DELETE"])
@api_view
@identity_required()
def item_like(request: HttpRequest, item_id: int) -> JsonResponse:
    """
    POST   /api/items/{id}/like - Like or dislike: {"type": "LIKE" | "DISLIKE"}
    DELETE /api/items/{id}/like - Withdraw the reaction.
    """
    user = _require_user(request)
    if request.method == "DELETE":
        like_count = services.remove_like(user, item_id)
        return json_response({"success": True, "likeCount": like_count})

    data = parse_body(request, LikeRequest)
    like_count = services.set_like(user, item_id, data.type)
    return json_response({"success": True, "type": data.type, "likeCount": like_count})


@require_GET
@api_view
def search(request: HttpRequest) -> JsonResponse:
    """GET /api/search?q= - A blank query matches nothing."""
    query = request.GET.get("q", "").strip()
    if not query:
        return json_response([])
    return json_response(_item_list(services.list_items(search=query)))


# =============================================================================
# Orders & payment
# =============================================================================


def _checkout_lines(request: HttpRequest, submitted: list[CartLineSchema] | None) -> list[CartLineSchema]:
    """Lines from the request body, or from the cart cookie when none were sent."""
    if submitted is not None:
        return submitted
    try:
        return [
            CartLineSchema.model_validate(line.model_dump())
            for line in read_cart(request).items
        ]
    except PydanticValidationError as e:
        raise ValidationError("Invalid cart line") from e


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_view
@identity_required()
def orders(request: HttpRequest) -> JsonResponse:
    """
    GET  /api/orders - The customer's orders, newest first.
    POST /api/orders - Verified checkout.

    POST checks that every item exists, that submitted prices match the
    catalogue and that the total equals subtotal plus tax, each within one
    cent. The order and its lines are written in one transaction.

    Returns:
        201: The created order
        400: Validation or price mismatch
        401: No identity or no local account
    """
    user = _require_user(request)

    if request.method == "GET":
        return json_response(
            [
                services.serialize_order(order).model_dump(mode="json")
                for order in services.order_history(user)
            ]
        )

    data = parse_body(request, OrderCreateRequest)
    order = services.place_order(
        data.items,
        customer_name=data.customerInfo.fullName,
        user=user,
        payment_method=PaymentMethod.CARD,
        expected_total=data.total,
        tax_rate=settings.CART_TAX_RATE,
    )
    return json_response(services.serialize_order(order).model_dump(mode="json"), status=201)


@csrf_exempt
@require_POST
@api_view
def payment_intent(request: HttpRequest) -> JsonResponse:
    """
    POST /api/payment/intent

    Create a Stripe PaymentIntent for the cart, priced from the catalogue.

    Returns:
        200: {"clientSecret": "...", "paymentIntentId": "pi_...", "amount": "..."}
        400: Empty cart or unknown items
    """
    data = parse_body(request, PaymentIntentRequest)
    lines = _checkout_lines(request, data.cart)
    amount = services.quote_total(lines)

    user = current_user(request)
    metadata = {"customer_email": user.email} if user else {}
    try:
        intent = create_payment_intent(amount, metadata=metadata)
    except PaymentError as e:
        raise UnexpectedError("Payment provider unavailable") from e

    return json_response(
        {
            "clientSecret": intent.client_secret,
            "paymentIntentId": intent.id,
            "amount": str(amount),
        }
    )


@csrf_exempt
@require_POST
@api_view
def payment(request: HttpRequest) -> JsonResponse:
    """
    POST /api/payment

    Turn the cart into a completed order. Prices are taken from the
    catalogue. The order is named after the signed-in customer, else the
    card holder, else "Guest".

    Request body:
        {"cart": [...], "method": "card" | "cash" | "stripe",
         "details": {"cardName": "...", "payment_intent_id": "pi_..."}}

    Returns:
        200: {"success": true, "order": {...}} and the cart cookie cleared
        400: Empty cart or unknown items
        402: Stripe payment not completed
        409: Stripe payment already used for another order
    """
    data = parse_body(request, PaymentRequest)
    lines = _checkout_lines(request, data.cart)
    if not lines:
        raise ValidationError("Cart is empty.")

    user = current_user(request)
    customer_name = (
        (user.name if user else "")
        or str(data.details.get("cardName") or "").strip()
        or "Guest"
    )

    reference = ""
    if data.method == PaymentMethod.STRIPE:
        reference = str(data.details.get("payment_intent_id") or "")
        if not reference:
            raise ValidationError("payment_intent_id is required for Stripe payments")
        if not verify_payment_intent(reference, amount=services.quote_total(lines)):
            raise PaymentRequiredError("Payment not completed")

    order = services.place_order(
        lines,
        customer_name=customer_name,
        user=user,
        payment_method=data.method,
        payment_reference=reference,
    )

    response = json_response(
        {"success": True, "order": services.serialize_order(order).model_dump(mode="json")}
    )
    clear_cart(response)
    return response


# =============================================================================
# Pages
# =============================================================================


def _page(name: str, **data: Any) -> JsonResponse:
    return json_response({"page": name, **data})


@require_GET
def login_page(request: HttpRequest) -> JsonResponse:
    """GET /login"""
    param = settings.ACCESS_GUARD.get("CALLBACK_PARAM", "from")
    return _page("login", **{param: request.GET.get(param, "/")})


@require_GET
def signup_page(request: HttpRequest) -> JsonResponse:
    """GET /signup"""
    return _page("signup")


@require_GET
def forgot_password_page(request: HttpRequest) -> JsonResponse:
    """GET /forgotpassword"""
    return _page("forgotpassword")


@require_GET
@api_view
def home_page(request: HttpRequest) -> JsonResponse:
    """GET / - Menu with categories."""
    return _page(
        "home",
        categories=_category_list(),
        items=_item_list(services.list_items()),
    )


@require_GET
@api_view
def item_page(request: HttpRequest, item_id: int) -> JsonResponse:
    """GET /item/{id} (and legacy /detail/{id})"""
    item = services.get_item(item_id)
    return _page("item", item=services.serialize_item_detail(item).model_dump(mode="json"))


@require_GET
def order_success_page(request: HttpRequest) -> JsonResponse:
    """GET /order-success"""
    return _page("order-success", orderId=request.GET.get("orderId"))


@require_GET
@api_view
@identity_required()
def checkout_page(request: HttpRequest) -> JsonResponse:
    """GET /checkout"""
    return _page("checkout", **read_cart(request).summary(settings.CART_TAX_RATE))


@require_GET
@api_view
@identity_required()
def payment_page(request: HttpRequest) -> JsonResponse:
    """GET /payment"""
    return _page("payment", **read_cart(request).summary(settings.CART_TAX_RATE))


@require_GET
@api_view
@identity_required()
def order_history_page(request: HttpRequest) -> JsonResponse:
    """GET /order-history"""
    user = _require_user(request)
    return _page(
        "order-history",
        orders=[
            services.serialize_order(order).model_dump(mode="json")
            for order in services.order_history(user)
        ],
    )


@require_GET
@api_view
@identity_required()
def profile_page(request: HttpRequest) -> JsonResponse:
    """GET /profile"""
    return _page("profile", user=_user_data(_require_user(request)))


@require_GET
@api_view
@identity_required()
def dashboard_page(request: HttpRequest) -> JsonResponse:
    """GET /dashboard"""
    user = _require_user(request)
    return _page(
        "dashboard",
        user=_user_data(user),
        orderCount=user.orders.count(),
        likeCount=user.likes.count(),
    )
