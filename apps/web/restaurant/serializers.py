"""
Pydantic schemas for the gateway APIs.

These schemas define the public API contract for catalogue, account, cart
and order data. Field names follow the JSON the frontends already send
(camelCase where the original clients used it).
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

# =============================================================================
# Accounts
# =============================================================================


class LoginRequest(BaseModel):
    """Request body for POST /api/auth and /api/login."""

    email: str = ""
    password: str = ""


class SignupRequest(BaseModel):
    """Request body for POST /api/signup."""

    name: str = Field(default="", max_length=200)
    email: str = ""
    password: str = ""


class ForgotPasswordRequest(BaseModel):
    """Request body for POST /api/forgotpassword."""

    email: str = ""


class UserSchema(BaseModel):
    """A user as exposed to clients (never includes the password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str


# =============================================================================
# Catalogue
# =============================================================================


class CategorySchema(BaseModel):
    """A menu category."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ItemSummarySchema(BaseModel):
    """An item in list and search results."""

    id: int
    name: str
    description: str
    price: Decimal
    image: str
    category: CategorySchema | None = None
    likeCount: int = 0


class ItemDetailSchema(BaseModel):
    """A single item with full details."""

    id: int
    name: str
    description: str
    fullDescription: str
    price: Decimal
    image: str
    ingredients: list[str]
    servingTips: list[str]
    recommendations: list[str]
    category: CategorySchema | None = None
    likeCount: int = 0
    orderedQuantity: int = 0
    createdAt: datetime
    updatedAt: datetime


def _string_list(value: Any) -> list[str]:
    """Accept a list of strings; anything else becomes an empty list."""
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return []


class ItemCreateRequest(BaseModel):
    """Request body for POST /api/items and /api/items/create."""

    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    description: str = ""
    fullDescription: str = ""
    image: str = ""
    ingredients: list[str] = Field(default_factory=list)
    servingTips: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    categoryId: int | None = None

    @field_validator("name", "description", "fullDescription", "image", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("ingredients", "servingTips", "recommendations", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> list[str]:
        return _string_list(value)


class ItemEditRequest(ItemCreateRequest):
    """Request body for POST /api/items/{id}/edit - image is required."""

    image: str = Field(..., min_length=1, max_length=500)


class ItemUpdateRequest(ItemCreateRequest):
    """Request body for PUT /api/items/{id} - a description is required."""

    fullDescription: str = Field(..., min_length=1)


# =============================================================================
# Likes
# =============================================================================


class LikeRequest(BaseModel):
    """Request body for POST /api/items/{id}/like."""

    type: Literal["LIKE", "DISLIKE"] = "LIKE"


# =============================================================================
# Cart
# =============================================================================


class CartReplaceRequest(BaseModel):
    """Request body for POST /api/cart."""

    cart: list[dict[str, Any]] = Field(default_factory=list)


class CartAddRequest(BaseModel):
    """Request body for POST /api/cart/items."""

    id: int
    quantity: int = Field(default=1, ge=1, le=99)


class CartQuantityRequest(BaseModel):
    """Request body for PUT /api/cart/items/{id}."""

    quantity: int = Field(..., le=99)


# =============================================================================
# Checkout
# =============================================================================


class CartLineSchema(BaseModel):
    """A cart line submitted at checkout."""

    id: int
    name: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0)
    quantity: int = Field(..., ge=1, le=99)


class PaymentIntentRequest(BaseModel):
    """Request body for POST /api/payment/intent. Without a cart, the cart cookie is used."""

    cart: list[CartLineSchema] | None = None


class PaymentRequest(PaymentIntentRequest):
    """Request body for POST /api/payment. Without a cart, the cart cookie is used."""

    method: Literal["card", "cash", "stripe"] = "card"
    details: dict[str, Any] = Field(default_factory=dict)


class CustomerInfoSchema(BaseModel):
    """Customer details submitted with an order."""

    fullName: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(default="", max_length=20)
    address: str = ""
    city: str = ""
    zipCode: str = ""


class OrderCreateRequest(BaseModel):
    """Request body for POST /api/orders."""

    items: list[CartLineSchema] = Field(..., min_length=1)
    total: Decimal = Field(..., gt=0)
    customerInfo: CustomerInfoSchema


class OrderLineResponseSchema(BaseModel):
    """A line in an order response."""

    id: int
    name: str
    price: Decimal
    quantity: int
    total: Decimal


class OrderResponse(BaseModel):
    """An order as returned to clients."""

    id: int
    customerName: str
    total: Decimal
    status: str
    paymentMethod: str
    createdAt: datetime
    items: list[OrderLineResponseSchema]
