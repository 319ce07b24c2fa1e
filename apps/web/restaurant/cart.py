"""
Cart state and its cookie codec.

The cart lives client-side in the ``cart`` cookie as a compact JSON array:
    [{"id": 1, "name": "Pho Bo", "price": "12.99", "quantity": 2, ...}]
percent-encoded once by the cookie helpers.

Decoding is tolerant: a corrupted cookie degrades to an empty cart, never to
an error. Every degradation is logged so lost carts can be diagnosed.
"""

import json
import logging
from decimal import Decimal
from typing import Any
from urllib.parse import quote, unquote

from django.conf import settings
from django.http import HttpRequest, HttpResponse

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = Decimal("0.10")
CENTS = Decimal("0.01")


class LineItem(BaseModel):
    """One product line in a cart."""

    id: int
    name: str = ""
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(default=1, ge=1)
    description: str = ""
    image: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Cart(BaseModel):
    """
    Ordered collection of line items, at most one line per item id.

    Mutating methods return self so calls can be chained.
    """

    items: list[LineItem] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def _find(self, item_id: int) -> LineItem | None:
        return next((line for line in self.items if line.id == item_id), None)

    def contains(self, item_id: int) -> bool:
        return self._find(item_id) is not None

    def add(self, line: LineItem, quantity: int | None = None) -> "Cart":
        """Add ``quantity`` of a line; an existing id has its quantity increased."""
        quantity = quantity if quantity is not None else line.quantity
        if quantity < 1:
            raise ValueError("quantity must be at least 1")

        existing = self._find(line.id)
        if existing is not None:
            existing.quantity += quantity
        else:
            self.items.append(line.model_copy(update={"quantity": quantity}))
        return self

    def update_quantity(self, item_id: int, quantity: int) -> "Cart":
        """Set a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            return self.remove(item_id)
        existing = self._find(item_id)
        if existing is not None:
            existing.quantity = quantity
        return self

    def remove(self, item_id: int) -> "Cart":
        self.items = [line for line in self.items if line.id != item_id]
        return self

    def clear(self) -> "Cart":
        self.items = []
        return self

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.items)

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.items), Decimal("0"))

    def tax(self, rate: Decimal = DEFAULT_TAX_RATE) -> Decimal:
        return (self.subtotal * rate).quantize(CENTS)

    def total(self, rate: Decimal = DEFAULT_TAX_RATE) -> Decimal:
        return self.subtotal + self.tax(rate)

    def summary(self, rate: Decimal = DEFAULT_TAX_RATE) -> dict[str, Any]:
        """Cart plus computed amounts, as JSON-ready data."""
        return {
            "cart": self.to_list(),
            "itemCount": self.item_count,
            "subtotal": str(self.subtotal),
            "tax": str(self.tax(rate)),
            "total": str(self.total(rate)),
        }

    def to_list(self) -> list[dict[str, Any]]:
        return [line.model_dump(mode="json") for line in self.items]

    @classmethod
    def from_lines(cls, lines: list[Any]) -> "Cart":
        """
        Build a cart from raw line dicts, merging duplicate ids.

        Raises:
            pydantic.ValidationError: If a line is malformed
        """
        cart = cls()
        for raw in lines:
            cart.add(LineItem.model_validate(raw))
        return cart


# =============================================================================
# Codec
# =============================================================================


def encode(cart: Cart) -> str:
    """Serialize a cart to compact JSON. The cookie helpers percent-encode it."""
    return json.dumps(cart.to_list(), separators=(",", ":"))


def decode(raw: str | None) -> Cart:
    """
    Parse a cookie value into a cart. Never raises.

    Tries a direct JSON parse, then a URL-decoded parse, then gives up with
    an empty cart.
    """
    if not raw:
        return Cart()

    data = _loads(raw)
    if data is None:
        data = _loads(unquote(raw))
        if data is None:
            logger.warning("Discarding unparseable cart cookie (%d chars)", len(raw))
            return Cart()
        logger.warning("Cart cookie was URL-encoded; decoded with fallback")

    if isinstance(data, dict):
        data = data.get("items", data.get("cart"))
    if not isinstance(data, list):
        logger.warning("Discarding cart cookie with unexpected shape: %s", type(data).__name__)
        return Cart()

    try:
        return Cart.from_lines(data)
    except (PydanticValidationError, ValueError) as e:
        logger.warning("Discarding cart cookie with invalid lines: %s", e)
        return Cart()


def _loads(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return None


# =============================================================================
# Cookie helpers
# =============================================================================


def read_cart(request: HttpRequest) -> Cart:
    """Decode the cart cookie of a request."""
    raw = request.COOKIES.get(settings.CART_COOKIE_NAME)
    return decode(unquote(raw) if raw else raw)


def write_cart(response: HttpResponse, cart: Cart) -> None:
    """
    Store a cart in the client-readable cart cookie.

    The JSON is percent-encoded exactly once, so the value is a bare cookie
    token that client script reads with JSON.parse(decodeURIComponent(value)).
    """
    response.set_cookie(
        settings.CART_COOKIE_NAME,
        quote(encode(cart), safe=""),
        max_age=settings.CART_COOKIE_MAX_AGE,
        httponly=False,
        samesite="Lax",
        path="/",
    )


def clear_cart(response: HttpResponse) -> None:
    """Overwrite the cart cookie with an empty, already-expired one."""
    response.delete_cookie(settings.CART_COOKIE_NAME, path="/", samesite="Lax")
