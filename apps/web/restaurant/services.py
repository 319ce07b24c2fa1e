"""
Restaurant services - multi-step writes against the catalogue and orders.

Each public function is one logical store operation. Operations touching
more than one table run in a single transaction so a failure never leaves
partial state behind.
"""

import logging
from decimal import Decimal
from typing import Any

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum

from apps.web.core.exceptions import ConflictError, NotFoundError, ValidationError
from apps.web.core.models import User
from apps.web.restaurant.models import (
    Category,
    Item,
    Like,
    LikeType,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
)
from apps.web.restaurant.serializers import (
    CartLineSchema,
    CategorySchema,
    ItemCreateRequest,
    ItemDetailSchema,
    ItemSummarySchema,
    OrderLineResponseSchema,
    OrderResponse,
)

logger = logging.getLogger(__name__)

PRICE_TOLERANCE = Decimal("0.01")


# =============================================================================
# Serialization
# =============================================================================


def _serialize_category(category: Category | None) -> CategorySchema | None:
    if category is None:
        return None
    return CategorySchema(id=category.pk, name=category.name)


def serialize_item_summary(item: Item) -> ItemSummarySchema:
    """Serialize an Item for list views."""
    return ItemSummarySchema(
        id=item.pk,
        name=item.name,
        description=item.description,
        price=item.price,
        image=item.image,
        category=_serialize_category(item.category),
        likeCount=getattr(item, "like_count", 0),
    )


def serialize_item_detail(item: Item) -> ItemDetailSchema:
    """Serialize an Item with likes and order statistics."""
    ordered = item.order_items.aggregate(total=Sum("quantity"))["total"] or 0
    return ItemDetailSchema(
        id=item.pk,
        name=item.name,
        description=item.description,
        fullDescription=item.full_description,
        price=item.price,
        image=item.image,
        ingredients=item.ingredients,
        servingTips=item.serving_tips,
        recommendations=item.recommendations,
        category=_serialize_category(item.category),
        likeCount=item.likes.filter(type=LikeType.LIKE).count(),
        orderedQuantity=ordered,
        createdAt=item.created_at,
        updatedAt=item.updated_at,
    )


def serialize_order(order: Order) -> OrderResponse:
    """Serialize an Order with its line snapshots."""
    return OrderResponse(
        id=order.pk,
        customerName=order.customer_name,
        total=order.total,
        status=order.status,
        paymentMethod=order.payment_method,
        createdAt=order.created_at,
        items=[
            OrderLineResponseSchema(
                id=line.item_id,
                name=line.item_name,
                price=line.unit_price,
                quantity=line.quantity,
                total=line.line_total,
            )
            for line in order.items.all()
        ],
    )


# =============================================================================
# Catalogue
# =============================================================================


def list_items(search: str = "", category_id: int | None = None) -> list[Item]:
    """Items filtered by free text and/or category, with like counts."""
    items = Item.objects.select_related("category").search(search)
    if category_id is not None:
        items = items.filter(category_id=category_id)
    return list(
        items.annotate(
            like_count=Count("likes", filter=Q(likes__type=LikeType.LIKE))
        )
    )


def get_item(item_id: int) -> Item:
    """
    Fetch an item by id.

    Raises:
        NotFoundError: If the item does not exist
    """
    try:
        return Item.objects.select_related("category").get(pk=item_id)
    except Item.DoesNotExist as exc:
        raise NotFoundError("Item not found") from exc


def _resolve_category(category_id: int | None) -> Category | None:
    if category_id is None:
        return None
    try:
        return Category.objects.get(pk=category_id)
    except Category.DoesNotExist as exc:
        raise ValidationError("Category not found") from exc


# Request field -> Item column
ITEM_COLUMNS = {
    "name": "name",
    "description": "description",
    "fullDescription": "full_description",
    "price": "price",
    "image": "image",
    "ingredients": "ingredients",
    "servingTips": "serving_tips",
    "recommendations": "recommendations",
}


def _item_fields(data: ItemCreateRequest, partial: bool = False) -> dict[str, Any]:
    """
    Model fields for an item write.

    With ``partial``, only fields present in the request body are returned,
    and the category is only touched when ``categoryId`` was sent (an explicit
    null clears it).
    """
    provided = data.model_dump(exclude_unset=partial)
    fields = {
        column: provided[key] for key, column in ITEM_COLUMNS.items() if key in provided
    }
    if "categoryId" in provided:
        fields["category"] = _resolve_category(provided["categoryId"])
    return fields


def create_item(data: ItemCreateRequest) -> Item:
    """
    Create a menu item.

    Raises:
        ValidationError: If the category does not exist
    """
    item = Item.objects.create(**_item_fields(data))
    logger.info("Created item %s (%s)", item.pk, item.name)
    return item


def update_item(item_id: int, data: ItemCreateRequest) -> Item:
    """
    Update an item from the fields present in the request body.

    Fields the body leaves out keep their stored values, the category
    included.

    Raises:
        NotFoundError: If the item does not exist
        ValidationError: If the category does not exist
    """
    item = get_item(item_id)
    fields = _item_fields(data, partial=True)
    for field, value in fields.items():
        setattr(item, field, value)
    item.save(update_fields=[*fields, "updated_at"])
    logger.info("Updated item %s", item.pk)
    return item


def delete_item(item_id: int) -> None:
    """
    Delete an item and the rows that reference it, atomically.

    Likes and order lines are removed before the item itself; if any step
    fails, nothing is deleted.

    Raises:
        NotFoundError: If the item does not exist
    """
    with transaction.atomic():
        try:
            item = Item.objects.select_for_update().get(pk=item_id)
        except Item.DoesNotExist as exc:
            raise NotFoundError("Item not found") from exc

        likes, _ = Like.objects.filter(item=item).delete()
        lines, _ = OrderItem.objects.filter(item=item).delete()
        item.delete()

    logger.info(
        "Deleted item %s with %d likes and %d order lines", item_id, likes, lines
    )


# =============================================================================
# Likes
# =============================================================================


def set_like(user: User, item_id: int, like_type: str) -> int:
    """
    Create or update a user's reaction to an item.

    Returns:
        The item's current LIKE count
    """
    item = get_item(item_id)
    Like.objects.update_or_create(user=user, item=item, defaults={"type": like_type})
    return Like.objects.filter(item=item, type=LikeType.LIKE).count()


def remove_like(user: User, item_id: int) -> int:
    """
    Remove a user's reaction to an item.

    Returns:
        The item's current LIKE count
    """
    Like.objects.filter(user=user, item_id=item_id).delete()
    return Like.objects.filter(item_id=item_id, type=LikeType.LIKE).count()


# =============================================================================
# Orders
# =============================================================================


def _merge_lines(lines: list[CartLineSchema]) -> list[CartLineSchema]:
    """One line per item id, quantities summed, first-seen order kept."""
    merged: dict[int, CartLineSchema] = {}
    for line in lines:
        existing = merged.get(line.id)
        if existing is None:
            merged[line.id] = line
        else:
            merged[line.id] = existing.model_copy(
                update={"quantity": existing.quantity + line.quantity}
            )
    return list(merged.values())


def _price_lines(lines: list[CartLineSchema]) -> list[tuple[Item, int, Decimal]]:
    """
    Resolve cart lines against the catalogue, merging repeated item ids.

    Returns:
        List of (item, quantity, unit_price) using catalogue prices

    Raises:
        ValidationError: If any item no longer exists
    """
    merged = _merge_lines(lines)
    ids = {line.id for line in merged}
    items = Item.objects.in_bulk(ids)
    missing = ids - set(items)
    if missing:
        raise ValidationError("Some items in the cart no longer exist")
    return [(items[line.id], line.quantity, items[line.id].price) for line in merged]


def quote_total(lines: list[CartLineSchema], tax_rate: Decimal = Decimal("0")) -> Decimal:
    """
    Price cart lines from the catalogue.

    Raises:
        ValidationError: Empty cart or missing items
    """
    if not lines:
        raise ValidationError("Cart is empty.")
    subtotal = sum(
        (price * qty for _item, qty, price in _price_lines(lines)), Decimal("0")
    )
    return (subtotal * (1 + tax_rate)).quantize(PRICE_TOLERANCE)


def place_order(
    lines: list[CartLineSchema],
    customer_name: str,
    user: User | None = None,
    payment_method: str = PaymentMethod.CARD,
    payment_reference: str = "",
    expected_total: Decimal | None = None,
    tax_rate: Decimal = Decimal("0"),
) -> Order:
    """
    Create a completed order from cart lines in one transaction.

    Unit prices are snapshotted from the catalogue; the order total is the
    sum of line totals plus tax at ``tax_rate``. When ``expected_total`` is
    given, the client's line prices and total must both agree with the
    catalogue within one cent.

    Args:
        lines: Cart lines (must be non-empty)
        customer_name: Name recorded on the order
        user: Account placing the order (None for guests)
        payment_method: How the order was paid
        payment_reference: Processor reference (e.g. PaymentIntent ID)
        expected_total: Total the client computed
        tax_rate: Tax added on top of the subtotal

    Raises:
        ValidationError: Empty cart, missing items, or a price/total mismatch
        ConflictError: If ``payment_reference`` already paid for another order
    """
    if not lines:
        raise ValidationError("Cart is empty.")

    with transaction.atomic():
        priced = _price_lines(lines)

        if expected_total is not None:
            catalogue = {item.pk: price for item, _qty, price in priced}
            for line in lines:
                if abs(line.price - catalogue[line.id]) > PRICE_TOLERANCE:
                    raise ValidationError(
                        "Price mismatch detected. Please refresh your cart."
                    )

        subtotal = sum((price * qty for _item, qty, price in priced), Decimal("0"))
        total = (subtotal * (1 + tax_rate)).quantize(PRICE_TOLERANCE)

        if expected_total is not None and abs(expected_total - total) > PRICE_TOLERANCE:
            raise ValidationError("Total amount mismatch")

        if payment_reference and Order.objects.filter(
            payment_reference=payment_reference
        ).exists():
            logger.warning("Payment %s reused for a second order", payment_reference)
            raise ConflictError("This payment has already been used for an order")

        try:
            order = Order.objects.create(
                user=user,
                customer_name=customer_name,
                total=total,
                status=OrderStatus.COMPLETED,
                payment_method=payment_method,
                payment_reference=payment_reference,
            )
        except IntegrityError as exc:
            raise ConflictError("This payment has already been used for an order") from exc
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    item=item,
                    item_name=item.name,
                    unit_price=price,
                    quantity=qty,
                    line_total=price * qty,
                )
                for item, qty, price in priced
            ]
        )

    logger.info(
        "Placed order %s for %s: %d lines, total %s",
        order.pk,
        customer_name,
        len(priced),
        total,
    )
    return order


def order_history(user: User) -> list[Order]:
    """A user's orders, newest first."""
    return list(Order.objects.filter(user=user).prefetch_related("items"))
