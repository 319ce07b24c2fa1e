"""
Restaurant models - Catalogue, likes, and orders.

Orders snapshot item names and prices at checkout so later catalogue edits
never change what was charged.
"""

from django.db import models

from apps.web.core.managers import SearchQuerySet
from apps.web.core.models import TimeStampedModel, User


class Category(TimeStampedModel):
    """Menu category (e.g., Appetizer, Main Course, Dessert)."""

    name = models.CharField(max_length=200, unique=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name


class Item(TimeStampedModel):
    """
    A dish on the menu.

    Ingredients, serving tips and recommendations are short string lists.
    """

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="items",
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    full_description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    image = models.CharField(max_length=500, blank=True)
    ingredients = models.JSONField(default=list, blank=True)
    serving_tips = models.JSONField(default=list, blank=True)
    recommendations = models.JSONField(default=list, blank=True)

    objects = SearchQuerySet.as_manager()

    search_fields = ("name", "description")

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["category", "name"]),
        ]

    def __str__(self) -> str:
        return self.name


class LikeType(models.TextChoices):
    """Reaction a user can leave on an item."""

    LIKE = "LIKE", "Like"
    DISLIKE = "DISLIKE", "Dislike"


class Like(TimeStampedModel):
    """
    A user's reaction to an item. One per (user, item).

    Items are PROTECTed: deleting an item must remove its likes first.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="likes",
    )
    item = models.ForeignKey(
        Item,
        on_delete=models.PROTECT,
        related_name="likes",
    )
    type = models.CharField(
        max_length=10,
        choices=LikeType.choices,
        default=LikeType.LIKE,
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "item"],
                name="unique_like_per_user_item",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user} {self.type} {self.item}"


class OrderStatus(models.TextChoices):
    """Order lifecycle status. Orders are written complete."""

    COMPLETED = "COMPLETED", "Completed"


class PaymentMethod(models.TextChoices):
    """How the customer paid."""

    CARD = "card", "Card"
    CASH = "cash", "Cash"
    STRIPE = "stripe", "Stripe"


class Order(TimeStampedModel):
    """
    A completed purchase.

    Immutable after creation. Line totals are snapshots; the order total
    may include tax on top of them.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
        help_text="Null for guest checkouts",
    )
    customer_name = models.CharField(max_length=200)
    total = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.COMPLETED,
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CARD,
    )
    payment_reference = models.CharField(
        max_length=255,
        blank=True,
        help_text="Stripe PaymentIntent ID for stripe payments",
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"]),
        ]
        constraints = [
            # A processor payment pays for exactly one order
            models.UniqueConstraint(
                fields=["payment_reference"],
                condition=~models.Q(payment_reference=""),
                name="unique_order_payment_reference",
            ),
        ]

    def __str__(self) -> str:
        return f"Order {self.pk} - {self.customer_name}"


class OrderItem(models.Model):
    """
    Line item in an order.

    Stores a snapshot of the item at order time.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )
    item = models.ForeignKey(
        Item,
        on_delete=models.PROTECT,
        related_name="order_items",
    )

    # Snapshot of item at order time
    item_name = models.CharField(max_length=200)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(default=1)
    line_total = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ["pk"]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.item_name}"
