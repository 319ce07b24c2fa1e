"""Tests for restaurant models."""

from datetime import timedelta
from decimal import Decimal

from django.db import IntegrityError
from django.db.models import ProtectedError
from django.utils import timezone

import pytest

from apps.web.restaurant.models import Category, Item, Like, LikeType, Order, OrderStatus

from .factories import (
    CategoryFactory,
    ItemFactory,
    LikeFactory,
    OrderFactory,
    OrderItemFactory,
    UserFactory,
)


@pytest.mark.django_db
class TestCategory:
    """Tests for Category model."""

    def test_str(self):
        assert str(CategoryFactory(name="Dessert")) == "Dessert"

    def test_names_are_unique(self):
        CategoryFactory(name="Dessert")
        with pytest.raises(IntegrityError):
            Category.objects.create(name="Dessert")

    def test_deleting_category_keeps_items(self):
        item = ItemFactory()

        item.category.delete()
        item.refresh_from_db()

        assert item.category is None


@pytest.mark.django_db
class TestItem:
    """Tests for Item model."""

    def test_defaults(self):
        item = Item.objects.create(name="Water", price=Decimal("1.00"))

        assert item.ingredients == []
        assert item.serving_tips == []
        assert item.recommendations == []
        assert item.category is None

    def test_search_matches_name_and_description(self):
        pho = ItemFactory(name="Pho Bo", description="Beef noodle soup")
        ItemFactory(name="Tiramisu", description="Coffee dessert")
        banh_mi = ItemFactory(name="Banh Mi", description="Sandwich with pickled NOODLE salad")

        results = set(Item.objects.search("noodle"))

        assert results == {pho, banh_mi}

    def test_blank_search_returns_everything(self):
        ItemFactory.create_batch(3)

        assert Item.objects.search("  ").count() == 3

    def test_item_with_likes_is_protected(self):
        """Items cannot be deleted while likes reference them."""
        like = LikeFactory()

        with pytest.raises(ProtectedError):
            like.item.delete()


@pytest.mark.django_db
class TestLike:
    """Tests for Like model."""

    def test_one_reaction_per_user_and_item(self):
        like = LikeFactory()

        with pytest.raises(IntegrityError):
            Like.objects.create(user=like.user, item=like.item, type=LikeType.DISLIKE)

    def test_deleting_user_removes_likes(self):
        like = LikeFactory()

        like.user.delete()

        assert not Like.objects.exists()


@pytest.mark.django_db
class TestOrder:
    """Tests for Order and OrderItem models."""

    def test_defaults(self):
        order = OrderFactory()

        assert order.status == OrderStatus.COMPLETED
        assert str(order) == f"Order {order.pk} - {order.customer_name}"

    def test_guest_order_survives_user_deletion(self):
        user = UserFactory()
        order = OrderFactory(user=user)

        user.delete()
        order.refresh_from_db()

        assert order.user is None

    def test_line_snapshot(self):
        line = OrderItemFactory(item__name="Pho Bo", item__price=Decimal("12.99"), quantity=2)

        line.item.name = "Pho Ga"
        line.item.price = Decimal("14.00")
        line.item.save()
        line.refresh_from_db()

        assert line.item_name == "Pho Bo"
        assert line.unit_price == Decimal("12.99")
        assert line.line_total == Decimal("25.98")
        assert str(line) == "2x Pho Bo"

    def test_newest_orders_first(self):
        user = UserFactory()
        first = OrderFactory(user=user)
        second = OrderFactory(user=user)
        Order.objects.filter(pk=first.pk).update(created_at=timezone.now() - timedelta(hours=1))

        assert list(user.orders.all()) == [second, first]
