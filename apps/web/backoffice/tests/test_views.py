"""
Tests for admin gateway views.
"""

import json
from decimal import Decimal

import pytest

from apps.web.restaurant.models import Item, Like, OrderItem
from apps.web.restaurant.tests.factories import (
    CategoryFactory,
    ItemFactory,
    LikeFactory,
    OrderItemFactory,
)

pytestmark = pytest.mark.usefixtures("admin_gateway")


@pytest.fixture
def admin_client(api_client, admin_user, sign_in):
    """Test client holding a valid admin session."""
    return sign_in(api_client, admin_user)


def _post(client, url: str, data: dict):
    return client.post(url, data=json.dumps(data), content_type="application/json")


def _put(client, url: str, data: dict):
    return client.put(url, data=json.dumps(data), content_type="application/json")


@pytest.mark.django_db
class TestSignIn:
    """Tests for POST /api/auth."""

    def test_admin_signs_in(self, api_client, admin_user):
        """Valid admin credentials set the admin session cookie."""
        response = _post(
            api_client, "/api/auth", {"email": "admin@example.com", "password": "admin-pass"}
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        cookie = response.cookies["admin_session"]
        assert cookie["httponly"]
        assert cookie["samesite"] == "Lax"
        assert cookie["max-age"] == 600

    def test_missing_fields(self, api_client):
        response = _post(api_client, "/api/auth", {"email": "admin@example.com"})

        assert response.status_code == 400
        assert "admin_session" not in response.cookies

    def test_wrong_password(self, api_client, admin_user):
        response = _post(
            api_client, "/api/auth", {"email": "admin@example.com", "password": "nope"}
        )

        assert response.status_code == 401

    def test_customer_refused(self, api_client, customer):
        """Customers cannot sign in to the back office."""
        response = _post(
            api_client, "/api/auth", {"email": "alice@example.com", "password": "secret123"}
        )

        assert response.status_code == 403
        assert "admin_session" not in response.cookies

    def test_invalid_json(self, api_client):
        response = api_client.post("/api/auth", data="{", content_type="application/json")

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid JSON in request body"


@pytest.mark.django_db
class TestSignOut:
    """Tests for GET /api/logout."""

    def test_clears_cookie_and_redirects(self, admin_client):
        response = admin_client.get("/api/logout")

        assert response.status_code == 302
        assert response.url == "/login"
        assert response.cookies["admin_session"].value == ""


@pytest.mark.django_db
class TestRoleEnforcement:
    """A USER session never reaches admin operations."""

    def test_user_session_forbidden(self, api_client, customer, sign_in):
        item = ItemFactory(name="Pho Bo")
        sign_in(api_client, customer)

        responses = [
            api_client.get("/api/items"),
            _post(api_client, "/api/items", {"name": "Hack", "price": 1}),
            _put(
                api_client,
                f"/api/items/{item.pk}",
                {"name": "Hacked", "fullDescription": "x", "price": 1},
            ),
            api_client.delete(f"/api/items/{item.pk}"),
            api_client.delete(f"/api/items/{item.pk}/delete"),
        ]

        assert [r.status_code for r in responses] == [403] * 5
        item.refresh_from_db()
        assert item.name == "Pho Bo"
        assert Item.objects.count() == 1

    def test_anonymous_api_request(self, api_client):
        response = api_client.get("/api/items")

        assert response.status_code == 401


@pytest.mark.django_db
class TestItems:
    """Item endpoints."""

    def test_list(self, admin_client):
        ItemFactory(name="Pho Bo", category=CategoryFactory(name="Main Course"))

        response = admin_client.get("/api/items")

        assert response.status_code == 200
        [item] = response.json()
        assert item["name"] == "Pho Bo"
        assert item["category"]["name"] == "Main Course"

    def test_create(self, admin_client):
        category = CategoryFactory(name="Dessert")

        response = _post(
            admin_client,
            "/api/items",
            {
                "name": "Tiramisu",
                "price": 7.99,
                "fullDescription": "Layered",
                "servingTips": ["Serve chilled."],
                "categoryId": category.pk,
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Tiramisu"
        assert data["price"] == "7.99"
        assert data["servingTips"] == ["Serve chilled."]
        assert data["category"] == {"id": category.pk, "name": "Dessert"}

    @pytest.mark.parametrize(
        "payload",
        [
            {"price": 5},
            {"name": "", "price": 5},
            {"name": "Soup", "price": 0},
            {"name": "Soup", "price": -1},
            {"name": "Soup"},
        ],
    )
    def test_create_invalid(self, admin_client, payload):
        response = _post(admin_client, "/api/items", payload)

        assert response.status_code == 400
        assert not Item.objects.exists()

    def test_create_unknown_category(self, admin_client):
        response = _post(admin_client, "/api/items", {"name": "Soup", "price": 5, "categoryId": 99})

        assert response.status_code == 400
        assert response.json()["error"] == "Category not found"

    def test_create_form_endpoint(self, admin_client):
        response = _post(admin_client, "/api/items/create", {"name": "Soup", "price": 5})

        assert response.status_code == 201
        assert response.json()["success"] is True
        assert response.json()["item"]["name"] == "Soup"

    def test_detail(self, admin_client):
        item = ItemFactory()
        LikeFactory(item=item)
        OrderItemFactory(item=item, quantity=4)

        response = admin_client.get(f"/api/items/{item.pk}")

        assert response.status_code == 200
        assert response.json()["likeCount"] == 1
        assert response.json()["orderedQuantity"] == 4

    def test_detail_missing(self, admin_client):
        response = admin_client.get("/api/items/999")

        assert response.status_code == 404
        assert response.json() == {"error": "Item not found"}

    def test_put_update(self, admin_client):
        item = ItemFactory()

        response = _put(
            admin_client,
            f"/api/items/{item.pk}",
            {"name": "Pho Ga", "fullDescription": "Chicken noodle soup", "price": 11.5},
        )

        assert response.status_code == 200
        item.refresh_from_db()
        assert item.name == "Pho Ga"
        assert item.price == Decimal("11.50")

    def test_put_keeps_fields_left_out(self, admin_client):
        """PUT only writes the fields present in the body."""
        soups = CategoryFactory(name="Soups")
        item = ItemFactory(
            category=soups,
            description="Beef noodle soup",
            image="pho.png",
            ingredients=["beef"],
            serving_tips=["Serve hot."],
        )

        response = _put(
            admin_client,
            f"/api/items/{item.pk}",
            {"name": "Pho Ga", "fullDescription": "Chicken", "price": 11},
        )

        assert response.status_code == 200
        item.refresh_from_db()
        assert item.name == "Pho Ga"
        assert item.full_description == "Chicken"
        assert item.category == soups
        assert item.description == "Beef noodle soup"
        assert item.image == "pho.png"
        assert item.ingredients == ["beef"]
        assert item.serving_tips == ["Serve hot."]

    def test_put_null_category_clears_it(self, admin_client):
        item = ItemFactory()

        response = _put(
            admin_client,
            f"/api/items/{item.pk}",
            {"name": "Pho Ga", "fullDescription": "Chicken", "price": 11, "categoryId": None},
        )

        assert response.status_code == 200
        item.refresh_from_db()
        assert item.category is None

    def test_put_moves_category(self, admin_client):
        item = ItemFactory()
        dessert = CategoryFactory(name="Dessert")

        _put(
            admin_client,
            f"/api/items/{item.pk}",
            {"name": "Che", "fullDescription": "Sweet soup", "price": 4, "categoryId": dessert.pk},
        )

        item.refresh_from_db()
        assert item.category == dessert

    def test_put_requires_description(self, admin_client):
        item = ItemFactory()

        response = _put(admin_client, f"/api/items/{item.pk}", {"name": "Pho Ga", "price": 11})

        assert response.status_code == 400

    def test_edit_requires_image(self, admin_client):
        item = ItemFactory()

        response = _post(
            admin_client, f"/api/items/{item.pk}/edit", {"name": "Pho Ga", "price": 11}
        )

        assert response.status_code == 400

    def test_edit(self, admin_client):
        item = ItemFactory()

        response = _post(
            admin_client,
            f"/api/items/{item.pk}/edit",
            {"name": "Pho Ga", "price": 11, "image": "pho-ga.png"},
        )

        assert response.status_code == 200
        assert response.json()["item"]["image"] == "pho-ga.png"

    def test_edit_keeps_category(self, admin_client):
        """The edit form does not send a category; the stored one stays."""
        soups = CategoryFactory(name="Soups")
        item = ItemFactory(category=soups)

        response = _post(
            admin_client,
            f"/api/items/{item.pk}/edit",
            {"name": "Pho Ga", "price": 11, "image": "x.png"},
        )

        assert response.status_code == 200
        assert response.json()["item"]["category"] == {"id": soups.pk, "name": "Soups"}
        item.refresh_from_db()
        assert item.category == soups
        assert item.image == "x.png"

    @pytest.mark.parametrize("suffix", ["", "/delete"])
    def test_delete_cascades(self, admin_client, suffix):
        """Deleting an item removes its likes and order lines."""
        item = ItemFactory()
        LikeFactory(item=item)
        OrderItemFactory(item=item)

        response = admin_client.delete(f"/api/items/{item.pk}{suffix}")

        assert response.status_code == 200
        assert not Item.objects.exists()
        assert not Like.objects.exists()
        assert not OrderItem.objects.exists()

    def test_delete_missing(self, admin_client):
        assert admin_client.delete("/api/items/999/delete").status_code == 404

    def test_wrong_method(self, admin_client):
        item = ItemFactory()

        assert admin_client.get(f"/api/items/{item.pk}/delete").status_code == 405


@pytest.mark.django_db
class TestCategoriesAndSearch:
    """Category and search endpoints."""

    def test_categories_sorted(self, admin_client):
        CategoryFactory(name="Main Course")
        CategoryFactory(name="Appetizer")

        response = admin_client.get("/api/categories")

        assert [c["name"] for c in response.json()] == ["Appetizer", "Main Course"]

    def test_category_items(self, admin_client):
        dessert = CategoryFactory(name="Dessert")
        ItemFactory(name="Tiramisu", category=dessert)
        ItemFactory(name="Pho Bo")

        response = admin_client.get(f"/api/categories/{dessert.pk}/items")

        assert [i["name"] for i in response.json()] == ["Tiramisu"]

    def test_search(self, admin_client):
        ItemFactory(name="Pho Bo", description="Beef noodle soup")
        ItemFactory(name="Tiramisu", description="Dessert")

        response = admin_client.get("/api/search", {"q": "NOODLE"})

        assert [i["name"] for i in response.json()] == ["Pho Bo"]

    def test_blank_search(self, admin_client):
        ItemFactory()

        assert admin_client.get("/api/search", {"q": " "}).json() == []


@pytest.mark.django_db
class TestPages:
    """Page data routes."""

    def test_login_page_is_public(self, api_client):
        response = api_client.get("/login", {"callbackUrl": "/create"})

        assert response.status_code == 200
        assert response.json() == {"page": "login", "callbackUrl": "/create"}

    def test_home_redirects_anonymous(self, api_client):
        response = api_client.get("/")

        assert response.status_code == 302
        assert response.url == "/login?callbackUrl=/"

    def test_home(self, admin_client):
        ItemFactory()

        response = admin_client.get("/")

        assert response.status_code == 200
        assert response.json()["page"] == "home"
        assert len(response.json()["items"]) == 1

    def test_detail(self, admin_client):
        item = ItemFactory()

        response = admin_client.get(f"/detail/{item.pk}")

        assert response.json()["item"]["id"] == item.pk

    def test_create_page(self, admin_client):
        CategoryFactory(name="Dessert")

        response = admin_client.get("/create")

        assert response.json()["categories"][0]["name"] == "Dessert"
