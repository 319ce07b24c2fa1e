"""
Load the demo catalogue: categories, items, two customers and their likes.

Usage:
    uv run python apps/web/manage.py seed_menu
    uv run python apps/web/manage.py seed_menu --admin-email admin@example.com \\
        --admin-password change-me

Safe to run repeatedly; existing rows are reused.
"""

import logging
from decimal import Decimal
from typing import Any

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.web.core.managers import normalize_email
from apps.web.core.models import Role, User
from apps.web.restaurant.models import Category, Item, Like, LikeType

logger = logging.getLogger(__name__)

CATEGORIES = ["Appetizer", "Main Course", "Dessert"]

ITEMS: list[dict[str, Any]] = [
    {
        "name": "Pho Bo",
        "category": "Main Course",
        "description": "Traditional Vietnamese beef noodle soup.",
        "full_description": (
            "Pho bo is one of Vietnam's most iconic dishes. Made with slow-cooked "
            "beef bones, aromatic spices, and fresh rice noodles, it delivers deep "
            "umami flavor in every spoonful."
        ),
        "price": Decimal("12.99"),
        "image": "s3://restaurantwebsiteproject/e7ddae1f-399d-490a-acff-847131fd5cec.png",
        "ingredients": [
            "Beef bones",
            "Rice noodles",
            "Star anise",
            "Cloves",
            "Ginger",
            "Onion",
            "Fish sauce",
        ],
        "serving_tips": [
            "Stir well before eating to mix flavors.",
            "Add lime juice and chili sauce to taste.",
            "Enjoy the broth first, then the noodles and meat.",
        ],
        "recommendations": ["Vietnamese Iced Coffee", "Spring Rolls", "Pickled vegetables"],
    },
    {
        "name": "Banh Mi",
        "category": "Main Course",
        "description": "A delicious fusion of flavors in a crispy baguette.",
        "full_description": (
            "Banh Mi is a classic Vietnamese sandwich made with a crispy baguette, "
            "pickled veggies, herbs, and your choice of protein."
        ),
        "price": Decimal("8.99"),
        "image": "s3://restaurantwebsiteproject/2c4e7cb9-99d6-4d76-bc45-7bffda155548.png",
        "ingredients": ["Baguette", "Pâté", "Pickled carrots", "Cucumber", "Chili sauce"],
        "serving_tips": ["Eat while warm for best texture.", "Pair with a cold drink."],
        "recommendations": ["Fruit smoothie", "Iced coffee"],
    },
    {
        "name": "Spring Rolls",
        "category": "Appetizer",
        "description": "Fresh rolls wrapped in rice paper with herbs and vegetables.",
        "full_description": (
            "These fresh Vietnamese spring rolls are filled with shrimp, vermicelli "
            "noodles, mint, lettuce, and other fresh veggies. Light and healthy!"
        ),
        "price": Decimal("6.99"),
        "image": "s3://restaurantwebsiteproject/1c68945f-3f4f-4a66-8c2a-b369f3e6ee56.png",
        "ingredients": [
            "Shrimp",
            "Vermicelli noodles",
            "Lettuce",
            "Mint",
            "Carrots",
            "Rice paper",
        ],
        "serving_tips": [
            "Dip in peanut or hoisin sauce.",
            "Eat within 30 minutes of preparation.",
        ],
        "recommendations": ["Tofu soup", "Green tea"],
    },
    {
        "name": "Tiramisu",
        "category": "Dessert",
        "description": "Classic Italian layered dessert with espresso-soaked ladyfingers.",
        "full_description": (
            "A rich, creamy, and indulgent dessert made with mascarpone cheese, "
            "cocoa powder, and strong brewed coffee."
        ),
        "price": Decimal("7.99"),
        "image": "s3://restaurantwebsiteproject/3db71eff-9e40-4cb8-8d62-cddeff73d7e8.png",
        "ingredients": ["Ladyfingers", "Espresso", "Mascarpone", "Eggs", "Sugar", "Cocoa powder"],
        "serving_tips": ["Best served chilled.", "Let sit for 5 mins after refrigeration."],
        "recommendations": ["Coffee", "Sweet wine"],
    },
]

USERS = [
    {"email": "alice@example.com", "name": "Alice Nguyen"},
    {"email": "bob@example.com", "name": "Bob Johnson"},
]
DEMO_PASSWORD = "123"

LIKES = [
    ("alice@example.com", "Pho Bo", LikeType.LIKE),
    ("alice@example.com", "Spring Rolls", LikeType.DISLIKE),
    ("bob@example.com", "Banh Mi", LikeType.LIKE),
    ("bob@example.com", "Tiramisu", LikeType.LIKE),
]


class Command(BaseCommand):
    help = "Load the demo menu, customers and likes"

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--admin-email",
            default="",
            help="Also create an ADMIN account with this email",
        )
        parser.add_argument(
            "--admin-password",
            default="",
            help="Password for the ADMIN account",
        )

    def handle(self, *_args: Any, **options: Any) -> None:
        with transaction.atomic():
            categories = {
                name: Category.objects.get_or_create(name=name)[0] for name in CATEGORIES
            }
            self.stdout.write(f"Categories: {', '.join(categories)}")

            items = {}
            for data in ITEMS:
                fields = dict(data)
                fields["category"] = categories[fields.pop("category")]
                items[data["name"]] = Item.objects.get_or_create(
                    name=data["name"], defaults=fields
                )[0]
            self.stdout.write(f"Items: {', '.join(items)}")

            users = {}
            for data in USERS:
                user = User.objects.filter(email=data["email"]).first()
                if user is None:
                    user = User.objects.create_user(
                        email=data["email"], password=DEMO_PASSWORD, name=data["name"]
                    )
                users[user.email] = user
            self.stdout.write(f"Customers: {', '.join(users)}")

            for email, item_name, like_type in LIKES:
                Like.objects.get_or_create(
                    user=users[email], item=items[item_name], defaults={"type": like_type}
                )
            self.stdout.write(f"Likes: {len(LIKES)}")

            if options["admin_email"]:
                self._ensure_admin(options["admin_email"], options["admin_password"])

        logger.info("Seeded demo menu with %d items", len(items))
        self.stdout.write(self.style.SUCCESS("Seeding complete"))

    def _ensure_admin(self, email: str, password: str) -> None:
        if not password:
            self.stderr.write("--admin-password is required with --admin-email")
            return
        admin = User.objects.filter(email=normalize_email(email)).first()
        if admin is None:
            admin = User.objects.create_user(
                email=email, password=password, name="Administrator", role=Role.ADMIN
            )
        elif admin.role != Role.ADMIN:
            admin.role = Role.ADMIN
            admin.save(update_fields=["role", "updated_at"])
        self.stdout.write(f"Admin: {admin.email}")
