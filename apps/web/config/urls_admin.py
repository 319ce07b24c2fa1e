"""
URL configuration for the admin gateway (GATEWAY=admin).
"""

from django.urls import path

from apps.web.backoffice import views

urlpatterns = [
    # Authentication
    path("api/auth", views.sign_in, name="auth"),
    path("api/logout", views.sign_out, name="logout"),
    # Items
    path("api/items", views.item_collection, name="item_collection"),
    path("api/items/create", views.item_create, name="item_create"),
    path("api/items/<int:item_id>", views.item_resource, name="item_resource"),
    path("api/items/<int:item_id>/edit", views.item_edit, name="item_edit"),
    path("api/items/<int:item_id>/delete", views.item_delete, name="item_delete"),
    # Categories & search
    path("api/categories", views.category_list, name="category_list"),
    path(
        "api/categories/<int:category_id>/items",
        views.category_items,
        name="category_items",
    ),
    path("api/search", views.search, name="search"),
    # Pages
    path("login", views.login_page, name="login"),
    path("", views.home_page, name="home"),
    path("create", views.create_page, name="create"),
    path("detail/<int:item_id>", views.detail_page, name="detail"),
]
