"""
URL configuration for the customer gateway (GATEWAY=customer).
"""

from django.urls import path

from apps.web.storefront import views

urlpatterns = [
    # Authentication
    path("api/login", views.login, name="login_api"),
    path("api/auth", views.auth, name="auth"),
    path("api/auth/me", views.me, name="me"),
    path("api/logout", views.logout, name="logout"),
    path("api/signup", views.signup, name="signup_api"),
    path("api/signin", views.signup, name="signin_api"),
    path("api/forgotpassword", views.forgot_password, name="forgot_password_api"),
    # Cart
    path("api/cart", views.cart, name="cart"),
    path("api/cart/items", views.cart_add, name="cart_add"),
    path("api/cart/items/<int:item_id>", views.cart_line, name="cart_line"),
    # Catalogue
    path("api/categories", views.category_list, name="category_list"),
    path(
        "api/categories/<int:category_id>/items",
        views.category_items,
        name="category_items",
    ),
    path("api/items", views.item_list, name="item_list"),
    path("api/items/<int:item_id>", views.item_detail, name="item_detail"),
    path("api/items/<int:item_id>/like", views.item_like, name="item_like"),
    path("api/search", views.search, name="search"),
    # Orders & payment
    path("api/orders", views.orders, name="orders"),
    path("api/payment", views.payment, name="payment"),
    path("api/payment/intent", views.payment_intent, name="payment_intent"),
    # Pages
    path("", views.home_page, name="home"),
    path("login", views.login_page, name="login"),
    path("signup", views.signup_page, name="signup"),
    path("forgotpassword", views.forgot_password_page, name="forgotpassword"),
    path("item/<int:item_id>", views.item_page, name="item"),
    path("detail/<int:item_id>", views.item_page, name="detail"),
    path("order-success", views.order_success_page, name="order_success"),
    path("checkout", views.checkout_page, name="checkout"),
    path("payment", views.payment_page, name="payment_page"),
    path("order-history", views.order_history_page, name="order_history"),
    path("profile", views.profile_page, name="profile"),
    path("dashboard", views.dashboard_page, name="dashboard"),
]
