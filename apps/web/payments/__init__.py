"""Payments module - Stripe integration for storefront checkout."""

from apps.web.payments.services import (
    PaymentError,
    create_payment_intent,
    retrieve_payment_intent,
    to_cents,
    verify_payment_intent,
)

__all__ = [
    "PaymentError",
    "create_payment_intent",
    "retrieve_payment_intent",
    "to_cents",
    "verify_payment_intent",
]
