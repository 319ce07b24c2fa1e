"""
Payment services - Stripe integration for storefront checkout.

A customer paying by Stripe confirms a PaymentIntent in the browser; the
storefront only writes the order once the intent is verified here.
"""

import logging
from decimal import Decimal
from typing import Any

from django.conf import settings

import stripe

logger = logging.getLogger(__name__)

# Configure Stripe API key
stripe.api_key = settings.STRIPE_SECRET_KEY


class PaymentError(Exception):
    """Error during payment processing."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


def _payment_error(e: stripe.StripeError) -> PaymentError:
    return PaymentError(
        message=str(e.user_message or e),
        code=getattr(e, "code", None),
    )


def to_cents(amount: Decimal) -> int:
    """Convert a dollar amount to whole cents, dropping fractions of a cent."""
    return int(amount * 100)


def create_payment_intent(
    amount: Decimal,
    currency: str = "usd",
    metadata: dict[str, Any] | None = None,
) -> stripe.PaymentIntent:
    """
    Create a Stripe PaymentIntent for a cart.

    Args:
        amount: Amount in dollars (will be converted to cents)
        currency: Currency code (default: USD)
        metadata: Additional metadata to attach (e.g., customer email)

    Returns:
        stripe.PaymentIntent with client_secret for the frontend

    Raises:
        PaymentError: If Stripe API call fails
    """
    try:
        intent = stripe.PaymentIntent.create(
            amount=to_cents(amount),
            currency=currency,
            automatic_payment_methods={"enabled": True},
            metadata=metadata or {},
        )
    except stripe.StripeError as e:
        logger.warning("Stripe rejected PaymentIntent for %s: %s", amount, e)
        raise _payment_error(e) from e

    logger.info("Created PaymentIntent %s for %s %s", intent.id, amount, currency)
    return intent


def retrieve_payment_intent(payment_intent_id: str) -> stripe.PaymentIntent:
    """
    Retrieve a PaymentIntent from Stripe.

    Raises:
        PaymentError: If PaymentIntent not found or API call fails
    """
    try:
        return stripe.PaymentIntent.retrieve(payment_intent_id)
    except stripe.StripeError as e:
        raise _payment_error(e) from e


def verify_payment_intent(payment_intent_id: str, amount: Decimal | None = None) -> bool:
    """
    Verify that a PaymentIntent has been successfully paid.

    Args:
        payment_intent_id: The Stripe PaymentIntent ID
        amount: When given, the intent must have charged exactly this amount

    Returns:
        True if payment succeeded (for the expected amount), False otherwise
    """
    try:
        intent = retrieve_payment_intent(payment_intent_id)
    except PaymentError as e:
        logger.warning("Could not verify PaymentIntent %s: %s", payment_intent_id, e)
        return False

    if intent.status != "succeeded":
        logger.info("PaymentIntent %s not paid: %s", payment_intent_id, intent.status)
        return False
    if amount is not None and intent.amount != to_cents(amount):
        logger.warning(
            "PaymentIntent %s charged %s cents, expected %s",
            payment_intent_id,
            intent.amount,
            to_cents(amount),
        )
        return False
    return True
