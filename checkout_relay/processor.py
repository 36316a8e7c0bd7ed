import logging
from typing import Optional

import stripe

from .models import CheckoutRequest, CheckoutSessionHandle

logger = logging.getLogger(__name__)

CURRENCY = "usd"
PRODUCT_NAME = "Fortune Telling"
METADATA_NAME = "name"
METADATA_NOTE = "fortune"


class UpstreamError(Exception):
    pass


def build_session_params(req: CheckoutRequest, host_domain: str) -> dict:
    return {
        "payment_method_types": ["card"],
        "line_items": [
            {
                "price_data": {
                    "currency": CURRENCY,
                    "product_data": {"name": PRODUCT_NAME},
                    "unit_amount": req.amount_minor_units,
                },
                "quantity": 1,
            }
        ],
        "mode": "payment",
        # Stripe substitutes {CHECKOUT_SESSION_ID} itself
        "success_url": host_domain + "/success?session_id={CHECKOUT_SESSION_ID}",
        "cancel_url": host_domain + "/cancel",
        "metadata": {
            METADATA_NAME: req.display_name,
            METADATA_NOTE: req.note,
        },
    }


class StripeGateway:
    """Thin wrapper over the two Stripe calls the relay makes."""

    def __init__(self, secret_key: str, timeout: float, client: Optional[stripe.StripeClient] = None):
        self._client = client or stripe.StripeClient(
            secret_key,
            http_client=stripe.RequestsClient(timeout=timeout),
            max_network_retries=0,
        )

    def create_session(self, req: CheckoutRequest, host_domain: str) -> CheckoutSessionHandle:
        try:
            session = self._client.v1.checkout.sessions.create(
                params=build_session_params(req, host_domain),
            )
        except stripe.StripeError as e:
            logger.error("Failed creating session: %s", e)
            raise UpstreamError("Failed creating session") from e
        return CheckoutSessionHandle(session_id=session.id)

    def settled_amount(self, payment_intent_ref: str) -> int:
        """Amount of a payment intent in minor units. Raises stripe.StripeError."""
        intent = self._client.v1.payment_intents.retrieve(payment_intent_ref)
        return intent.amount
