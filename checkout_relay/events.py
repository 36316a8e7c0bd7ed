import logging
from typing import Optional

import stripe
from pydantic import ValidationError

from .models import CheckoutSessionEvent, CompletedCheckout, PaymentIntentRef, VerifiedEvent
from .processor import METADATA_NAME, METADATA_NOTE, StripeGateway

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


class EventInterpreter:
    """
    Maps a verified event to a CompletedCheckout, or None when the event is
    not one of ours. None is the common case and not an error.
    """

    def __init__(self, gateway: StripeGateway):
        self._gateway = gateway

    def interpret(self, event: VerifiedEvent) -> Optional[CompletedCheckout]:
        if event.event_type != CHECKOUT_COMPLETED:
            return None

        try:
            session = CheckoutSessionEvent.model_validate_json(event.raw_payload).data.object
        except ValidationError:
            logger.warning("Failed parsing %s event", event.event_type)
            return None

        metadata = session.metadata or {}
        if METADATA_NAME not in metadata or METADATA_NOTE not in metadata:
            return None  # session not created by /session

        ref = session.payment_intent
        if isinstance(ref, PaymentIntentRef):
            ref = ref.id

        return CompletedCheckout(
            display_name=metadata[METADATA_NAME],
            note=metadata[METADATA_NOTE],
            payment_intent_ref=ref,
            amount_minor_units=self._lookup_amount(ref),
        )

    def _lookup_amount(self, ref: Optional[str]) -> Optional[int]:
        if not ref:
            return None
        try:
            return self._gateway.settled_amount(ref)
        except stripe.StripeError as e:
            # amount is optional in the notification
            logger.warning("Failed looking up payment intent %s: %s", ref, e)
            return None
