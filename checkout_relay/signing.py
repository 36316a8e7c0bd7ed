"""
Stripe webhook authentication.

The `Stripe-Signature` header looks like

    t=1700000000,v1=5257a869e7...,v1=6ffbb59b2...

Signature and staleness checks are done by `stripe.WebhookSignature`, which
accepts the request when any `v1` digest matches. Timestamps too far in the
future are rejected here as well.
"""
import json
import time

import stripe

from .models import VerifiedEvent, WebhookEnvelope

WEBHOOK_BODY_LIMIT = 65536
DEFAULT_TOLERANCE_SECONDS = 300


class SignatureVerificationError(Exception):
    """Raised for every authentication failure, whatever the cause."""


def header_timestamp(header: str) -> int:
    """The `t=` value of a header stripe has already accepted."""
    for item in header.split(","):
        key, _, value = item.partition("=")
        if key == "t":
            return int(value)
    raise ValueError("no timestamp in signature header")


class WebhookVerifier:
    def __init__(self, secret: str, tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS):
        self._secret = secret
        self._tolerance = tolerance_seconds

    def verify(self, envelope: WebhookEnvelope) -> VerifiedEvent:
        header = envelope.signature_header
        if not header or len(envelope.raw_body) > WEBHOOK_BODY_LIMIT:
            raise SignatureVerificationError("Malformed request")

        try:
            payload = envelope.raw_body.decode("utf-8")
            stripe.WebhookSignature.verify_header(payload, header, self._secret, self._tolerance)
            if header_timestamp(header) > time.time() + self._tolerance:
                raise ValueError("signature timestamp in the future")
            event = json.loads(payload)
        except (stripe.SignatureVerificationError, ValueError):
            raise SignatureVerificationError("Malformed request") from None

        if not isinstance(event, dict) or not isinstance(event.get("type"), str):
            raise SignatureVerificationError("Malformed request")

        return VerifiedEvent(event_type=event["type"], raw_payload=envelope.raw_body)
