import hashlib
import hmac
import json
import time
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from checkout_relay.main import create_app
from checkout_relay.notify import NotificationForwarder
from checkout_relay.processor import StripeGateway
from checkout_relay.settings import Settings


WEBHOOK_SECRET = "whsec_test_secret"
SINK_URL = "https://discord.test/api/webhooks/1/token"


def stripe_signature(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp=None) -> str:
    """A `Stripe-Signature` header as Stripe would send it."""
    if timestamp is None:
        timestamp = int(time.time())
    signed = f"{timestamp}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


class RecordingSink:
    """httpx.MockTransport handler that records every request it receives."""

    def __init__(self, status_code=204):
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code)

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests]


def checkout_completed_event(metadata=None, payment_intent="pi_test_123", event_type="checkout.session.completed"):
    session = {"id": "cs_test_123", "object": "checkout.session", "payment_intent": payment_intent}
    if metadata is not None:
        session["metadata"] = metadata
    return json.dumps(
        {"id": "evt_test_1", "object": "event", "type": event_type, "data": {"object": session}}
    ).encode("utf-8")


@pytest.fixture()
def settings():
    return Settings(
        stripe_secret_key="sk_test_123",
        stripe_publishable_key="pk_test_123",
        stripe_webhook_secret=WEBHOOK_SECRET,
        sink_webhook_url=SINK_URL,
        host_domain="https://fortune.test",
        contact="owner@fortune.test",
    )


@pytest.fixture()
def stripe_client():
    client = MagicMock()
    client.v1.checkout.sessions.create.return_value = MagicMock(id="cs_test_123")
    client.v1.payment_intents.retrieve.return_value = MagicMock(amount=500)
    return client


@pytest.fixture()
def gateway(settings, stripe_client):
    return StripeGateway(settings.stripe_secret_key, 1.0, client=stripe_client)


@pytest.fixture()
def sink():
    return RecordingSink()


@pytest.fixture()
def forwarder(sink):
    return NotificationForwarder(SINK_URL, 1.0, transport=httpx.MockTransport(sink))


@pytest.fixture()
def client(settings, gateway, forwarder):
    return TestClient(create_app(settings, gateway=gateway, forwarder=forwarder))


@pytest.fixture()
def make_event():
    return checkout_completed_event


@pytest.fixture()
def signed():
    """Headers carrying a valid signature for the given payload."""

    def sign(payload: bytes, timestamp=None, secret=WEBHOOK_SECRET):
        return {"Stripe-Signature": stripe_signature(payload, secret, timestamp)}

    return sign


@pytest.fixture()
def signature():
    """Builds a `Stripe-Signature` header value."""
    return stripe_signature
