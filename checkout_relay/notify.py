import logging
from typing import Optional

import httpx

from .models import CompletedCheckout, Embed, EmbedField, NotificationMessage

logger = logging.getLogger(__name__)

TITLE = "New Request"
COLOR_SUCCESS = 0x00CC00


def format_price(amount_minor_units: int) -> str:
    return "$" + f"{amount_minor_units / 100:.2f}"


def build_message(checkout: CompletedCheckout) -> NotificationMessage:
    fields = [
        EmbedField(name="Name", value=checkout.display_name),
        EmbedField(name="Fortune", value=checkout.note),
    ]
    if checkout.amount_minor_units is not None:
        fields.append(EmbedField(name="Price", value=format_price(checkout.amount_minor_units)))
    return NotificationMessage(embeds=[Embed(title=TITLE, color=COLOR_SUCCESS, fields=fields)])


class NotificationForwarder:
    """
    Posts completed checkouts to a Discord-compatible webhook.

    Delivery is best effort: one attempt, failures are logged and reported
    through the return value only. Redelivered events are posted again.
    """

    def __init__(self, sink_url: str, timeout: float, transport: Optional[httpx.BaseTransport] = None):
        self._sink_url = sink_url
        self._timeout = timeout
        self._transport = transport

    def forward(self, checkout: CompletedCheckout) -> bool:
        message = build_message(checkout)
        try:
            with httpx.Client(transport=self._transport, timeout=self._timeout) as client:
                r = client.post(self._sink_url, json=message.model_dump())
                r.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed executing webhook: %s", e)
            return False
        return True
