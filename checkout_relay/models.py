from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, Union

MIN_AMOUNT_MINOR_UNITS = 100
MAX_NAME_LENGTH = 300
MAX_NOTE_LENGTH = 3000


class SessionCreateRequest(BaseModel):
    model_config = ConfigDict(strict=True)

    Price: str = ""
    Name: str = ""
    Fortune: str = ""

    @model_validator(mode="before")
    @classmethod
    def fold_keys(cls, data):
        """Match keys case-insensitively; with duplicates the last one wins."""
        if not isinstance(data, dict):
            return data
        names = {name.casefold(): name for name in cls.model_fields}
        return {names.get(key.casefold(), key): value for key, value in data.items()}


class SessionCreateResponse(BaseModel):
    SessionID: str


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount_minor_units: int = Field(ge=MIN_AMOUNT_MINOR_UNITS)
    display_name: str = Field(max_length=MAX_NAME_LENGTH)
    note: str = Field(max_length=MAX_NOTE_LENGTH)


class CheckoutSessionHandle(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str


class WebhookEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_body: bytes
    signature_header: Optional[str] = None


class VerifiedEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_type: str
    raw_payload: bytes


class PaymentIntentRef(BaseModel):
    id: str


class CheckoutSessionObject(BaseModel):
    """The `data.object` of a checkout.session.* event."""

    id: Optional[str] = None
    metadata: Optional[dict[str, str]] = None
    payment_intent: Union[str, PaymentIntentRef, None] = None


class EventData(BaseModel):
    object: CheckoutSessionObject


class CheckoutSessionEvent(BaseModel):
    type: str
    data: EventData


class CompletedCheckout(BaseModel):
    model_config = ConfigDict(frozen=True)

    display_name: str
    note: str
    payment_intent_ref: Optional[str] = None
    amount_minor_units: Optional[int] = None


class EmbedField(BaseModel):
    name: str
    value: str


class Embed(BaseModel):
    title: str
    color: int
    fields: list[EmbedField]


class NotificationMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    embeds: list[Embed]
