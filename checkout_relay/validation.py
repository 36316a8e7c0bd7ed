import re

from pydantic import ValidationError

from .models import (
    MAX_NAME_LENGTH,
    MAX_NOTE_LENGTH,
    MIN_AMOUNT_MINOR_UNITS,
    CheckoutRequest,
    SessionCreateRequest,
)

SESSION_BODY_LIMIT = 65535
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INTEGER = re.compile(r"[+-]?[0-9]+")


class CheckoutValidationError(Exception):
    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


MALFORMED_BODY = ("malformed-body", "Malformed request")
NON_NUMERIC_AMOUNT = ("non-numeric-amount", "Malformed request")
AMOUNT_TOO_LOW = ("amount-too-low", "Price too low")
NAME_TOO_LONG = ("name-too-long", "Name too long")
NOTE_TOO_LONG = ("note-too-long", "Fortune too long")


def parse_amount(price: str) -> int:
    """Signed 64-bit base-10 integer, anything else is non-numeric."""
    if not _INTEGER.fullmatch(price):
        raise CheckoutValidationError(*NON_NUMERIC_AMOUNT)
    try:
        amount = int(price)
    except ValueError:
        # longer than int() will convert
        raise CheckoutValidationError(*NON_NUMERIC_AMOUNT) from None
    if not INT64_MIN <= amount <= INT64_MAX:
        raise CheckoutValidationError(*NON_NUMERIC_AMOUNT)
    return amount


def validate_checkout_request(raw: bytes) -> CheckoutRequest:
    """
    Turn a raw /session body into a CheckoutRequest.

    Checks run in a fixed order so a body with several problems always
    reports the same one:
      body -> amount format -> amount floor -> name length -> note length
    """
    if len(raw) > SESSION_BODY_LIMIT:
        raise CheckoutValidationError(*MALFORMED_BODY)

    try:
        wire = SessionCreateRequest.model_validate_json(raw)
    except ValidationError:
        raise CheckoutValidationError(*MALFORMED_BODY) from None

    amount = parse_amount(wire.Price)
    if amount < MIN_AMOUNT_MINOR_UNITS:
        raise CheckoutValidationError(*AMOUNT_TOO_LOW)
    if len(wire.Name) > MAX_NAME_LENGTH:
        raise CheckoutValidationError(*NAME_TOO_LONG)
    if len(wire.Fortune) > MAX_NOTE_LENGTH:
        raise CheckoutValidationError(*NOTE_TOO_LONG)

    return CheckoutRequest(
        amount_minor_units=amount,
        display_name=wire.Name,
        note=wire.Fortune,
    )
