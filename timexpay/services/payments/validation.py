"""Payment request validation and normalization.

Turns the storefront's raw `{sourceId, amount, customerName, customerEmail}`
payload into a `NormalizedPaymentCommand` for the processor, or raises a
`PaymentValidationError`. Apart from reading the clock and the random source
for the idempotency key this is a pure function of its input.

Amounts are parsed as exact decimals and converted to cents with
ROUND_HALF_UP (half away from zero), so `"0.005"` bills 1 cent and
`"19.994"` bills 1999.
"""

import secrets
import string
import time
from collections.abc import Callable, Mapping
from decimal import ROUND_HALF_UP, Decimal, DecimalException, InvalidOperation
from typing import Any

from timexpay.services.payments.errors import InvalidAmountError, MissingFieldsError
from timexpay.services.payments.schemas import NormalizedPaymentCommand, PaymentRequest


REQUIRED_FIELDS = ("sourceId", "amount", "customerName", "customerEmail")
TEXT_FIELDS = ("sourceId", "customerName", "customerEmail")
CURRENCY = "USD"

_BASE36 = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 9


def _random_suffix() -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(_SUFFIX_LENGTH))


def generate_idempotency_key(
    clock: Callable[[], float] | None = None,
    token_source: Callable[[], str] | None = None,
) -> str:
    """Return `<epoch-ms>-<random base36>`, unique per attempt within a process."""

    now = (clock or time.time)()
    suffix = (token_source or _random_suffix)()
    return f"{int(now * 1000)}-{suffix}"


def _is_missing(name: str, value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    # Text fields only accept JSON strings.
    return name in TEXT_FIELDS


def parse_amount(value: Any) -> Decimal | None:
    """Parse a major-unit amount; `None` when it is not a finite number."""

    # bool is an int subclass; `true` is not an amount.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        text = repr(value)
    elif isinstance(value, str):
        text = value.strip()
    else:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def to_minor_units(amount: Decimal) -> int:
    """Convert major units to cents, rounding half away from zero."""

    return int((amount * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def validate_and_normalize(
    payload: Any,
    *,
    clock: Callable[[], float] | None = None,
    token_source: Callable[[], str] | None = None,
) -> NormalizedPaymentCommand:
    """Validate a raw payment payload and derive the processor command.

    Raises `MissingFieldsError` when any required field is absent or blank, or
    when a text field is not a string, and `InvalidAmountError` when the amount
    is unparseable or not positive once converted to cents.
    """

    if not isinstance(payload, Mapping):
        payload = {}
    request = PaymentRequest.model_validate(dict(payload))

    values = {
        "sourceId": request.source_id,
        "amount": request.amount,
        "customerName": request.customer_name,
        "customerEmail": request.customer_email,
    }
    missing = [name for name in REQUIRED_FIELDS if _is_missing(name, values[name])]
    if missing:
        raise MissingFieldsError(missing)

    amount = parse_amount(request.amount)
    if amount is None:
        raise InvalidAmountError()
    try:
        amount_minor_units = to_minor_units(amount)
    except DecimalException as exc:
        raise InvalidAmountError() from exc
    if amount_minor_units <= 0:
        raise InvalidAmountError()

    customer_name = request.customer_name
    customer_email = request.customer_email
    return NormalizedPaymentCommand(
        source_id=request.source_id,
        amount_minor_units=amount_minor_units,
        currency=CURRENCY,
        idempotency_key=generate_idempotency_key(clock, token_source),
        note=f"Payment for {customer_name} ({customer_email})",
        amount=request.amount,
        customer_name=customer_name,
        customer_email=customer_email,
    )
