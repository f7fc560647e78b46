"""Error taxonomy for payment creation.

Client-caused problems (`MissingFieldsError`, `InvalidAmountError`) map to 400,
processor-caused ones (`ProcessorFailureError`) to 500. None are retried.
"""

from typing import Any


class PaymentError(Exception):
    """Base class for errors surfaced to the storefront as a JSON envelope."""

    status_code = 500
    category = "Payment failed"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.category, "details": self.message}


class PaymentValidationError(PaymentError):
    """Request payload rejected before any processor call."""

    status_code = 400

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class MissingFieldsError(PaymentValidationError):
    category = "MissingFields"

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required fields: {', '.join(self.missing)}")


class InvalidAmountError(PaymentValidationError):
    category = "InvalidAmount"

    def __init__(self, message: str = "Invalid amount. Must be greater than 0.") -> None:
        super().__init__(message)


class ProcessorFailureError(PaymentError):
    """The processor call raised, timed out, or returned a non-success status.

    `message` is the processor's own text, passed through verbatim.
    """

    def __init__(self, message: str | None, code: str | None = None) -> None:
        self.code = code
        super().__init__(message or "Unknown error occurred")
