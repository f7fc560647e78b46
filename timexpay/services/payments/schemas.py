"""API request/response schemas and the processor-ready payment command."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PaymentRequest(BaseModel):
    """Raw payload accepted by `POST /create-payment`.

    Every field is optional here; presence is enforced by the validator so the
    storefront gets a `MissingFields` error rather than a schema error.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    source_id: Any = Field(default=None, alias="sourceId")
    amount: Any = None
    customer_name: Any = Field(default=None, alias="customerName")
    customer_email: Any = Field(default=None, alias="customerEmail")


class NormalizedPaymentCommand(BaseModel):
    """Validated payment ready to hand to the processor."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    amount_minor_units: int = Field(gt=0)
    currency: str = "USD"
    idempotency_key: str
    note: str
    amount: str | int | float
    customer_name: str
    customer_email: str

    def to_processor_body(self, location_id: str | None = None) -> dict[str, Any]:
        """Render the Square `CreatePayment` request body."""

        body: dict[str, Any] = {
            "source_id": self.source_id,
            "idempotency_key": self.idempotency_key,
            "amount_money": {"amount": self.amount_minor_units, "currency": self.currency},
            "autocomplete": True,
            "note": self.note,
        }
        if location_id:
            body["location_id"] = location_id
        return body


class ProcessorPayment(BaseModel):
    """The part of the processor's payment object the relay cares about."""

    payment_id: str
    status: str


class PaymentResult(BaseModel):
    """Success envelope returned to the storefront."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    payment_id: str = Field(alias="paymentId")
    status: str
    amount: str | int | float
    customer_name: str = Field(alias="customerName")
    customer_email: str = Field(alias="customerEmail")


class ErrorEnvelope(BaseModel):
    error: str
    details: str | None = None


class ConfigResponse(BaseModel):
    """Public processor settings the storefront needs to tokenize cards."""

    model_config = ConfigDict(populate_by_name=True)

    app_id: str | None = Field(default=None, alias="appId")
    location_id: str | None = Field(default=None, alias="locationId")
    environment: str


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "OK"
    timestamp: str
    environment: str
    processor_env: str = Field(alias="processorEnv")


class ServiceInfo(BaseModel):
    message: str
    version: str
    environment: str
