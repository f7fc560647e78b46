"""Payment creation flow: validate, charge once, build the response envelope."""

from typing import Any, Protocol

from timexpay.common.logging import idempotency_key_ctx, logger
from timexpay.common.metrics import (
    payment_failure_total,
    payment_latency_seconds,
    payment_requests_total,
    payment_success_total,
)
from timexpay.services.payments.errors import PaymentValidationError, ProcessorFailureError
from timexpay.services.payments.schemas import NormalizedPaymentCommand, PaymentResult, ProcessorPayment
from timexpay.services.payments.validation import validate_and_normalize


class PaymentProcessor(Protocol):
    async def create_payment(self, command: NormalizedPaymentCommand) -> ProcessorPayment: ...


class PaymentService:
    """Owns the single request/response path for `POST /create-payment`."""

    def __init__(self, processor: PaymentProcessor, service_name: str = "timex-payments") -> None:
        self.processor = processor
        self.service_name = service_name

    async def create_payment(self, payload: Any) -> PaymentResult:
        """Validate the payload and charge it through the processor.

        Validation failures never reach the processor. Unexpected processor
        exceptions are reported as `ProcessorFailureError`.
        """

        payment_requests_total.labels(service=self.service_name).inc()
        try:
            command = validate_and_normalize(payload)
        except PaymentValidationError as exc:
            payment_failure_total.labels(service=self.service_name, reason=exc.category).inc()
            logger.warning("payment rejected: %s", exc.message)
            raise

        idempotency_key_ctx.set(command.idempotency_key)
        logger.info(
            "creating payment amount_minor_units=%s currency=%s",
            command.amount_minor_units,
            command.currency,
        )
        try:
            with payment_latency_seconds.labels(service=self.service_name).time():
                payment = await self.processor.create_payment(command)
        except ProcessorFailureError as exc:
            payment_failure_total.labels(service=self.service_name, reason="ProcessorFailure").inc()
            logger.error("payment failed code=%s details=%s", exc.code, exc.message)
            raise
        except Exception as exc:
            payment_failure_total.labels(service=self.service_name, reason="ProcessorFailure").inc()
            logger.exception("payment failed unexpectedly")
            raise ProcessorFailureError(str(exc)) from exc

        payment_success_total.labels(service=self.service_name).inc()
        logger.info(
            "payment successful payment_id=%s status=%s customer=%s",
            payment.payment_id,
            payment.status,
            command.customer_name,
        )
        return PaymentResult(
            payment_id=payment.payment_id,
            status=payment.status,
            amount=command.amount,
            customer_name=command.customer_name,
            customer_email=command.customer_email,
        )
