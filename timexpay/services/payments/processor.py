"""Async client for the Square Payments API.

Charges are created with a single `POST /v2/payments`; failures are not
retried. Every failure surfaces as `ProcessorFailureError` carrying the
processor's own message. `timeout_seconds` bounds the whole call, not just
each connect/read/write phase.
"""

import asyncio

import httpx

from timexpay.common.logging import logger
from timexpay.services.payments.errors import ProcessorFailureError
from timexpay.services.payments.schemas import NormalizedPaymentCommand, ProcessorPayment


SANDBOX_BASE_URL = "https://connect.squareupsandbox.com"
PRODUCTION_BASE_URL = "https://connect.squareup.com"
FAILED_STATUSES = {"FAILED", "CANCELED"}


def base_url_for(environment: str) -> str:
    """Anything other than `production` talks to the sandbox."""

    return PRODUCTION_BASE_URL if environment == "production" else SANDBOX_BASE_URL


def _error_message(resp: httpx.Response) -> tuple[str, str | None]:
    """Extract `(message, code)` from a Square error response."""

    try:
        body = resp.json()
    except ValueError:
        body = None
    errors = body.get("errors") if isinstance(body, dict) else None
    if errors:
        details = [err.get("detail") or err.get("code") or "" for err in errors if isinstance(err, dict)]
        message = "; ".join(detail for detail in details if detail)
        code = errors[0].get("code") if isinstance(errors[0], dict) else None
        if message:
            return message, code
    return resp.text or f"Processor returned HTTP {resp.status_code}", None


class SquarePaymentsClient:
    """Thin wrapper over Square's REST payments endpoint."""

    def __init__(
        self,
        access_token: str,
        environment: str = "sandbox",
        timeout_seconds: float = 10.0,
        api_version: str = "2024-10-17",
        location_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.access_token = access_token
        self.environment = environment
        self.base_url = base_url_for(environment)
        self.timeout_seconds = timeout_seconds
        self.api_version = api_version
        self.location_id = location_id
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Square-Version": self.api_version,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _post(self, command: NormalizedPaymentCommand) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=self._transport,
        ) as client:
            return await client.post(
                "/v2/payments",
                headers=self._headers(),
                json=command.to_processor_body(self.location_id),
            )

    async def create_payment(self, command: NormalizedPaymentCommand) -> ProcessorPayment:
        """Charge the tokenized card once and return `(payment_id, status)`."""

        try:
            resp = await asyncio.wait_for(self._post(command), timeout=self.timeout_seconds)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise ProcessorFailureError(
                f"Payment processor timed out after {self.timeout_seconds:g}s", code="TIMEOUT"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProcessorFailureError(str(exc) or type(exc).__name__) from exc

        if resp.status_code >= 400:
            message, code = _error_message(resp)
            logger.warning("processor rejected payment status_code=%s code=%s", resp.status_code, code)
            raise ProcessorFailureError(message, code=code)

        try:
            payment = resp.json().get("payment") or {}
        except (ValueError, AttributeError) as exc:
            raise ProcessorFailureError("Processor returned an unreadable response") from exc
        payment_id = payment.get("id")
        status = payment.get("status") or "UNKNOWN"
        if not payment_id:
            raise ProcessorFailureError("Processor response missing payment")
        if status in FAILED_STATUSES:
            raise ProcessorFailureError(f"Payment {status}", code=status)
        return ProcessorPayment(payment_id=payment_id, status=status)
