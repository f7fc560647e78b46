"""Shared fixtures: deterministic settings and a fake payment processor."""

import os

os.environ["APP_ENV"] = "development"
os.environ["SQUARE_ACCESS_TOKEN"] = "test-access-token"
os.environ["SQUARE_APP_ID"] = "sandbox-sq0idb-test"
os.environ["SQUARE_LOCATION_ID"] = "L-TEST"
os.environ["SQUARE_ENV"] = "sandbox"
os.environ.pop("CORS_ORIGINS", None)
os.environ.pop("OTEL_EXPORTER_OTLP_ENDPOINT", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from timexpay.services.payments import main  # noqa: E402
from timexpay.services.payments.schemas import ProcessorPayment  # noqa: E402
from timexpay.services.payments.service import PaymentService  # noqa: E402


class FakeProcessor:
    """Records every command and replays a canned outcome."""

    def __init__(self, payment_id: str = "pay_123", status: str = "COMPLETED", error: Exception | None = None):
        self.payment_id = payment_id
        self.status = status
        self.error = error
        self.commands = []

    async def create_payment(self, command):
        self.commands.append(command)
        if self.error is not None:
            raise self.error
        return ProcessorPayment(payment_id=self.payment_id, status=self.status)


@pytest.fixture
def processor() -> FakeProcessor:
    return FakeProcessor()


@pytest.fixture
def client(monkeypatch, processor) -> TestClient:
    monkeypatch.setattr(main, "service", PaymentService(processor))
    return TestClient(main.app)


@pytest.fixture
def valid_payload() -> dict:
    return {
        "sourceId": "tok1",
        "amount": "19.99",
        "customerName": "Alice",
        "customerEmail": "a@x.com",
    }
