"""HTTP contract tests for the payments relay routes."""

from timexpay.services.payments import main
from timexpay.services.payments.errors import ProcessorFailureError


def test_create_payment_success(client, processor, valid_payload):
    resp = client.post("/create-payment", json=valid_payload)

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "paymentId": "pay_123",
        "status": "COMPLETED",
        "amount": "19.99",
        "customerName": "Alice",
        "customerEmail": "a@x.com",
    }
    assert len(processor.commands) == 1
    assert processor.commands[0].amount_minor_units == 1999
    assert processor.commands[0].note == "Payment for Alice (a@x.com)"


def test_numeric_amount_is_echoed_unchanged(client, valid_payload):
    valid_payload["amount"] = 25

    resp = client.post("/create-payment", json=valid_payload)

    assert resp.status_code == 200
    assert resp.json()["amount"] == 25


def test_missing_field_returns_400_without_charging(client, processor, valid_payload):
    del valid_payload["customerEmail"]

    resp = client.post("/create-payment", json=valid_payload)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields: customerEmail"}
    assert processor.commands == []


def test_zero_amount_returns_400_without_charging(client, processor, valid_payload):
    valid_payload["amount"] = "0"

    resp = client.post("/create-payment", json=valid_payload)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid amount. Must be greater than 0."}
    assert processor.commands == []


def test_overflowing_amount_returns_400_without_charging(client, processor, valid_payload):
    valid_payload["amount"] = "1e999999"

    resp = client.post("/create-payment", json=valid_payload)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid amount. Must be greater than 0."}
    assert processor.commands == []


def test_non_string_name_returns_400(client, processor, valid_payload):
    valid_payload["customerName"] = 123

    resp = client.post("/create-payment", json=valid_payload)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields: customerName"}
    assert processor.commands == []


def test_unparseable_body_is_missing_everything(client, processor):
    resp = client.post("/create-payment", content=b"not json", headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields: sourceId, amount, customerName, customerEmail"}
    assert processor.commands == []


def test_decline_returns_500_with_processor_details(client, processor, valid_payload):
    processor.error = ProcessorFailureError("Card declined.", code="CARD_DECLINED")

    resp = client.post("/create-payment", json=valid_payload)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Payment failed", "details": "Card declined."}


def test_unexpected_processor_exception_degrades_to_500(client, processor, valid_payload):
    processor.error = RuntimeError("socket closed")

    resp = client.post("/create-payment", json=valid_payload)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Payment failed", "details": "socket closed"}


def test_empty_exception_message_falls_back(client, processor, valid_payload):
    processor.error = RuntimeError()

    resp = client.post("/create-payment", json=valid_payload)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Payment failed", "details": "Unknown error occurred"}


def test_config_exposes_public_identifiers(client):
    resp = client.get("/config")

    assert resp.status_code == 200
    assert resp.json() == {"appId": "sandbox-sq0idb-test", "locationId": "L-TEST", "environment": "sandbox"}


def test_config_passes_unset_identifiers_through(client, monkeypatch):
    monkeypatch.setattr(main, "settings", main.settings.model_copy(update={"square_location_id": None}))

    resp = client.get("/config")

    assert resp.status_code == 200
    assert resp.json() == {"appId": "sandbox-sq0idb-test", "locationId": None, "environment": "sandbox"}


def test_config_error_returns_500(client, monkeypatch):
    def broken(**_):
        raise RuntimeError("settings unavailable")

    monkeypatch.setattr(main, "ConfigResponse", broken)

    resp = client.get("/config")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to load configuration"}


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "OK"
    assert body["environment"] == "development"
    assert body["processorEnv"] == "sandbox"
    assert body["timestamp"].endswith("Z")


def test_root_banner(client):
    resp = client.get("/")

    assert resp.json() == {
        "message": "Timex Solutions Payment API",
        "version": "1.0.0",
        "environment": "development",
    }


def test_metrics_exposed(client, valid_payload):
    client.post("/create-payment", json=valid_payload)

    resp = client.get("/metrics")

    assert resp.status_code == 200
    assert "payment_requests_total" in resp.text
    assert "http_requests_total" in resp.text


def test_cors_allows_development_origin(client):
    resp = client.options(
        "/create-payment",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
    )

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert resp.headers["access-control-allow-credentials"] == "true"


def test_cors_rejects_unknown_origin(client):
    resp = client.options(
        "/create-payment",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "POST"},
    )

    assert "access-control-allow-origin" not in resp.headers
