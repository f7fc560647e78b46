"""Public HTTP surface of the payments relay.

The storefront fetches processor config from here, tokenizes the card in the
browser, and posts the token back to `/create-payment` which charges it once
through Square.
"""

from datetime import datetime, timezone
from time import perf_counter
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timexpay.common.config import settings
from timexpay.common.logging import configure_logging, logger, trace_id_ctx
from timexpay.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from timexpay.common.startup import log_startup_config
from timexpay.common.tracing import instrument_app, setup_tracing
from timexpay.services.payments.errors import PaymentError, ProcessorFailureError
from timexpay.services.payments.processor import SquarePaymentsClient
from timexpay.services.payments.schemas import (
    ConfigResponse,
    ErrorEnvelope,
    HealthResponse,
    PaymentResult,
    ServiceInfo,
)
from timexpay.services.payments.service import PaymentService


SERVICE_MESSAGE = "Timex Solutions Payment API"
SERVICE_VERSION = "1.0.0"

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    [
        "SERVICE_NAME",
        "APP_ENV",
        "NODE_ENV",
        "PORT",
        "SQUARE_ENV",
        "SQUARE_APP_ID",
        "SQUARE_LOCATION_ID",
        "SQUARE_ACCESS_TOKEN",
        "PROCESSOR_TIMEOUT_SECONDS",
    ],
    cors_origins=settings.allowed_origins(),
)
service = PaymentService(
    SquarePaymentsClient(
        access_token=settings.square_access_token,
        environment=settings.square_env,
        timeout_seconds=settings.processor_timeout_seconds,
        api_version=settings.square_api_version,
        location_id=settings.square_location_id,
    ),
    service_name=settings.service_name,
)

app = FastAPI(title=SERVICE_MESSAGE, version=SERVICE_VERSION)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
instrument_app(app)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Record request count and latency for every HTTP call."""

    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=settings.service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()


@app.exception_handler(PaymentError)
async def payment_error_handler(_: Request, exc: PaymentError) -> JSONResponse:
    """Render payment errors as the `{error, details?}` envelope."""

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/config", response_model=ConfigResponse, responses={500: {"model": ErrorEnvelope}})
def get_config():
    """Processor identifiers the storefront needs to render the card form."""

    try:
        return ConfigResponse(
            app_id=settings.square_app_id,
            location_id=settings.square_location_id,
            environment=settings.square_env,
        )
    except Exception:
        logger.exception("config error")
        return JSONResponse(status_code=500, content={"error": "Failed to load configuration"})


@app.post(
    "/create-payment",
    response_model=PaymentResult,
    responses={400: {"model": ErrorEnvelope}, 500: {"model": ErrorEnvelope}},
)
async def create_payment(request: Request, x_correlation_id: str | None = Header(default=None)):
    """Validate the storefront payload and charge it through Square."""

    trace_id_ctx.set(x_correlation_id or str(uuid4()))
    try:
        payload = await request.json()
    except ValueError:
        payload = {}
    try:
        return await service.create_payment(payload)
    except PaymentError:
        raise
    except Exception as exc:
        logger.exception("payment error")
        raise ProcessorFailureError(str(exc)) from exc


@app.get("/health", response_model=HealthResponse)
def health():
    """Liveness probe with environment details."""

    return HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        environment=settings.app_env,
        processor_env=settings.square_env,
    )


@app.get("/", response_model=ServiceInfo)
def root():
    return ServiceInfo(message=SERVICE_MESSAGE, version=SERVICE_VERSION, environment=settings.app_env)


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


def run() -> None:
    """Serve the relay on the configured port."""

    logger.info(
        "payment server starting port=%s environment=%s processor_env=%s",
        settings.port,
        settings.app_env,
        settings.square_env,
    )
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
