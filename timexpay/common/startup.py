"""Startup-time helpers for safe config logging."""

import os

from timexpay.common.logging import logger


SECRET_MARKERS = ["KEY", "SECRET", "PASSWORD", "TOKEN"]


def _safe_env(name: str) -> str:
    """Return env value with simple redaction for secret-like variable names."""

    value = os.getenv(name)
    if value is None:
        return "<unset>"
    if any(secret in name for secret in SECRET_MARKERS):
        return "<redacted>"
    return value


def log_startup_config(service_name: str, keys: list[str], cors_origins: list[str] | None = None) -> None:
    """Log selected startup config keys for quick troubleshooting."""

    config = {"service": service_name}
    for key in keys:
        config[key] = _safe_env(key)
    if cors_origins is not None:
        config["cors_origins"] = ", ".join(cors_origins)
    logger.info("startup_config=%s", config)
