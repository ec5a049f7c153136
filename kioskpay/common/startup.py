"""Startup-time helpers for safe config logging."""

from urllib.parse import urlsplit, urlunsplit

from kioskpay.common.config import BridgeSettings
from kioskpay.common.logging import logger


SECRET_MARKERS = ("KEY", "SECRET", "PASSWORD", "TOKEN")


def _strip_url_credentials(value: str) -> str:
    """Drop userinfo, query and fragment; kiosk URLs carry their password in the query."""

    parts = urlsplit(value)
    if not parts.scheme or not parts.hostname:
        return value
    netloc = parts.hostname if parts.port is None else f"{parts.hostname}:{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, "", ""))


def _safe_value(name: str, value) -> str:
    """Return a printable value with simple redaction for secret-like names."""

    if value in (None, ""):
        return "<unset>"
    if any(marker in name.upper() for marker in SECRET_MARKERS):
        return "<redacted>"
    if name.upper().endswith("_URL"):
        return _strip_url_credentials(str(value))
    return str(value)


def log_startup_config(settings: BridgeSettings, keys: list[str]) -> None:
    """Log selected settings fields for quick troubleshooting."""

    values = settings.model_dump()
    config = {"service": settings.service_name}
    for key in keys:
        config[key.upper()] = _safe_value(key, values.get(key))
    logger.info("startup_config=%s", config)
