"""Error taxonomy shared by the bridge components."""

from typing import Any


class BridgeError(Exception):
    """Base error; `status_code` is what the HTTP layer answers with."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigError(BridgeError):
    """A required setting is missing for the requested operation."""


class UpstreamError(BridgeError):
    """The payment provider or kiosk answered with a failure (or not at all)."""

    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int | None = None,
        raw: Any = None,
    ) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.raw = raw


class VerificationError(BridgeError):
    """Inbound callback signature did not match."""

    status_code = 401
