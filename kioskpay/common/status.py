"""Transaction status values reported by the payment provider."""

from typing import Any


SUCCESS = "SUCCESS"
PENDING = "PENDING"
FAILED = "FAILED"
EXPIRED = "EXPIRED"
UNKNOWN = "UNKNOWN"

KNOWN_STATUSES: set[str] = {SUCCESS, PENDING, FAILED, EXPIRED, UNKNOWN}


def normalize_status(raw: Any) -> str:
    """Uppercase the provider status; missing/blank values become `UNKNOWN`.

    Values outside `KNOWN_STATUSES` are passed through uppercased so that new
    provider states show up in logs instead of being collapsed.
    """

    if raw is None:
        return UNKNOWN
    value = str(raw).strip().upper()
    return value or UNKNOWN


def is_settled(status: str) -> bool:
    """Only an exact `SUCCESS` releases the kiosk."""

    return status == SUCCESS


def parse_amount(raw: Any) -> int:
    """Coerce a provider amount (int, float or numeric string) to smallest units."""

    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    try:
        return int(float(str(raw).strip()))
    except (ValueError, OverflowError):
        return 0
