"""Unit tests for provider status normalization."""

import pytest

from kioskpay.common.status import is_settled, normalize_status, parse_amount


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("success", "SUCCESS"),
        (" Pending ", "PENDING"),
        ("", "UNKNOWN"),
        (None, "UNKNOWN"),
        ("REFUNDED", "REFUNDED"),
    ],
)
def test_normalize_status(raw, expected):
    assert normalize_status(raw) == expected


def test_only_success_is_settled():
    """Anything but an exact SUCCESS must keep the kiosk idle."""

    assert is_settled("SUCCESS")
    for status in ("PENDING", "FAILED", "EXPIRED", "UNKNOWN", "success"):
        assert not is_settled(status)


@pytest.mark.parametrize(
    "raw, expected",
    [(15000, 15000), ("15000", 15000), ("15000.00", 15000), (None, 0), ("abc", 0), (True, 0)],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected
