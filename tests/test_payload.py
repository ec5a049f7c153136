"""Ordered field extraction from provider payloads."""

from kioskpay.common.payload import (
    AMOUNT_ACCESSORS,
    INVOICE_ACCESSORS,
    STATUS_ACCESSORS,
    first_present,
    get_path,
)


def test_invoice_prefers_order_invoice_number():
    payload = {
        "order": {"invoice_number": "INV-A", "invoice_number_original": "INV-B"},
        "transaction": {"invoice_number": "INV-C"},
    }
    assert first_present(payload, INVOICE_ACCESSORS) == "INV-A"


def test_invoice_falls_through_in_order():
    assert first_present({"order": {"invoice_number_original": "INV-B"}}, INVOICE_ACCESSORS) == "INV-B"
    assert first_present({"transaction": {"invoice_number": "INV-C"}}, INVOICE_ACCESSORS) == "INV-C"


def test_empty_string_counts_as_absent():
    payload = {"order": {"invoice_number": ""}, "transaction": {"invoice_number": "INV-C"}}
    assert first_present(payload, INVOICE_ACCESSORS) == "INV-C"


def test_amount_and_status_candidates():
    payload = {"transaction": {"amount": 2000}, "status": "success"}
    assert first_present(payload, AMOUNT_ACCESSORS) == 2000
    assert first_present(payload, STATUS_ACCESSORS) == "success"


def test_nothing_present_returns_none():
    assert first_present({}, STATUS_ACCESSORS) is None


def test_get_path_stops_at_non_mapping():
    assert get_path({"order": "flat"}, "order", "amount") is None
