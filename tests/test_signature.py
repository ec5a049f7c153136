"""Unit tests for request signing and callback signature verification."""

import base64
import hashlib
import hmac
import re

import pytest

from kioskpay.common.errors import VerificationError
from kioskpay.common.signature import (
    SignatureComponents,
    body_digest,
    canonical_string,
    request_timestamp,
    sign,
    signed_headers,
    verify,
)


BODY = b'{"order":{"invoice_number":"INV-1","amount":15000},"transaction":{"status":"SUCCESS"}}'


def components(body: bytes | None = BODY, **overrides) -> SignatureComponents:
    values = {
        "client_id": "BRN-1",
        "request_id": "a1b2c3",
        "request_timestamp": "2024-05-01T10:00:00Z",
        "request_target": "/doku/callback",
        "digest": body_digest(body) if body is not None else None,
    }
    values.update(overrides)
    return SignatureComponents(**values)


def test_canonical_string_with_digest():
    c = components(body=b"{}")
    assert canonical_string(c) == (
        "Client-Id:BRN-1\n"
        "Request-Id:a1b2c3\n"
        "Request-Timestamp:2024-05-01T10:00:00Z\n"
        "Request-Target:/doku/callback\n"
        f"Digest:{body_digest(b'{}')}"
    )


def test_canonical_string_without_digest_has_four_lines():
    assert canonical_string(components(body=None)).count("\n") == 3


def test_body_digest_is_base64_sha256_of_raw_bytes():
    assert body_digest(BODY) == base64.b64encode(hashlib.sha256(BODY).digest()).decode()


def test_sign_matches_independent_hmac():
    c = components()
    mac = hmac.new(b"secret", canonical_string(c).encode(), hashlib.sha256).digest()
    assert sign("secret", c) == "HMACSHA256=" + base64.b64encode(mac).decode()


def test_signing_is_deterministic():
    assert sign("secret", components()) == sign("secret", components())


def test_single_byte_change_in_body_changes_signature():
    tampered = BODY.replace(b"15000", b"15001")
    assert body_digest(tampered) != body_digest(BODY)
    assert sign("secret", components(body=tampered)) != sign("secret", components())


def test_reserialized_body_does_not_verify():
    spaced = b'{"order": {"invoice_number": "INV-1", "amount": 15000}, "transaction": {"status": "SUCCESS"}}'
    signature = sign("secret", components())
    with pytest.raises(VerificationError):
        verify("secret", components(body=spaced), signature)


def test_verify_accepts_exact_match():
    verify("secret", components(), sign("secret", components()))


@pytest.mark.parametrize(
    "received",
    [
        None,
        "",
        "HMACSHA256=AAAA",
        "garbage",
    ],
)
def test_verify_rejects_mismatch(received):
    with pytest.raises(VerificationError):
        verify("secret", components(), received)


def test_verify_rejects_algorithm_prefix_mismatch():
    good = sign("secret", components())
    with pytest.raises(VerificationError):
        verify("secret", components(), good.replace("HMACSHA256=", "HMACSHA512="))


def test_verify_rejects_other_secret():
    with pytest.raises(VerificationError):
        verify("secret", components(), sign("other-secret", components()))


def test_request_timestamp_format():
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", request_timestamp())


def test_signed_headers_round_trip_through_verify():
    headers = signed_headers("BRN-1", "secret", "/checkout/v1/payment", body=BODY)
    c = SignatureComponents(
        client_id=headers["Client-Id"],
        request_id=headers["Request-Id"],
        request_timestamp=headers["Request-Timestamp"],
        request_target="/checkout/v1/payment",
        digest=body_digest(BODY),
    )
    verify("secret", c, headers["Signature"])


def test_signed_headers_use_fresh_request_id():
    first = signed_headers("BRN-1", "secret", "/orders/v1/status/INV-1")
    second = signed_headers("BRN-1", "secret", "/orders/v1/status/INV-1")
    assert first["Request-Id"] != second["Request-Id"]
