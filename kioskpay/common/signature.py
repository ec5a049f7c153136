"""Request signing and verification for the DOKU non-SNAP API.

Both directions use the same scheme: an HMAC-SHA256 over a fixed multi-line
canonical string, base64-encoded and prefixed with the algorithm name. The
body digest is taken over the exact bytes on the wire, never a re-serialized
copy of the payload.
"""

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict

from kioskpay.common.errors import VerificationError


SIGNATURE_ALGORITHM = "HMACSHA256"


class SignatureComponents(BaseModel):
    """Fields covered by the signature, in canonical order."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    request_id: str
    request_timestamp: str
    request_target: str
    digest: str | None = None


def body_digest(raw: bytes) -> str:
    """Base64 of the SHA-256 of the raw body bytes."""

    return base64.b64encode(hashlib.sha256(raw).digest()).decode("ascii")


def canonical_string(components: SignatureComponents) -> str:
    lines = [
        f"Client-Id:{components.client_id}",
        f"Request-Id:{components.request_id}",
        f"Request-Timestamp:{components.request_timestamp}",
        f"Request-Target:{components.request_target}",
    ]
    if components.digest:
        lines.append(f"Digest:{components.digest}")
    return "\n".join(lines)


def sign(secret: str, components: SignatureComponents) -> str:
    """Return `HMACSHA256=<base64>` for the canonical string."""

    mac = hmac.new(
        secret.encode("utf-8"),
        canonical_string(components).encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return f"{SIGNATURE_ALGORITHM}={base64.b64encode(mac).decode('ascii')}"


def verify(secret: str, components: SignatureComponents, received: str | None) -> None:
    """Raise `VerificationError` unless `received` equals the expected signature exactly."""

    if not received:
        raise VerificationError("missing signature header")
    expected = sign(secret, components)
    if not hmac.compare_digest(received.encode("utf-8"), expected.encode("utf-8")):
        raise VerificationError("invalid signature")


def request_timestamp(now: datetime | None = None) -> str:
    """UTC timestamp in the provider's format, e.g. `2024-05-01T10:00:00Z`."""

    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def signed_headers(
    client_id: str,
    secret: str,
    request_target: str,
    body: bytes | None = None,
    request_id: str | None = None,
    timestamp: str | None = None,
) -> dict[str, str]:
    """Build the four outgoing auth headers; digest is included only with a body."""

    components = SignatureComponents(
        client_id=client_id,
        request_id=request_id or str(uuid4()),
        request_timestamp=timestamp or request_timestamp(),
        request_target=request_target,
        digest=body_digest(body) if body is not None else None,
    )
    return {
        "Client-Id": components.client_id,
        "Request-Id": components.request_id,
        "Request-Timestamp": components.request_timestamp,
        "Signature": sign(secret, components),
    }
