"""DOKU checkout API client.

Creates hosted checkout sessions and looks up transaction status. Every call is
signed with `kioskpay.common.signature`; the create call signs the exact JSON
bytes it sends.
"""

import json
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx

from kioskpay.common.config import BridgeSettings
from kioskpay.common.errors import ConfigError, UpstreamError
from kioskpay.common.logging import logger
from kioskpay.common.metrics import upstream_request_duration_seconds
from kioskpay.common.payload import AMOUNT_ACCESSORS, first_present, get_path
from kioskpay.common.signature import signed_headers
from kioskpay.common.status import normalize_status, parse_amount
from kioskpay.services.doku.schemas import (
    GUEST_CUSTOMER,
    CheckoutRequest,
    CheckoutSession,
    TransactionStatus,
)


CHECKOUT_TARGET = "/checkout/v1/payment"
STATUS_TARGET = "/orders/v1/status/{invoice}"
CALLBACK_PATH = "/doku/callback"


def make_invoice_number(now: datetime | None = None) -> str:
    """Timestamp-based invoice id, e.g. `INV-20240501-101500-042`."""

    now = now or datetime.now()
    return f"INV-{now:%Y%m%d-%H%M%S}-{now.microsecond // 1000:03d}"


def build_checkout_body(req: CheckoutRequest, currency: str, payment_due_minutes: int) -> dict[str, Any]:
    """Provider request body; redirect URLs carry the invoice so it survives the redirect."""

    base = req.callback_base_url.rstrip("/")
    notify_url = f"{base}{CALLBACK_PATH}"
    invoice_param = quote(req.invoice_number, safe="")
    return_url = f"{notify_url}?invoice={invoice_param}"

    payment: dict[str, Any] = {"payment_due_date": payment_due_minutes}
    # Without explicit methods the provider offers everything enabled for the merchant.
    if req.payment_method_types:
        payment["payment_method_types"] = list(req.payment_method_types)

    return {
        "order": {
            "amount": req.amount,
            "invoice_number": req.invoice_number,
            "currency": currency,
            "callback_url": notify_url,
            "callback_url_cancel": notify_url,
            "return_url": return_url,
            "success_url": return_url,
            "failed_url": f"{return_url}&status=FAILED",
        },
        "payment": payment,
        "customer": req.customer,
        "additional_info": {
            "return_url": return_url,
            "success_page_url": return_url,
            "front_callback_url": return_url,
            "doku_wallet_notify_url": notify_url,
        },
    }


def _json_or_text(resp: httpx.Response) -> dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {"body": resp.text}
    return data if isinstance(data, dict) else {"payload": data}


class DokuClient:
    """Signed calls to the provider; one short-lived `httpx.AsyncClient` per call."""

    def __init__(self, settings: BridgeSettings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self.transport = transport

    async def _send(self, method: str, target: str, operation: str, body: bytes | None = None) -> httpx.Response:
        headers = signed_headers(
            self.settings.doku_client_id,
            self.settings.doku_secret_key,
            target,
            body=body,
        )
        if body is not None:
            headers["Content-Type"] = "application/json"
        url = f"{self.settings.doku_base_url}{target}"
        with upstream_request_duration_seconds.labels(dependency="doku", operation=operation).time():
            try:
                async with httpx.AsyncClient(
                    transport=self.transport,
                    timeout=self.settings.provider_timeout_seconds,
                ) as client:
                    return await client.request(method, url, content=body, headers=headers)
            except httpx.HTTPError as exc:
                logger.error("doku %s transport failure: %s", operation, exc)
                raise UpstreamError(f"payment provider unreachable: {exc}") from exc

    async def create_checkout_session(
        self,
        amount: int,
        callback_base_url: str,
        invoice_number: str | None = None,
        customer: dict[str, Any] | None = None,
        payment_method_types: list[str] | None = None,
    ) -> CheckoutSession:
        """Create a hosted checkout page and return its URL."""

        if not callback_base_url:
            raise ConfigError("PUBLIC_BASE_URL is not set", status_code=400)
        req = CheckoutRequest(
            amount=amount,
            invoice_number=invoice_number or make_invoice_number(),
            callback_base_url=callback_base_url,
            customer=customer or dict(GUEST_CUSTOMER),
            payment_method_types=payment_method_types,
        )
        body = build_checkout_body(req, self.settings.checkout_currency, self.settings.payment_due_minutes)
        # The digest covers these bytes, so they are sent as-is.
        raw_body = json.dumps(body, separators=(",", ":")).encode("utf-8")
        order = body["order"]
        logger.info(
            "create checkout invoice=%s callback_url=%s return_url=%s",
            req.invoice_number,
            order["callback_url"],
            order["return_url"],
        )

        resp = await self._send("POST", CHECKOUT_TARGET, "create_checkout", body=raw_body)
        data = _json_or_text(resp)
        if resp.is_error:
            raise UpstreamError(
                f"checkout creation failed with HTTP {resp.status_code}",
                upstream_status=resp.status_code,
                raw=data,
            )
        payment_url = get_path(data, "response", "payment", "url")
        if not payment_url:
            raise UpstreamError("provider response has no payment.url", upstream_status=resp.status_code, raw=data)
        return CheckoutSession(invoice_number=req.invoice_number, payment_url=payment_url, raw=data)

    async def get_transaction_status(self, invoice_number: str) -> TransactionStatus:
        """Fetch the provider's current view of one invoice."""

        target = STATUS_TARGET.format(invoice=quote(invoice_number, safe=""))
        resp = await self._send("GET", target, "get_status")
        data = _json_or_text(resp)
        if resp.is_error:
            raise UpstreamError(
                f"status lookup failed with HTTP {resp.status_code}",
                upstream_status=resp.status_code,
                raw=data,
            )
        return TransactionStatus(
            invoice_number=invoice_number,
            status=normalize_status(get_path(data, "transaction", "status")),
            amount=parse_amount(first_present(data, AMOUNT_ACCESSORS)),
            raw=data,
        )
