"""Payment outcome handling for notifications, browser returns and manual replay.

Every entry point first produces a `CallbackOutcome` (verified or rejected),
then hands it to the same `act` step that decides whether the kiosk fires.
"""

import json
from typing import Literal

from pydantic import BaseModel

from kioskpay.common.config import BridgeSettings
from kioskpay.common.errors import UpstreamError, VerificationError
from kioskpay.common.logging import invoice_number_ctx, logger
from kioskpay.common.metrics import callbacks_total
from kioskpay.common.payload import (
    AMOUNT_ACCESSORS,
    INVOICE_ACCESSORS,
    STATUS_ACCESSORS,
    first_present,
)
from kioskpay.common.signature import SignatureComponents, body_digest, verify
from kioskpay.common.status import UNKNOWN, is_settled, normalize_status, parse_amount
from kioskpay.services.doku.client import CALLBACK_PATH, DokuClient
from kioskpay.services.kiosk.trigger import KioskTrigger, TriggerResult


VERIFIED = "VERIFIED"
REJECTED = "REJECTED"


class CallbackHeaders(BaseModel):
    """The four signature headers sent with a provider notification."""

    client_id: str | None = None
    request_id: str | None = None
    request_timestamp: str | None = None
    signature: str | None = None


class CallbackOutcome(BaseModel):
    """Tagged result of checking one payment report."""

    verdict: Literal["VERIFIED", "REJECTED"]
    source: Literal["notification", "status_lookup"]
    invoice_number: str | None = None
    amount: int = 0
    status: str = UNKNOWN
    reason: str | None = None

    @property
    def actionable(self) -> bool:
        return self.verdict == VERIFIED and bool(self.invoice_number) and is_settled(self.status)


class ReconcileResult(BaseModel):
    """What happened after acting on an outcome."""

    outcome: CallbackOutcome
    triggered: bool = False
    trigger: TriggerResult | None = None
    trigger_error: str | None = None


class CallbackService:
    """Verifies payment reports and releases the kiosk on confirmed success."""

    def __init__(self, settings: BridgeSettings, doku: DokuClient, kiosk: KioskTrigger) -> None:
        self.settings = settings
        self.doku = doku
        self.kiosk = kiosk

    def verify_notification(self, headers: CallbackHeaders, raw_body: bytes) -> CallbackOutcome:
        """Check the signature over the raw body, then parse the payload."""

        components = SignatureComponents(
            client_id=headers.client_id or self.settings.doku_client_id,
            request_id=headers.request_id or "",
            request_timestamp=headers.request_timestamp or "",
            request_target=CALLBACK_PATH,
            digest=body_digest(raw_body),
        )
        try:
            verify(self.settings.doku_secret_key, components, headers.signature)
        except VerificationError as exc:
            logger.warning("callback signature mismatch request_id=%s reason=%s", headers.request_id, exc.message)
            return self._record(CallbackOutcome(verdict=REJECTED, source="notification", reason=exc.message))

        try:
            payload = json.loads(raw_body or b"{}")
        except ValueError:
            return self._record(CallbackOutcome(verdict=REJECTED, source="notification", reason="invalid payload"))
        if not isinstance(payload, dict):
            return self._record(CallbackOutcome(verdict=REJECTED, source="notification", reason="invalid payload"))

        invoice = first_present(payload, INVOICE_ACCESSORS)
        return self._record(
            CallbackOutcome(
                verdict=VERIFIED,
                source="notification",
                invoice_number=str(invoice) if invoice is not None else None,
                amount=parse_amount(first_present(payload, AMOUNT_ACCESSORS)),
                status=normalize_status(first_present(payload, STATUS_ACCESSORS)),
            )
        )

    async def lookup(self, invoice_number: str) -> CallbackOutcome:
        """Fresh provider status for an invoice; raises `UpstreamError`."""

        status = await self.doku.get_transaction_status(invoice_number)
        return self._record(
            CallbackOutcome(
                verdict=VERIFIED,
                source="status_lookup",
                invoice_number=invoice_number,
                amount=status.amount,
                status=status.status,
            )
        )

    async def act(self, outcome: CallbackOutcome, raise_trigger_errors: bool = False) -> ReconcileResult:
        """Fire the kiosk for actionable outcomes.

        Trigger failures are logged and reported on the result; they only
        propagate when `raise_trigger_errors` is set (manual replay).
        """

        if not outcome.actionable:
            return ReconcileResult(outcome=outcome)
        try:
            trigger = await self.kiosk.notify(outcome.invoice_number, outcome.amount)
        except UpstreamError as exc:
            logger.error("kiosk trigger failed invoice=%s error=%s raw=%s", outcome.invoice_number, exc.message, exc.raw)
            if raise_trigger_errors:
                raise
            return ReconcileResult(outcome=outcome, trigger_error=exc.message)
        return ReconcileResult(outcome=outcome, triggered=not trigger.skipped, trigger=trigger)

    async def handle_notification(self, headers: CallbackHeaders, raw_body: bytes) -> ReconcileResult:
        """Authoritative server-to-server path."""

        return await self.act(self.verify_notification(headers, raw_body))

    async def reconcile(self, invoice_number: str, raise_trigger_errors: bool = False) -> ReconcileResult:
        """Re-query the provider and act on what it says now.

        Used by the browser return (errors swallowed) and manual replay
        (errors surfaced).
        """

        invoice_number_ctx.set(invoice_number)
        outcome = await self.lookup(invoice_number)
        return await self.act(outcome, raise_trigger_errors=raise_trigger_errors)

    def _record(self, outcome: CallbackOutcome) -> CallbackOutcome:
        if outcome.invoice_number:
            invoice_number_ctx.set(outcome.invoice_number)
        callbacks_total.labels(
            service=self.settings.service_name,
            source=outcome.source,
            verdict=outcome.verdict,
        ).inc()
        logger.info(
            "payment outcome source=%s verdict=%s invoice=%s amount=%s status=%s",
            outcome.source,
            outcome.verdict,
            outcome.invoice_number,
            outcome.amount,
            outcome.status,
        )
        return outcome
