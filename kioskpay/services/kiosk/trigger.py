"""dslrBooth trigger: one best-effort GET per confirmed payment.

No retry and no queue. A failed call leaves the kiosk un-notified until an
operator replays it through `POST /trigger/{invoice}`.
"""

from typing import Any

import httpx
from pydantic import BaseModel

from kioskpay.common.config import BridgeSettings
from kioskpay.common.errors import UpstreamError
from kioskpay.common.logging import logger
from kioskpay.common.metrics import kiosk_triggers_total, upstream_request_duration_seconds


class TriggerResult(BaseModel):
    """Outcome of one kiosk notification."""

    ok: bool
    skipped: bool = False
    response: Any = None


class KioskTrigger:
    """Calls the configured kiosk endpoint with invoice and amount appended."""

    def __init__(self, settings: BridgeSettings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self.transport = transport

    async def notify(self, invoice_number: str, amount: int) -> TriggerResult:
        endpoint = self.settings.dslrbooth_api_url
        service = self.settings.service_name
        if not endpoint:
            logger.warning("DSLRBOOTH_API_URL is not set, skipping trigger invoice=%s", invoice_number)
            kiosk_triggers_total.labels(service=service, outcome="skipped").inc()
            return TriggerResult(ok=True, skipped=True)

        # `params=` would replace the endpoint's own query (mode, password).
        url = httpx.URL(endpoint).copy_merge_params({"invoice": invoice_number, "amount": str(amount)})
        with upstream_request_duration_seconds.labels(dependency="kiosk", operation="trigger").time():
            try:
                async with httpx.AsyncClient(
                    transport=self.transport,
                    timeout=self.settings.kiosk_timeout_seconds,
                ) as client:
                    resp = await client.get(url)
            except httpx.HTTPError as exc:
                kiosk_triggers_total.labels(service=service, outcome="failed").inc()
                raise UpstreamError(f"kiosk unreachable: {exc}") from exc

        body = _body(resp)
        if resp.is_error:
            kiosk_triggers_total.labels(service=service, outcome="failed").inc()
            raise UpstreamError(
                f"kiosk answered HTTP {resp.status_code}",
                upstream_status=resp.status_code,
                raw=body,
            )
        kiosk_triggers_total.labels(service=service, outcome="ok").inc()
        logger.info("kiosk triggered invoice=%s amount=%s", invoice_number, amount)
        return TriggerResult(ok=True, response=body)


def _body(resp: httpx.Response) -> Any:
    if not resp.content:
        return {"ok": True}
    try:
        return resp.json()
    except ValueError:
        return resp.text
