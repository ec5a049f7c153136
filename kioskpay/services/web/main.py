"""HTTP surface of the kiosk bridge.

Checkout creation, the provider callback (server-to-server and browser return),
status lookup, manual trigger replay and the operator pages.
"""

from time import perf_counter
from typing import Any
from urllib.parse import urlencode
from uuid import uuid4

import uvicorn
from fastapi import Depends, FastAPI, Header, Query, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import BaseModel, Field

from kioskpay.common.config import BridgeSettings, load_settings, parse_csv
from kioskpay.common.errors import BridgeError
from kioskpay.common.logging import configure_logging, invoice_number_ctx, logger, request_id_ctx
from kioskpay.common.metrics import (
    checkout_sessions_total,
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
)
from kioskpay.common.startup import log_startup_config
from kioskpay.common.tracing import instrument_app, setup_tracing
from kioskpay.services.callback.extract import INVOICE_COOKIE, return_invoice
from kioskpay.services.callback.service import CallbackHeaders, CallbackService
from kioskpay.services.doku.client import DokuClient, make_invoice_number
from kioskpay.services.doku.schemas import CheckoutSession
from kioskpay.services.kiosk.trigger import KioskTrigger
from kioskpay.services.web.pages import render_template
from kioskpay.services.web.qr import qr_data_url


INVOICE_COOKIE_MAX_AGE = 30 * 60


class SessionRequest(BaseModel):
    """Payload accepted by `POST /session`."""

    amount: int = Field(gt=0)
    invoice_number: str | None = None
    customer: dict[str, Any] | None = None
    payment_method_types: list[str] | None = None


def get_doku(request: Request) -> DokuClient:
    return request.app.state.doku


def get_callbacks(request: Request) -> CallbackService:
    return request.app.state.callbacks


def set_invoice_cookie(response: Response, invoice_number: str, settings: BridgeSettings) -> None:
    """Fallback for providers that drop `?invoice=` from the return URL."""

    response.set_cookie(
        INVOICE_COOKIE,
        invoice_number,
        max_age=INVOICE_COOKIE_MAX_AGE,
        httponly=False,
        samesite="lax",
        secure=settings.cookie_secure,
    )


def error_text(exc: BridgeError) -> str:
    upstream_status = getattr(exc, "upstream_status", None)
    lines = [exc.message]
    if upstream_status:
        lines.append(f"HTTP {upstream_status}")
    raw = getattr(exc, "raw", None)
    if raw is not None:
        lines.append(str(raw))
    return "\n".join(lines)


def create_app(
    settings: BridgeSettings,
    doku: DokuClient | None = None,
    kiosk: KioskTrigger | None = None,
) -> FastAPI:
    """Wire components from one immutable settings object."""

    app = FastAPI(title="Kiosk Payment Bridge")
    app.state.settings = settings
    app.state.doku = doku or DokuClient(settings)
    app.state.kiosk = kiosk or KioskTrigger(settings)
    app.state.callbacks = CallbackService(settings, app.state.doku, app.state.kiosk)
    instrument_app(app)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Record request count and latency for every HTTP call."""

        request_id_ctx.set(request.headers.get("x-request-id") or str(uuid4()))
        invoice_number_ctx.set("")
        start = perf_counter()
        route = request.url.path
        method = request.method
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            route_obj = request.scope.get("route")
            if route_obj is not None and getattr(route_obj, "path", None):
                route = route_obj.path
            return response
        finally:
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=settings.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=settings.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()

    @app.exception_handler(BridgeError)
    async def bridge_error_handler(_: Request, exc: BridgeError):
        content: dict[str, Any] = {"ok": False, "error": exc.message}
        raw = getattr(exc, "raw", None)
        if raw is not None:
            content["detail"] = raw
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.get("/")
    def landing(status: str = "", invoice: str = "", message: str = ""):
        """Operator landing page; shows the outcome of the last browser return."""

        return render_template(
            "landing.html",
            status=status.upper(),
            invoice=invoice,
            message=message,
            logo_url=settings.landing_logo_url,
        )

    @app.post("/session")
    async def create_session(req: SessionRequest, doku: DokuClient = Depends(get_doku)):
        """Create a checkout session and return its URL plus a QR data URL."""

        session = await _create_or_count(
            doku,
            settings,
            amount=req.amount,
            callback_base_url=settings.public_base_url,
            invoice_number=req.invoice_number,
            customer=req.customer,
            payment_method_types=req.payment_method_types,
        )
        return {
            "ok": True,
            "invoice_number": session.invoice_number,
            "payment_url": session.payment_url,
            "payment_qr_data_url": qr_data_url(session.payment_url),
        }

    @app.get("/pay/{invoice}")
    async def pay_page(
        invoice: str,
        amount: int | None = Query(default=None, gt=0),
        method: str | None = None,
        callback_base: str | None = None,
        doku: DokuClient = Depends(get_doku),
    ):
        """QR page for one invoice, shown on the kiosk screen."""

        amount = amount or settings.pay_page_default_amount
        callback_base_url = (callback_base or settings.public_base_url).rstrip("/")
        if not callback_base_url:
            return PlainTextResponse("Set PUBLIC_BASE_URL or pass ?callback_base=", status_code=400)
        try:
            session = await _create_or_count(
                doku,
                settings,
                amount=amount,
                callback_base_url=callback_base_url,
                invoice_number=invoice,
                payment_method_types=parse_csv(method) or None,
            )
        except BridgeError as exc:
            return PlainTextResponse("Could not create payment.\n" + error_text(exc), status_code=exc.status_code)

        response = render_template(
            "pay.html",
            invoice=session.invoice_number,
            amount=amount,
            payment_url=session.payment_url,
            qr_data_url=qr_data_url(session.payment_url),
        )
        set_invoice_cookie(response, session.invoice_number, settings)
        return response

    @app.get("/pay-now")
    async def pay_now(doku: DokuClient = Depends(get_doku)):
        """Fresh invoice at the fixed kiosk price, straight to the provider checkout."""

        if not settings.public_base_url:
            return PlainTextResponse("PUBLIC_BASE_URL is not set", status_code=500)
        invoice = make_invoice_number()
        try:
            session = await _create_or_count(
                doku,
                settings,
                amount=settings.pay_now_amount,
                callback_base_url=settings.public_base_url,
                invoice_number=invoice,
                payment_method_types=settings.payment_methods or None,
            )
        except BridgeError as exc:
            return PlainTextResponse("Could not create payment.\n" + error_text(exc), status_code=exc.status_code)

        response = RedirectResponse(session.payment_url, status_code=302)
        set_invoice_cookie(response, invoice, settings)
        return response

    @app.post("/doku/callback")
    async def doku_notification(
        request: Request,
        client_id: str | None = Header(default=None, alias="Client-Id"),
        request_id: str | None = Header(default=None, alias="Request-Id"),
        request_timestamp: str | None = Header(default=None, alias="Request-Timestamp"),
        signature: str | None = Header(default=None, alias="Signature"),
        callbacks: CallbackService = Depends(get_callbacks),
    ):
        """Provider notification. Always 200, otherwise the provider keeps retrying."""

        headers = CallbackHeaders(
            client_id=client_id,
            request_id=request_id,
            request_timestamp=request_timestamp,
            signature=signature,
        )
        raw_body = await request.body()
        logger.info("callback received headers=%s body=%s", headers.model_dump(), raw_body.decode("utf-8", "replace"))
        try:
            result = await callbacks.handle_notification(headers, raw_body)
        except Exception as exc:
            logger.exception("callback handling failed: %s", exc)
            return {"ok": False, "error": str(exc)}
        if result.outcome.verdict != "VERIFIED":
            return {"ok": False, "reason": result.outcome.reason}
        return {"ok": True, "triggered": result.triggered}

    @app.get("/doku/callback")
    async def doku_return(request: Request, callbacks: CallbackService = Depends(get_callbacks)):
        """Browser "back to merchant" landing; status is always re-fetched from the provider."""

        invoice = return_invoice(request.query_params, request.cookies)
        if not invoice:
            return RedirectResponse("/?status=UNKNOWN", status_code=302)
        try:
            result = await callbacks.reconcile(invoice)
            query = {"status": result.outcome.status, "invoice": invoice}
        except BridgeError as exc:
            logger.error("status lookup on return failed invoice=%s error=%s", invoice, exc.message)
            query = {"status": "ERROR", "message": exc.message}
        return RedirectResponse(f"{settings.return_base_url}/?{urlencode(query)}", status_code=302)

    @app.get("/status/{invoice}")
    async def transaction_status(invoice: str, doku: DokuClient = Depends(get_doku)):
        """Proxy the provider's status for one invoice."""

        status = await doku.get_transaction_status(invoice)
        return {"ok": True, "status": status.status, "amount": status.amount, "raw": status.raw}

    @app.post("/trigger/{invoice}")
    async def manual_trigger(invoice: str, callbacks: CallbackService = Depends(get_callbacks)):
        """Operator replay: trigger the kiosk if the provider reports SUCCESS."""

        result = await callbacks.reconcile(invoice, raise_trigger_errors=True)
        body: dict[str, Any] = {
            "ok": True,
            "triggered": result.triggered,
            "status": result.outcome.status,
        }
        if result.trigger is not None:
            body["skipped"] = result.trigger.skipped
            body["response"] = result.trigger.response
        return body

    @app.get("/metrics")
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    @app.get("/health")
    def health():
        """Container health probe endpoint."""

        return {"ok": True}

    return app


async def _create_or_count(doku: DokuClient, settings: BridgeSettings, **kwargs) -> CheckoutSession:
    try:
        session = await doku.create_checkout_session(**kwargs)
    except BridgeError:
        checkout_sessions_total.labels(service=settings.service_name, outcome="failed").inc()
        raise
    checkout_sessions_total.labels(service=settings.service_name, outcome="created").inc()
    return session


settings = load_settings()
configure_logging(settings.service_name, settings.log_level)
setup_tracing(settings.service_name, settings.otel_exporter_otlp_endpoint)
log_startup_config(
    settings,
    [
        "doku_base_url",
        "doku_client_id",
        "doku_secret_key",
        "public_base_url",
        "dslrbooth_api_url",
        "default_payment_methods",
        "port",
    ],
)
app = create_app(settings)


def serve() -> None:
    """Run the bridge with uvicorn on the configured port."""

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
