"""Fake provider/kiosk endpoints and settings builders shared by the tests."""

import json

import httpx
from fastapi.testclient import TestClient

from kioskpay.common.config import BridgeSettings
from kioskpay.services.doku.client import DokuClient
from kioskpay.services.kiosk.trigger import KioskTrigger
from kioskpay.services.web.main import create_app


CLIENT_ID = "BRN-0001-TEST"
SECRET = "SK-test-secret"
PAYMENT_URL = "https://checkout.doku.test/p/abc123"


class FakeProvider:
    """Stands in for the DOKU API; records every request it receives."""

    def __init__(self, status: str = "SUCCESS", amount=15000, payment_url: str | None = PAYMENT_URL):
        self.status = status
        self.amount = amount
        self.payment_url = payment_url
        self.status_code = 200
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"error": {"message": "provider down"}})
        if request.url.path == "/checkout/v1/payment":
            payment = {"url": self.payment_url} if self.payment_url else {}
            return httpx.Response(200, json={"message": ["SUCCESS"], "response": {"payment": payment}})
        if request.url.path.startswith("/orders/v1/status/"):
            invoice = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(
                200,
                json={
                    "order": {"invoice_number": invoice, "amount": self.amount},
                    "transaction": {"status": self.status},
                },
            )
        return httpx.Response(404, json={"error": "not found"})

    def sent_json(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


class FakeKiosk:
    """Stands in for the dslrBooth API."""

    def __init__(self, status_code: int = 200, body: bytes = b'{"IsSuccessful":true}'):
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.body)

    @property
    def calls(self) -> int:
        return len(self.requests)


def make_settings(**overrides) -> BridgeSettings:
    values = {
        "doku_base_url": "https://doku.test/",
        "doku_client_id": CLIENT_ID,
        "doku_secret_key": SECRET,
        "public_base_url": "https://bridge.example.com/",
        "dslrbooth_api_url": "http://kiosk.local/api/start?mode=print&password=pw",
    }
    values.update(overrides)
    return BridgeSettings(**values)



def build_client(settings: BridgeSettings, provider: FakeProvider, kiosk: FakeKiosk) -> TestClient:
    """App wired to the fakes instead of the real provider and kiosk."""

    app = create_app(
        settings,
        doku=DokuClient(settings, transport=httpx.MockTransport(provider)),
        kiosk=KioskTrigger(settings, transport=httpx.MockTransport(kiosk)),
    )
    return TestClient(app)
