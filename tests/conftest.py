"""Shared fixtures: fixed settings plus fake provider and kiosk endpoints."""

import httpx
import pytest
from fastapi.testclient import TestClient

from kioskpay.common.config import BridgeSettings
from kioskpay.services.doku.client import DokuClient
from kioskpay.services.kiosk.trigger import KioskTrigger
from support import FakeKiosk, FakeProvider, build_client, make_settings


@pytest.fixture
def settings() -> BridgeSettings:
    return make_settings()


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def kiosk() -> FakeKiosk:
    return FakeKiosk()


@pytest.fixture
def doku_client(settings, provider) -> DokuClient:
    return DokuClient(settings, transport=httpx.MockTransport(provider))


@pytest.fixture
def kiosk_trigger(settings, kiosk) -> KioskTrigger:
    return KioskTrigger(settings, transport=httpx.MockTransport(kiosk))


@pytest.fixture
def client(settings, provider, kiosk) -> TestClient:
    return build_client(settings, provider, kiosk)
