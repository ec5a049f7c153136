"""Environment-driven settings for the kiosk bridge.

The process loads one frozen `BridgeSettings` at startup and hands it to every
component explicitly (see `.env.example`).
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BridgeSettings(BaseSettings):
    """Typed, immutable view of runtime configuration from environment variables."""

    service_name: str = "kiosk-bridge"
    log_level: str = "INFO"
    port: int = 3000

    doku_base_url: str = "https://api.doku.com"
    doku_client_id: str = ""
    doku_secret_key: str = ""
    public_base_url: str = ""
    dslrbooth_api_url: str = ""

    default_payment_methods: str = "QRIS"
    checkout_currency: str = "IDR"
    payment_due_minutes: int = 5
    pay_page_default_amount: int = 15_000
    pay_now_amount: int = 1
    provider_timeout_seconds: float = 30.0
    kiosk_timeout_seconds: float = 15.0

    landing_logo_url: str = ""
    otel_exporter_otlp_endpoint: str = ""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @field_validator("doku_base_url", "public_base_url")
    @classmethod
    def _strip_trailing_slashes(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @property
    def payment_methods(self) -> list[str]:
        """Default payment method codes parsed from the CSV setting."""

        return parse_csv(self.default_payment_methods)

    @property
    def cookie_secure(self) -> bool:
        return self.public_base_url.startswith("https")

    @property
    def return_base_url(self) -> str:
        """Where browsers land after the provider redirect."""

        return self.public_base_url or f"http://localhost:{self.port}"


def parse_csv(value: str | None) -> list[str]:
    """Split a comma-separated string, dropping blanks."""

    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def load_settings() -> BridgeSettings:
    """Read settings from the environment once per process."""

    return BridgeSettings()
