"""Request/response shapes exchanged with the DOKU checkout API."""

from typing import Any

from pydantic import BaseModel, Field


GUEST_CUSTOMER: dict[str, str] = {
    "id": "guest",
    "name": "Guest",
    "phone": "628000000000",
    "country": "ID",
}


class CheckoutRequest(BaseModel):
    """One payment attempt; built per call and never mutated after sending."""

    amount: int = Field(gt=0)
    invoice_number: str = Field(min_length=1)
    callback_base_url: str = Field(min_length=1)
    customer: dict[str, Any] = Field(default_factory=lambda: dict(GUEST_CUSTOMER))
    payment_method_types: list[str] | None = None


class CheckoutSession(BaseModel):
    """Provider-hosted checkout page created for one invoice."""

    invoice_number: str
    payment_url: str
    raw: dict[str, Any]


class TransactionStatus(BaseModel):
    """Status snapshot fetched on demand; never cached."""

    invoice_number: str
    status: str
    amount: int = 0
    raw: dict[str, Any]
