"""Field extraction from provider payloads.

The provider reports the same fact under different keys depending on payment
channel. Each field has an ordered accessor list; the first accessor that
yields a present value wins.
"""

from collections.abc import Callable, Mapping
from typing import Any


Accessor = Callable[[Mapping[str, Any]], Any]


def get_path(payload: Any, *keys: str) -> Any:
    """Walk nested mappings, returning None on the first missing level."""

    current = payload
    for key in keys:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def path(*keys: str) -> Accessor:
    return lambda payload: get_path(payload, *keys)


def is_present(value: Any) -> bool:
    return value is not None and value != ""


def first_present(payload: Mapping[str, Any], accessors: list[Accessor]) -> Any:
    """Return the first present value produced by `accessors`, or None."""

    for accessor in accessors:
        value = accessor(payload)
        if is_present(value):
            return value
    return None


INVOICE_ACCESSORS: list[Accessor] = [
    path("order", "invoice_number"),
    path("order", "invoice_number_original"),
    path("transaction", "invoice_number"),
]
AMOUNT_ACCESSORS: list[Accessor] = [
    path("order", "amount"),
    path("transaction", "amount"),
]
STATUS_ACCESSORS: list[Accessor] = [
    path("transaction", "status"),
    path("status"),
]
