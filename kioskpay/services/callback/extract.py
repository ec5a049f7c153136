"""Invoice lookup for browser returns from the hosted checkout page."""

from collections.abc import Mapping

from kioskpay.common.payload import Accessor, first_present, path


INVOICE_COOKIE = "doku_inv"
RETURN_QUERY_KEYS = ("invoice", "invoice_number", "order_id", "orderId")


def return_invoice(query: Mapping[str, str], cookies: Mapping[str, str]) -> str | None:
    """Invoice carried by a browser return: query parameters first, then the cookie."""

    accessors: list[Accessor] = [path(key) for key in RETURN_QUERY_KEYS]
    value = first_present(query, accessors)
    if value is None:
        value = first_present(cookies, [path(INVOICE_COOKIE)])
    return str(value) if value is not None else None
