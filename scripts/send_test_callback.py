"""Sign and POST a provider-style notification to a running bridge.

Useful for end-to-end checks of signature verification and the kiosk trigger
without a real payment. `--bad-signature` sends a tampered signature, which the
bridge must answer with `{"ok": false}` and never act on.
"""

import argparse
import json

import httpx

from kioskpay.common.config import load_settings
from kioskpay.common.signature import signed_headers
from kioskpay.services.doku.client import CALLBACK_PATH


def build_payload(invoice: str, amount: int, status: str) -> dict:
    return {
        "order": {"invoice_number": invoice, "amount": amount},
        "transaction": {"status": status},
    }


def main() -> None:
    """Parse CLI args, sign with the local secret and send one notification."""

    parser = argparse.ArgumentParser(description="Send a signed test notification.")
    parser.add_argument("--base-url", default="http://localhost:3000")
    parser.add_argument("--invoice", required=True)
    parser.add_argument("--amount", type=int, default=1)
    parser.add_argument("--status", default="SUCCESS")
    parser.add_argument("--bad-signature", action="store_true")
    args = parser.parse_args()

    settings = load_settings()
    body = json.dumps(build_payload(args.invoice, args.amount, args.status)).encode("utf-8")
    headers = signed_headers(settings.doku_client_id, settings.doku_secret_key, CALLBACK_PATH, body=body)
    if args.bad_signature:
        headers["Signature"] = headers["Signature"][:-4] + "AAAA"
    headers["Content-Type"] = "application/json"

    resp = httpx.post(f"{args.base_url.rstrip('/')}{CALLBACK_PATH}", content=body, headers=headers, timeout=30.0)
    print(f"HTTP {resp.status_code} {resp.text}")


if __name__ == "__main__":
    main()
