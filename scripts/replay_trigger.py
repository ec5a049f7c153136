"""Replay the kiosk trigger for one or more invoices.

Recovery path when a kiosk call failed after a successful payment: the bridge
re-fetches provider status and only prints when it is SUCCESS.
"""

import argparse
import asyncio

import httpx


async def replay(base_url: str, invoices: list[str]) -> int:
    """POST /trigger/{invoice} for each invoice; returns the number of failures."""

    failures = 0
    async with httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=30.0) as client:
        for invoice in invoices:
            resp = await client.post(f"/trigger/{invoice}")
            if resp.is_error:
                failures += 1
                print(f"{invoice}: HTTP {resp.status_code} {resp.text}")
                continue
            body = resp.json()
            print(f"{invoice}: status={body.get('status')} triggered={body.get('triggered')}")
    return failures


def main() -> None:
    """Parse CLI args and replay triggers."""

    parser = argparse.ArgumentParser(description="Replay kiosk triggers through a running bridge.")
    parser.add_argument("--base-url", default="http://localhost:3000")
    parser.add_argument("invoices", nargs="+", help="Invoice numbers to replay")
    args = parser.parse_args()

    failures = asyncio.run(replay(args.base_url, args.invoices))
    if failures:
        raise SystemExit(f"{failures} invoice(s) failed")


if __name__ == "__main__":
    main()
