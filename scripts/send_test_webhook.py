"""Sign a JSON event with the webhook secret and POST it to the receiver.

Useful for local replays and duplicate/out-of-order delivery testing without
the processor CLI. The header matches the processor's `t=...,v1=...` format.
"""

import argparse
import hashlib
import hmac
import json
import time
from pathlib import Path

import httpx


def sign(payload: bytes, secret: str, timestamp: int) -> str:
    """Build a `stripe-signature` header value for `payload`."""

    signed = f"{timestamp}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def main() -> None:
    """Parse CLI args, sign one payload, and deliver it `--repeat` times."""

    parser = argparse.ArgumentParser(description="Deliver a signed test webhook event.")
    parser.add_argument("--url", default="http://localhost:8000/api/stripe/webhook")
    parser.add_argument("--secret", required=True, help="Webhook signing secret (whsec_...)")
    parser.add_argument("--json", dest="json_inline", default=None, help="Inline JSON payload")
    parser.add_argument("--file", dest="json_file", default=None, help="Path to JSON file")
    parser.add_argument("--repeat", type=int, default=1, help="Deliver the same bytes N times")
    args = parser.parse_args()

    if bool(args.json_inline) == bool(args.json_file):
        raise SystemExit("Provide exactly one of --json or --file")

    if args.json_inline:
        payload = json.dumps(json.loads(args.json_inline)).encode("utf-8")
    else:
        payload = Path(args.json_file).read_bytes()

    header = sign(payload, args.secret, int(time.time()))
    for attempt in range(1, args.repeat + 1):
        resp = httpx.post(
            args.url,
            content=payload,
            headers={"stripe-signature": header, "content-type": "application/json"},
            timeout=10.0,
        )
        print(f"attempt={attempt} status={resp.status_code} body={resp.text}")


if __name__ == "__main__":
    main()
