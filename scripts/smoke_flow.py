"""
Smoke-test a running server: keypair -> sign -> verify.

Usage:
    HTTP_URL=http://localhost:8080 python scripts/smoke_flow.py
"""

from __future__ import annotations

import os
import sys
from typing import Optional

import requests

HTTP_URL = os.environ.get("HTTP_URL", "http://localhost:8080").rstrip("/")
MESSAGE = "Hello, Solana!"


def post(path: str, payload: Optional[dict] = None) -> Optional[dict]:
    try:
        resp = requests.post(f"{HTTP_URL}{path}", json=payload, timeout=10)
    except requests.RequestException as exc:
        print(f"✗ {path} failed: {exc}")
        return None
    body = resp.json()
    if not body.get("success"):
        print(f"✗ {path} rejected ({resp.status_code}): {body.get('error')}")
        return None
    print(f"✓ {path}: success")
    return body["data"]


def main() -> int:
    print(f"Testing Solana instruction server at {HTTP_URL}...")
    keypair = post("/keypair")
    if not keypair:
        return 1
    signed = post("/message/sign", {"message": MESSAGE, "secret": keypair["secret"]})
    if not signed:
        return 1
    verified = post(
        "/message/verify",
        {"message": signed["message"], "signature": signed["signature"], "pubkey": signed["public_key"]},
    )
    valid = bool(verified and verified.get("valid"))

    print("\nTest Summary:")
    print("- Keypair generation: ✓")
    print("- Message signing: ✓")
    print(f"- Message verification: {'✓' if valid else '✗'}")
    return 0 if valid else 1


if __name__ == "__main__":
    sys.exit(main())
