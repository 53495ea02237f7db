# -*- coding: utf-8 -*-
"""Sign an EIP-712 payment with a throwaway wallet and post it to a running backend.

A random wallet holds no USDC, so a live contract is expected to reject the
payment; the point is to see the signature reach on-chain verification.
"""
import argparse
import json
import sys
import time

import httpx
from eth_account import Account
from eth_account.messages import encode_typed_data
from web3 import Web3

DEFAULT_API_URL = "http://127.0.0.1:4000/api/payment"
DEFAULT_CONTRACT = "0xBA1510faD35f30F3c9ef0Dac121Fc507305FE413"
BASE_SEPOLIA_CHAIN_ID = 84532

PAYMENT_TYPES = {
    "PaymentRequest": [
        {"name": "user", "type": "address"},
        {"name": "tier", "type": "uint256"},
        {"name": "contentId", "type": "string"},
        {"name": "nonce", "type": "uint256"},
        {"name": "deadline", "type": "uint256"},
    ]
}


def build_signed_payment(account, contract: str, tier: int, nonce: int = 0, ttl_sec: int = 3600) -> dict:
    value = {
        "user": account.address,
        "tier": tier,
        "contentId": f"test-{int(time.time() * 1000)}",
        "nonce": nonce,
        "deadline": int(time.time()) + ttl_sec,
    }
    domain = {
        "name": "X402PaymentProcessor",
        "version": "1",
        "chainId": BASE_SEPOLIA_CHAIN_ID,
        "verifyingContract": Web3.to_checksum_address(contract),
    }
    signable = encode_typed_data(domain_data=domain, message_types=PAYMENT_TYPES, message_data=value)
    signed = account.sign_message(signable)
    return dict(value, signature=Web3.to_hex(signed.signature))


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--url", default=DEFAULT_API_URL)
    parser.add_argument("--contract", default=DEFAULT_CONTRACT)
    parser.add_argument("--tier", type=int, default=1)
    args = parser.parse_args()

    account = Account.create()
    print(f"Mock user address: {account.address}")

    payload = build_signed_payment(account, args.contract, args.tier)
    print(f"Signature: {payload['signature'][:20]}...")

    try:
        with httpx.Client(timeout=300.0) as client:
            resp = client.post(args.url, json=payload)
    except httpx.HTTPError as exc:
        print(f"FAILED (network): {exc}")
        return 1

    try:
        body = resp.json()
    except ValueError:
        body = resp.text
    if resp.is_success:
        print("PASSED")
        print(json.dumps(body, indent=2, ensure_ascii=False))
        return 0
    print(f"FAILED (HTTP {resp.status_code})")
    print(body)
    return 1


if __name__ == "__main__":
    sys.exit(main())
