#!/usr/bin/env python3
"""
Sandbox Demonstration

Walks through a full exchange:
1. Create an environment with an audit log
2. Register Alice and Bob
3. Bob creates keys and broadcasts his public key
4. Alice sends Bob an encrypted message, Bob reads it
5. Bob rotates his keys; the old message no longer decrypts
6. Optionally sign a receipt over the audit log

Usage:
    python scripts/demo.py --log logs/demo.jsonl --prime-bits 256
    python scripts/demo.py --receipt-key keys/audit_key.pem
"""

import argparse
import logging
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cryptosandbox import Environment, RSA, DecryptionFailure, SandboxError
from cryptosandbox.common.utils import hex_preview
from cryptosandbox.crypto.sign import load_private_key


def run_demo(log_path: str, prime_bits: int, receipt_key: str = None):
    print(f"[*] Creating environment (log: {log_path})")
    env = Environment.from_file(log_path, RSA(prime_bits=prime_bits))

    env.create_user("Alice")
    env.create_user("Bob")
    print(f"[✓] Users: {', '.join(env.users)}")

    print("\n[1] Bob creates a key pair and broadcasts his public key")
    key_message = env.get_mut_user("Bob").create_keys()
    record = env.send_message(key_message)
    print(f"    Log record #{record.seq}: {record.kind} {hex_preview(bytes.fromhex(record.payload))}")

    alice = env.get_user("Alice")
    bob = env.get_user("Bob")
    print(f"    Found: Alice={env.find_user('Alice')}, Bob={env.find_user('Bob')}")

    print("\n[2] Alice sends an encrypted message")
    sent = alice.create_message("Bob", "Hello, Bob!")
    print(f"    '{sent.sender}' -> '{sent.receiver}': {hex_preview(bytes.fromhex(sent.text))}")
    env.send_message(sent)

    print("\n[3] Bob reads the message")
    received = bob.read_last_message()
    print(f"    '{received.receiver}' got from '{received.sender}': '{received.text}'")
    print(f"    Timestamp: {received.timestamp} ms")

    print("\n[4] Bob rotates his keys")
    env.send_message(bob.create_keys())
    try:
        bob.read_last_message()
        print("    [✗] Old message still decrypted")
    except DecryptionFailure:
        print("    [✓] Old message is unreadable under the new key")

    bob.delete_last_message()
    print(f"    Mailbox size after delete: {bob.mailbox_size}")

    print("\n[5] Verifying audit log")
    is_valid, message = env.audit_log.verify()
    mark = "✓" if is_valid else "✗"
    print(f"    [{mark}] {env.audit_log.record_count()} records, chain: {message}")

    if receipt_key:
        receipt = env.audit_log.generate_receipt(load_private_key(receipt_key))
        receipt_path = os.path.splitext(log_path)[0] + "_receipt.json"
        env.audit_log.save_receipt(receipt, receipt_path)
        print(f"    [✓] Receipt saved to: {receipt_path}")


def main():
    parser = argparse.ArgumentParser(
        description="Demonstrate secure messaging in the cryptography sandbox"
    )
    parser.add_argument(
        "--log",
        default="logs/demo_log.jsonl",
        help="Audit log path (default: logs/demo_log.jsonl)"
    )
    parser.add_argument(
        "--prime-bits",
        type=int,
        default=256,
        help="Bits per RSA prime (default: 256, demonstration only)"
    )
    parser.add_argument(
        "--receipt-key",
        help="PEM auditor key; when given, a signed log receipt is written"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show library log output"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        run_demo(args.log, args.prime_bits, args.receipt_key)
    except SandboxError as e:
        print(f"\n[ERROR] {type(e).__name__}: {e}")
        sys.exit(1)

    print("\n[✓] Demo finished")


if __name__ == "__main__":
    main()
