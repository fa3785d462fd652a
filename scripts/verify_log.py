#!/usr/bin/env python3
"""
Offline Audit Log Verification Tool

This script verifies the audit evidence by:
1. Checking sequence numbers and the hash chain of every record
2. Verifying a LogReceipt signature over the log hash (optional)

Usage:
    python scripts/verify_log.py --log logs/demo_log.jsonl
    python scripts/verify_log.py --log logs/demo_log.jsonl --receipt logs/demo_log_receipt.json --key keys/audit_pub.pem
"""

import argparse
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cryptosandbox.common.exceptions import LogIOFailure
from cryptosandbox.crypto.sign import load_public_key
from cryptosandbox.storage.audit_log import AuditLog, load_receipt


def verify_log(log_path: str, receipt_path: str = None, key_path: str = None) -> bool:
    """
    Complete verification of an audit log and its receipt.

    Args:
        log_path: Path to the audit log
        receipt_path: Path to receipt JSON file (optional)
        key_path: Path to the auditor public key PEM (required with a receipt)

    Returns:
        True if all checks passed
    """
    print("\n" + "=" * 70)
    print("  AUDIT LOG VERIFICATION")
    print("=" * 70)

    print(f"\n[1] Loading log: {log_path}")
    if not os.path.isfile(log_path):
        print(f"    [✗] Log file not found: {log_path}")
        print("\n" + "=" * 70)
        print("  VERIFICATION RESULT: ✗ VERIFICATION FAILED")
        print("=" * 70 + "\n")
        return False

    audit_log = AuditLog(log_path)
    records = audit_log.records()
    print(f"    Records: {len(records)}")
    for record in records:
        print(f"    #{record.seq} {record.ts} {record.sender} -> {record.receiver} [{record.kind}]")

    print("\n[2] Checking hash chain...")
    chain_valid, message = audit_log.verify()
    if chain_valid:
        print("    [✓] Hash chain INTACT")
    else:
        print(f"    [✗] {message}")

    receipt_valid = True
    if receipt_path:
        print(f"\n[3] Loading receipt: {receipt_path}")
        receipt = load_receipt(receipt_path)
        print(f"    Sequence range: {receipt.first_seq}..{receipt.last_seq}")
        print(f"    Log hash: {receipt.log_sha256}")

        computed_hash = audit_log.compute_log_hash()
        print(f"    Computed: {computed_hash}")

        receipt_valid = audit_log.verify_receipt(receipt, load_public_key(key_path))
        if receipt_valid:
            print("    [✓] Receipt signature VALID and log hash MATCHES")
        else:
            print("    [✗] Receipt INVALID - log may have been modified!")

    print("\n" + "=" * 70)
    if chain_valid and receipt_valid:
        print("  VERIFICATION RESULT: ✓ ALL CHECKS PASSED")
    else:
        print("  VERIFICATION RESULT: ✗ VERIFICATION FAILED")
    print("=" * 70 + "\n")

    return chain_valid and receipt_valid


def main():
    parser = argparse.ArgumentParser(
        description="Verify an audit log and, optionally, its signed receipt"
    )
    parser.add_argument(
        "--log",
        required=True,
        help="Path to audit log file"
    )
    parser.add_argument(
        "--receipt",
        help="Path to receipt JSON file"
    )
    parser.add_argument(
        "--key",
        help="Path to the auditor public key (PEM)"
    )

    args = parser.parse_args()

    if args.receipt and not args.key:
        parser.error("--receipt requires --key")

    try:
        ok = verify_log(args.log, args.receipt, args.key)
    except (LogIOFailure, OSError) as e:
        print(f"\n[ERROR] Verification failed: {e}")
        sys.exit(2)

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
