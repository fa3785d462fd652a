#!/usr/bin/env python3
"""
Generate Auditor Signing Key

Creates the RSA key pair used to sign audit log receipts.

Usage:
    python scripts/gen_audit_key.py --output keys --bits 2048
"""

import argparse
import os
import sys
from cryptography.hazmat.primitives import serialization

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cryptosandbox.crypto.sign import generate_signing_key


def generate_audit_key(key_size: int = 2048, output_dir: str = "keys"):
    """
    Generate and save an auditor key pair.

    Args:
        key_size: RSA modulus size in bits
        output_dir: Directory to save the PEM files
    """
    os.makedirs(output_dir, exist_ok=True)

    print(f"[*] Generating RSA private key ({key_size} bits)...")
    private_key = generate_signing_key(key_size)

    key_path = os.path.join(output_dir, "audit_key.pem")
    with open(key_path, "wb") as f:
        f.write(
            private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
    print(f"[+] Private key saved to: {key_path}")

    pub_path = os.path.join(output_dir, "audit_pub.pem")
    with open(pub_path, "wb") as f:
        f.write(
            private_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        )
    print(f"[+] Public key saved to: {pub_path}")

    print("\n[✓] Auditor key created successfully!")
    return private_key


def main():
    parser = argparse.ArgumentParser(
        description="Generate the RSA key used to sign audit log receipts"
    )
    parser.add_argument(
        "--bits",
        type=int,
        default=2048,
        help="Key size in bits (default: 2048)"
    )
    parser.add_argument(
        "--output",
        default="keys",
        help="Output directory (default: keys)"
    )

    args = parser.parse_args()

    generate_audit_key(key_size=args.bits, output_dir=args.output)


if __name__ == "__main__":
    main()
