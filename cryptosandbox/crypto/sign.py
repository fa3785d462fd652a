"""
RSA Digital Signatures for audit receipts

Uses the cryptography library with SHA-256 and PKCS#1 v1.5 padding.
The auditor key is independent of the sandbox users' keys.
"""

import base64
import hashlib
from cryptography.hazmat.primitives import serialization, hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.exceptions import InvalidSignature


def generate_signing_key(key_size: int = 2048) -> rsa.RSAPrivateKey:
    """
    Generate an auditor RSA private key.

    Args:
        key_size: Modulus size in bits (default: 2048)

    Returns:
        RSA private key object
    """
    return rsa.generate_private_key(
        public_exponent=65537,
        key_size=key_size,
    )


def load_private_key(key_path: str):
    """
    Load RSA private key from PEM file.

    Args:
        key_path: Path to private key file

    Returns:
        RSA private key object
    """
    with open(key_path, "rb") as f:
        return serialization.load_pem_private_key(
            f.read(),
            password=None,
        )


def load_public_key(key_path: str):
    """Load RSA public key from PEM file."""
    with open(key_path, "rb") as f:
        return serialization.load_pem_public_key(f.read())


def sign_data(data: bytes, private_key) -> str:
    """
    Sign data using RSA private key.

    The signature is computed over SHA-256(data) using PKCS#1 v1.5 padding.

    Args:
        data: Data to sign (bytes)
        private_key: RSA private key object

    Returns:
        Base64-encoded signature
    """
    digest = hashlib.sha256(data).digest()

    signature = private_key.sign(
        digest,
        padding.PKCS1v15(),
        hashes.SHA256()
    )

    return base64.b64encode(signature).decode('ascii')


def verify_signature(data: bytes, signature_b64: str, public_key) -> bool:
    """
    Verify RSA signature.

    Args:
        data: Original data (bytes)
        signature_b64: Base64-encoded signature
        public_key: RSA public key object

    Returns:
        True if signature is valid, False otherwise
    """
    try:
        signature = base64.b64decode(signature_b64, validate=True)
    except ValueError:
        return False

    digest = hashlib.sha256(data).digest()

    try:
        public_key.verify(
            signature,
            digest,
            padding.PKCS1v15(),
            hashes.SHA256()
        )
    except InvalidSignature:
        return False

    return True
