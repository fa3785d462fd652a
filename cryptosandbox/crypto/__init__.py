"""
Cryptographic primitives for the sandbox.

This package provides:
- The EncryptionProtocol interface
- An RSA engine built on square-and-multiply and Miller-Rabin
- RSA signatures (cryptography) for audit receipts
"""

from .base import EncryptionProtocol, KeyPair
from .rsa import RSA, RSAPublicKey, RSAPrivateKey
from .sign import sign_data, verify_signature, generate_signing_key

__all__ = [
    'EncryptionProtocol',
    'KeyPair',
    'RSA',
    'RSAPublicKey',
    'RSAPrivateKey',
    'sign_data',
    'verify_signature',
    'generate_signing_key',
]
