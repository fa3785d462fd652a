"""
Cryptography Sandbox

A teaching simulator for secure point-to-point messaging:
- Pluggable asymmetric encryption protocols (RSA included)
- Users with key pairs, learned public keys and mailboxes
- An environment that routes key broadcasts and ciphertext
- A hash-chained, append-only audit log with signed receipts
"""

from cryptosandbox.common.exceptions import *
from cryptosandbox.common.messages import BROADCAST, Message, ReceivedMessage
from cryptosandbox.crypto.base import EncryptionProtocol, KeyPair
from cryptosandbox.crypto.rsa import RSA, RSAPrivateKey, RSAPublicKey
from cryptosandbox.env import Environment
from cryptosandbox.user import User

__version__ = "1.0.0"

__all__ = [
    'BROADCAST',
    'Message',
    'ReceivedMessage',
    'EncryptionProtocol',
    'KeyPair',
    'RSA',
    'RSAPublicKey',
    'RSAPrivateKey',
    'Environment',
    'User',
    'SandboxError',
    'DuplicateUser',
    'UserNotFound',
    'UnknownPublicKey',
    'NoPrivateKey',
    'InvalidPublicKey',
    'MessageTooLarge',
    'KeyGenerationFailure',
    'DecryptionFailure',
    'NoMessages',
    'MessageNotFound',
    'LogIOFailure',
]
