"""
Encryption protocol interface.

Any asymmetric scheme plugged into the sandbox implements
EncryptionProtocol. Users and the Environment depend only on this
interface, never on a concrete scheme.
"""

from abc import ABC, abstractmethod
from typing import Any, NamedTuple


class KeyPair(NamedTuple):
    """Public and private key generated together."""
    public: Any
    private: Any


class EncryptionProtocol(ABC):
    """Capability set of a pluggable asymmetric scheme."""

    name: str = "abstract"

    @abstractmethod
    def generate_keys(self) -> KeyPair:
        """
        Generate a fresh, independent key pair.

        Raises:
            KeyGenerationFailure: If no valid pair could be produced
        """

    @abstractmethod
    def encrypt(self, plaintext: bytes, key: Any) -> bytes:
        """
        Encrypt one block of plaintext under a public key.

        Raises:
            MessageTooLarge: If plaintext exceeds max_plaintext_size(key)
        """

    @abstractmethod
    def decrypt(self, ciphertext: bytes, key: Any) -> bytes:
        """
        Decrypt one ciphertext block with a private key.

        Raises:
            DecryptionFailure: On key mismatch or malformed ciphertext
        """

    @abstractmethod
    def max_plaintext_size(self, key: Any) -> int:
        """Largest plaintext in bytes that encrypt() accepts under key."""

    @abstractmethod
    def export_public_key(self, key: Any) -> bytes:
        """Serialize a public key to its transport form."""

    @abstractmethod
    def import_public_key(self, data: bytes) -> Any:
        """
        Parse a public key from its transport form.

        Raises:
            InvalidPublicKey: If data is malformed
        """
