"""
Custom exceptions for the cryptography sandbox.
"""


class SandboxError(Exception):
    """Base exception for sandbox errors."""
    pass


class RegistryError(SandboxError):
    """User registry operation failed."""
    pass


class DuplicateUser(RegistryError):
    """A user with this identity is already registered."""
    pass


class UserNotFound(RegistryError):
    """No user is registered under this identity."""
    pass


class KeyMaterialError(SandboxError):
    """Required key material is missing or malformed."""
    pass


class UnknownPublicKey(KeyMaterialError):
    """The receiver's public key has not been broadcast to this user."""
    pass


class NoPrivateKey(KeyMaterialError):
    """The user has not generated a key pair yet."""
    pass


class InvalidPublicKey(KeyMaterialError):
    """Public key transport bytes could not be parsed."""
    pass


class CryptoError(SandboxError):
    """Encryption protocol failure."""
    pass


class MessageTooLarge(CryptoError):
    """Plaintext does not fit into one block under the given key."""
    pass


class KeyGenerationFailure(CryptoError):
    """No valid key pair was found within the retry budget."""
    pass


class DecryptionFailure(CryptoError):
    """
    Ciphertext could not be decrypted.

    Raised for a key mismatch and for corrupted ciphertext alike.
    """
    pass


class MailboxError(SandboxError):
    """Mailbox operation failed."""
    pass


class NoMessages(MailboxError):
    """The mailbox is empty."""
    pass


class MessageNotFound(NoMessages):
    """No message at the requested mailbox index."""
    pass


class LogIOFailure(SandboxError):
    """Audit log could not be read or written."""
    pass
