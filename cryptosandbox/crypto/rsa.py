"""
RSA Encryption Protocol

Textbook RSA over Python integers with a small randomized framing:

    block = 0x01 || salt (4 bytes) || tag (4 bytes) || plaintext
    tag   = Trunc_4(SHA256(salt || plaintext))

The leading 0x01 preserves leading zero bytes of the plaintext, the salt
randomizes encryption, and the tag lets decryption reject ciphertext made
under a different key. Small moduli are for demonstration only and are
NOT cryptographically safe.
"""

import hashlib
import logging
import secrets
import struct
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cryptosandbox.common.config import load_settings
from cryptosandbox.common.exceptions import (
    DecryptionFailure, InvalidPublicKey, KeyGenerationFailure, MessageTooLarge
)
from cryptosandbox.common.utils import (
    byte_length, bytes_to_int, constant_time_compare, int_to_bytes
)
from cryptosandbox.crypto.base import EncryptionProtocol, KeyPair
from cryptosandbox.crypto.numtheory import expmod, gcd, generate_prime, inv_mod

logger = logging.getLogger(__name__)

MARKER = b"\x01"
SALT_SIZE = 4
TAG_SIZE = 4
FRAME_OVERHEAD = len(MARKER) + SALT_SIZE + TAG_SIZE

MIN_PRIME_BITS = 64

_DECRYPTION_FAILED = "Decryption failed"


class RSAPublicKey(BaseModel):
    """
    RSA public key: modulus n = p * q and public exponent e,
    with gcd(e, phi(n)) = 1.
    """
    model_config = ConfigDict(frozen=True)

    n: int = Field(..., gt=3, description="Modulus")
    e: int = Field(..., ge=3, description="Public exponent")

    @property
    def bits(self) -> int:
        return self.n.bit_length()


class RSAPrivateKey:
    """
    RSA private key: modulus n and private exponent d,
    with e * d = 1 mod phi(n).
    """

    __slots__ = ("n", "d")

    def __init__(self, n: int, d: int):
        self.n = n
        self.d = d

    def __repr__(self) -> str:
        return f"RSAPrivateKey(n=<{self.n.bit_length()} bits>, d=<hidden>)"


def _tag(salt: bytes, plaintext: bytes) -> bytes:
    return hashlib.sha256(salt + plaintext).digest()[:TAG_SIZE]


class RSA(EncryptionProtocol):
    """
    RSA implementation of EncryptionProtocol.

    Unset parameters are taken from load_settings().
    """

    name = "rsa"

    def __init__(
        self,
        prime_bits: Optional[int] = None,
        public_exponent: Optional[int] = None,
        rounds: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ):
        if None in (prime_bits, public_exponent, rounds, max_attempts):
            settings = load_settings()
            if prime_bits is None:
                prime_bits = settings.prime_bits
            if public_exponent is None:
                public_exponent = settings.public_exponent
            if rounds is None:
                rounds = settings.mr_rounds
            if max_attempts is None:
                max_attempts = settings.keygen_attempts

        if prime_bits < MIN_PRIME_BITS:
            raise ValueError(f"prime_bits must be at least {MIN_PRIME_BITS}, got {prime_bits}")
        if public_exponent < 3 or public_exponent % 2 == 0:
            raise ValueError(f"Public exponent must be odd and >= 3, got {public_exponent}")
        if rounds < 1:
            raise ValueError(f"rounds must be at least 1, got {rounds}")
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self.prime_bits = prime_bits
        self.public_exponent = public_exponent
        self.rounds = rounds
        self.max_attempts = max_attempts

    def __repr__(self) -> str:
        return f"RSA(prime_bits={self.prime_bits}, e={self.public_exponent})"

    def generate_keys(self) -> KeyPair:
        """
        Generate an RSA key pair.

        Draws primes p != q with gcd(e, (p-1)(q-1)) = 1, retrying up to
        max_attempts times, and derives d = e^-1 mod phi(n).
        """
        e = self.public_exponent

        for attempt in range(1, self.max_attempts + 1):
            p = generate_prime(self.prime_bits, self.rounds)
            q = generate_prime(self.prime_bits, self.rounds)
            if p == q:
                logger.debug("Attempt %d: drew identical primes", attempt)
                continue

            phi = (p - 1) * (q - 1)
            if gcd(e, phi) != 1:
                logger.debug("Attempt %d: e=%d not coprime to phi", attempt, e)
                continue

            n = p * q
            d = inv_mod(e, phi)
            logger.info("Generated %d-bit RSA modulus (attempt %d)", n.bit_length(), attempt)
            return KeyPair(RSAPublicKey(n=n, e=e), RSAPrivateKey(n, d))

        raise KeyGenerationFailure(
            f"No valid RSA key pair after {self.max_attempts} attempts"
        )

    def max_plaintext_size(self, key: RSAPublicKey) -> int:
        # Largest L with 2 * 256^(L + 8) <= 2^(bits - 1) <= n
        return max((key.n.bit_length() - 2) // 8 - (SALT_SIZE + TAG_SIZE), 0)

    def encrypt(self, plaintext: bytes, key: RSAPublicKey) -> bytes:
        """
        Encrypt one block: c = m^e mod n.

        Returns:
            Ciphertext as a fixed-width big-endian block of byte_length(n) bytes

        Raises:
            MessageTooLarge: If the framed plaintext is not below n
        """
        if not isinstance(key, RSAPublicKey):
            raise TypeError("RSA.encrypt requires an RSAPublicKey")

        salt = secrets.token_bytes(SALT_SIZE)
        m = bytes_to_int(MARKER + salt + _tag(salt, plaintext) + plaintext)
        if m >= key.n:
            raise MessageTooLarge(
                f"Plaintext of {len(plaintext)} bytes does not fit a {key.bits}-bit modulus "
                f"(max {self.max_plaintext_size(key)} bytes per block)"
            )

        c = expmod(m, key.e, key.n)
        return int_to_bytes(c, byte_length(key.n))

    def decrypt(self, ciphertext: bytes, key: RSAPrivateKey) -> bytes:
        """
        Decrypt one block: m = c^d mod n.

        Raises:
            DecryptionFailure: On any structural or integrity mismatch
        """
        if not isinstance(key, RSAPrivateKey):
            raise TypeError("RSA.decrypt requires an RSAPrivateKey")

        if len(ciphertext) != byte_length(key.n):
            raise DecryptionFailure(_DECRYPTION_FAILED)

        c = bytes_to_int(ciphertext)
        if c >= key.n:
            raise DecryptionFailure(_DECRYPTION_FAILED)

        block = int_to_bytes(expmod(c, key.d, key.n))
        if len(block) < FRAME_OVERHEAD or block[:1] != MARKER:
            raise DecryptionFailure(_DECRYPTION_FAILED)

        salt = block[1:1 + SALT_SIZE]
        tag = block[1 + SALT_SIZE:FRAME_OVERHEAD]
        plaintext = block[FRAME_OVERHEAD:]
        if not constant_time_compare(tag, _tag(salt, plaintext)):
            raise DecryptionFailure(_DECRYPTION_FAILED)

        return plaintext

    def export_public_key(self, key: RSAPublicKey) -> bytes:
        """Transport form: u32 len(n) || n || u32 len(e) || e (big-endian)."""
        n_bytes = int_to_bytes(key.n)
        e_bytes = int_to_bytes(key.e)
        return (
            struct.pack(">I", len(n_bytes)) + n_bytes
            + struct.pack(">I", len(e_bytes)) + e_bytes
        )

    def import_public_key(self, data: bytes) -> RSAPublicKey:
        try:
            offset = 0
            values = []
            for _ in range(2):
                (length,) = struct.unpack_from(">I", data, offset)
                offset += 4
                chunk = data[offset:offset + length]
                if len(chunk) != length:
                    raise InvalidPublicKey("Truncated RSA public key")
                values.append(bytes_to_int(chunk))
                offset += length

            if offset != len(data):
                raise InvalidPublicKey("Trailing bytes after RSA public key")

            return RSAPublicKey(n=values[0], e=values[1])

        except (struct.error, ValidationError) as e:
            raise InvalidPublicKey(f"Malformed RSA public key: {e}") from e


# Test function for development
if __name__ == "__main__":
    print("[*] Testing RSA engine")

    engine = RSA(prime_bits=256, public_exponent=65537, rounds=20, max_attempts=64)
    public_key, private_key = engine.generate_keys()
    print(f"\n[1] Modulus: {public_key.bits} bits, e = {public_key.e}")
    print(f"    Private key: {private_key!r}")
    print(f"    Block capacity: {engine.max_plaintext_size(public_key)} bytes")

    ciphertext = engine.encrypt(b"Hello, Bob!", public_key)
    print(f"\n[2] Ciphertext: {ciphertext.hex()}")

    plaintext = engine.decrypt(ciphertext, private_key)
    print(f"\n[3] Decrypted: {plaintext}")

    assert plaintext == b"Hello, Bob!", "RSA round trip failed!"
    print("\n[✓] RSA engine test passed!")
