"""
Utility functions for the cryptography sandbox.
"""

import hashlib
import hmac
import time


def now_ms() -> int:
    """
    Get current Unix timestamp in milliseconds.

    Returns:
        Current timestamp in milliseconds
    """
    return int(time.time() * 1000)


def sha256_hex(data: bytes) -> str:
    """
    Compute SHA-256 hash and return as hex string.

    Args:
        data: Data to hash

    Returns:
        Hex-encoded SHA-256 hash
    """
    return hashlib.sha256(data).hexdigest()


def int_to_bytes(value: int, length: int = None) -> bytes:
    """
    Convert a non-negative integer to big-endian bytes.

    Args:
        value: Integer to convert
        length: Output width in bytes (default: minimal width)

    Returns:
        Big-endian bytes

    Raises:
        ValueError: If value is negative or does not fit into length
    """
    if value < 0:
        raise ValueError("Cannot convert negative integers")

    if length is None:
        length = (value.bit_length() + 7) // 8

    return value.to_bytes(length, byteorder='big')


def bytes_to_int(data: bytes) -> int:
    """Convert big-endian bytes to a non-negative integer."""
    return int.from_bytes(data, byteorder='big')


def byte_length(value: int) -> int:
    """Number of bytes needed to hold value."""
    return (value.bit_length() + 7) // 8


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Constant-time comparison to prevent timing attacks.

    Args:
        a: First bytes object
        b: Second bytes object

    Returns:
        True if equal, False otherwise
    """
    return hmac.compare_digest(a, b)


def hex_preview(data: bytes, max_length: int = 16) -> str:
    """Shortened hex rendering of data for status output."""
    hex_str = data.hex()
    if len(hex_str) > max_length * 2:
        return f"{hex_str[:max_length * 2]}...({len(data)} bytes)"
    return hex_str
