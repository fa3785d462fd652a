"""
Number theory routines for the RSA engine.

Python integers are arbitrary precision, so moduli of any size work
without a separate big-integer type.
"""

import secrets
from typing import List, Tuple


def expmod(base: int, exp: int, modulus: int) -> int:
    """
    Compute base^exp mod modulus by square-and-multiply.

    Scans the exponent from the least significant bit, so the cost is
    O(log exp) modular multiplications.

    Args:
        base: Base
        exp: Non-negative exponent
        modulus: Positive modulus

    Returns:
        base^exp mod modulus
    """
    if modulus <= 0:
        raise ValueError("Modulus must be positive")
    if exp < 0:
        raise ValueError("Exponent must be non-negative")
    if modulus == 1:
        return 0

    result = 1
    base %= modulus
    while exp > 0:
        if exp & 1:
            result = (result * base) % modulus
        base = (base * base) % modulus
        exp >>= 1
    return result


def egcd(a: int, b: int) -> Tuple[int, int, int]:
    """
    Iterative extended Euclidean algorithm.

    Returns:
        Tuple (g, x, y) with a*x + b*y == g == gcd(a, b)
    """
    old_r, r = a, b
    old_s, s = 1, 0
    old_t, t = 0, 1

    while r != 0:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s
        old_t, t = t, old_t - q * t

    return old_r, old_s, old_t


def gcd(a: int, b: int) -> int:
    return egcd(a, b)[0]


def inv_mod(a: int, m: int) -> int:
    """
    Modular inverse of a modulo m.

    Raises:
        ValueError: If a and m are not coprime
    """
    g, x, _ = egcd(a, m)
    if g != 1:
        raise ValueError("No modular inverse")
    return x % m


def small_primes(limit: int = 100) -> List[int]:
    """Sieve of Eratosthenes: all primes below limit."""
    sieve = [True] * limit
    primes = []
    for i in range(2, limit):
        if sieve[i]:
            primes.append(i)
            for k in range(i * i, limit, i):
                sieve[k] = False
    return primes


SMALL_PRIMES = small_primes(100)


def miller_rabin(n: int, rounds: int = 20) -> bool:
    """
    Return True when n is probably prime.

    A composite passes a single round with probability at most 1/4,
    so the error bound is 4^-rounds.
    """
    if n < 2:
        return False

    for p in SMALL_PRIMES:
        if n == p:
            return True
        if n % p == 0:
            return False

    # n - 1 = 2^r * d with d odd
    d = n - 1
    r = 0
    while d % 2 == 0:
        d //= 2
        r += 1

    for _ in range(rounds):
        a = secrets.randbelow(n - 3) + 2  # 2 <= a <= n-2
        x = expmod(a, d, n)
        if x in (1, n - 1):
            continue
        for _ in range(r - 1):
            x = (x * x) % n
            if x == n - 1:
                break
        else:
            return False
    return True


def generate_prime(bits: int, rounds: int = 20) -> int:
    """
    Generate a random probable prime with exactly bits bits.

    Args:
        bits: Bit length of the prime
        rounds: Miller-Rabin rounds per candidate

    Returns:
        Probable prime
    """
    if bits < 2:
        raise ValueError("Prime size must be at least 2 bits")

    while True:
        candidate = secrets.randbits(bits)
        # Force the requested size and oddness
        candidate |= (1 << (bits - 1)) | 1
        if miller_rabin(candidate, rounds):
            return candidate
