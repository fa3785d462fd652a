"""
Shared fixtures for the sandbox tests.

Keys use 128-bit primes so the suite stays fast; the arithmetic is the
same as for full-size keys.
"""

import pytest

from cryptosandbox.crypto.rsa import RSA
from cryptosandbox.env import Environment
from cryptosandbox.storage.audit_log import AuditLog

TEST_PRIME_BITS = 128


@pytest.fixture(scope="session")
def engine():
    return RSA(prime_bits=TEST_PRIME_BITS, public_exponent=65537, rounds=20, max_attempts=64)


@pytest.fixture(scope="session")
def keypair(engine):
    return engine.generate_keys()


@pytest.fixture(scope="session")
def other_keypair(engine):
    return engine.generate_keys()


@pytest.fixture
def log_path(tmp_path):
    return str(tmp_path / "logs" / "audit.jsonl")


@pytest.fixture
def env(engine, log_path):
    return Environment(engine, AuditLog(log_path))
