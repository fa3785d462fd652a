"""
Settings loading tests.

Usage:
    python -m pytest tests/test_config.py -v
"""

import pytest
from pydantic import ValidationError

from cryptosandbox.common.config import Settings, load_settings

ENV_VARS = (
    "SANDBOX_LOG_PATH",
    "SANDBOX_RSA_PRIME_BITS",
    "SANDBOX_RSA_PUBLIC_EXPONENT",
    "SANDBOX_RSA_MR_ROUNDS",
    "SANDBOX_RSA_KEYGEN_ATTEMPTS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    settings = load_settings()

    assert settings == Settings()
    assert settings.log_path == "logs/sandbox_log.jsonl"
    assert settings.prime_bits == 512
    assert settings.public_exponent == 65537
    assert settings.mr_rounds == 20
    assert settings.keygen_attempts == 64


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("SANDBOX_LOG_PATH", "/tmp/audit.jsonl")
    monkeypatch.setenv("SANDBOX_RSA_PRIME_BITS", "128")
    monkeypatch.setenv("SANDBOX_RSA_PUBLIC_EXPONENT", "3")
    monkeypatch.setenv("SANDBOX_RSA_MR_ROUNDS", "40")
    monkeypatch.setenv("SANDBOX_RSA_KEYGEN_ATTEMPTS", "8")

    settings = load_settings()

    assert settings.log_path == "/tmp/audit.jsonl"
    assert settings.prime_bits == 128
    assert settings.public_exponent == 3
    assert settings.mr_rounds == 40
    assert settings.keygen_attempts == 8


def test_empty_variable_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("SANDBOX_RSA_PRIME_BITS", "")
    assert load_settings().prime_bits == 512


@pytest.mark.parametrize("var, value", [
    ("SANDBOX_RSA_PRIME_BITS", "32"),
    ("SANDBOX_RSA_PRIME_BITS", "many"),
    ("SANDBOX_RSA_PUBLIC_EXPONENT", "65536"),
    ("SANDBOX_RSA_PUBLIC_EXPONENT", "1"),
    ("SANDBOX_RSA_MR_ROUNDS", "0"),
    ("SANDBOX_RSA_KEYGEN_ATTEMPTS", "-1"),
])
def test_invalid_values_rejected(monkeypatch, var, value):
    monkeypatch.setenv(var, value)

    with pytest.raises(ValidationError):
        load_settings()
