"""
Runtime configuration for the cryptography sandbox.

Values come from the process environment, optionally seeded from a .env file:

    SANDBOX_LOG_PATH               Audit log location
    SANDBOX_RSA_PRIME_BITS         Bit length of each RSA prime
    SANDBOX_RSA_PUBLIC_EXPONENT    Fixed RSA public exponent
    SANDBOX_RSA_MR_ROUNDS          Miller-Rabin rounds per candidate
    SANDBOX_RSA_KEYGEN_ATTEMPTS    Prime pairs tried before giving up

Moduli built from small primes are for demonstration only.
"""

import os
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings(BaseModel):
    """Validated sandbox settings."""
    log_path: str = Field("logs/sandbox_log.jsonl", min_length=1)
    prime_bits: int = Field(512, ge=64, description="Bits per RSA prime")
    public_exponent: int = Field(65537, ge=3)
    mr_rounds: int = Field(20, ge=1, description="Miller-Rabin rounds")
    keygen_attempts: int = Field(64, ge=1)

    @field_validator('public_exponent')
    @classmethod
    def exponent_must_be_odd(cls, value: int) -> int:
        if value % 2 == 0:
            raise ValueError("public exponent must be odd")
        return value


def load_settings() -> Settings:
    """
    Build Settings from environment variables.

    Unset variables fall back to the model defaults.

    Returns:
        Settings instance

    Raises:
        pydantic.ValidationError: If a value is out of range
    """
    env_map = {
        'log_path': 'SANDBOX_LOG_PATH',
        'prime_bits': 'SANDBOX_RSA_PRIME_BITS',
        'public_exponent': 'SANDBOX_RSA_PUBLIC_EXPONENT',
        'mr_rounds': 'SANDBOX_RSA_MR_ROUNDS',
        'keygen_attempts': 'SANDBOX_RSA_KEYGEN_ATTEMPTS',
    }

    values = {}
    for field, var in env_map.items():
        raw = os.getenv(var)
        if raw is not None and raw != "":
            values[field] = raw

    return Settings(**values)
