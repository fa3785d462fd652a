"""
Message and audit record definitions using Pydantic.

Payload models only ever carry transport forms: exported public keys
and ciphertext blocks. Private key material has no field to live in.
"""

from typing import Literal, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field

from cryptosandbox.common.utils import now_ms

# Receiver marker for public key broadcasts
BROADCAST = "*"

# prev_hash of the first record in a log
GENESIS_HASH = "0" * 64


class KeyPayload(BaseModel):
    """Public key broadcast payload."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["key"] = "key"
    key: bytes = Field(..., description="Public key in transport form")

    def transport_bytes(self) -> bytes:
        return self.key


class CiphertextPayload(BaseModel):
    """Encrypted text, one ciphertext block per plaintext chunk."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["ciphertext"] = "ciphertext"
    blocks: Tuple[bytes, ...] = Field(..., min_length=1)

    def transport_bytes(self) -> bytes:
        return b"".join(self.blocks)


Payload = Union[KeyPayload, CiphertextPayload]


class Message(BaseModel):
    """A routed message: key broadcast or ciphertext."""
    model_config = ConfigDict(frozen=True)

    sender: str
    receiver: str
    payload: Payload = Field(..., discriminator="kind")
    timestamp: int = Field(default_factory=now_ms, description="Unix timestamp in milliseconds")

    @property
    def kind(self) -> str:
        return self.payload.kind

    @property
    def is_broadcast(self) -> bool:
        return isinstance(self.payload, KeyPayload)

    @property
    def text(self) -> str:
        """Payload in transport form (hex)."""
        return self.payload.transport_bytes().hex()


class ReceivedMessage(BaseModel):
    """A message after decryption by its receiver."""
    model_config = ConfigDict(frozen=True)

    sender: str
    receiver: str
    text: str
    timestamp: int

    def __str__(self) -> str:
        return f"[{self.timestamp}] {self.sender} -> {self.receiver}: {self.text}"


class LogRecord(BaseModel):
    """One audit log line, chained to its predecessor by hash."""
    model_config = ConfigDict(frozen=True)

    seq: int = Field(..., ge=1)
    ts: int = Field(..., description="Message timestamp in milliseconds")
    sender: str
    receiver: str
    kind: Literal["key", "ciphertext"]
    payload: str = Field(..., description="Hex-encoded transport bytes")
    prev_hash: str = Field(..., description="Hex SHA-256 of the previous record")
    hash: str = Field("", description="Hex SHA-256 over this record's body")

    def body(self) -> bytes:
        """Canonical bytes covered by the record hash."""
        return self.model_dump_json(exclude={"hash"}).encode("utf-8")


class LogReceipt(BaseModel):
    """Signed statement over the audit log contents."""
    type: Literal["receipt"] = "receipt"
    first_seq: int
    last_seq: int
    record_count: int
    log_sha256: str = Field(..., description="Hex-encoded SHA-256 of the log file")
    sig: str = Field(..., description="Base64-encoded RSA signature over log_sha256")
