"""
Append-only Audit Log

One JSON line per routed message:
seq | ts | sender | receiver | kind | payload (hex) | prev_hash | hash

Each record's hash covers its body including the previous record's hash,
so editing, reordering or dropping a line breaks the chain. Signed
LogReceipts pin the whole file for offline verification.
"""

import hashlib
import json
import logging
import os
from typing import List, Optional, Tuple
from pydantic import ValidationError

from cryptosandbox.common.exceptions import LogIOFailure
from cryptosandbox.common.messages import (
    BROADCAST, GENESIS_HASH, LogReceipt, LogRecord, Message
)
from cryptosandbox.common.utils import sha256_hex
from cryptosandbox.crypto.sign import sign_data, verify_signature

logger = logging.getLogger(__name__)


def seal_record(record: LogRecord) -> LogRecord:
    """Return a copy of record with its hash filled in."""
    return record.model_copy(update={"hash": sha256_hex(record.body())})


class AuditLog:
    """
    Manages the append-only audit log of an Environment.
    """

    def __init__(self, path: str):
        """
        Open (or create) an audit log.

        An existing log is resumed: numbering and hash chaining continue
        from its last record.

        Args:
            path: Log file location

        Raises:
            LogIOFailure: If an existing log cannot be read or parsed
        """
        self.path = path
        self.last_seq = 0
        self.last_hash = GENESIS_HASH
        self.first_seq: Optional[int] = None

        directory = os.path.dirname(path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise LogIOFailure(f"Cannot create log directory {directory}: {e}") from e

        records = self.records()
        if records:
            self.first_seq = records[0].seq
            self.last_seq = records[-1].seq
            self.last_hash = records[-1].hash
            logger.info("Resumed audit log %s at seq %d", path, self.last_seq)

    def append(self, message: Message) -> LogRecord:
        """
        Append a routed message to the log.

        Only the payload's transport form is written.

        Args:
            message: Message that was just routed

        Returns:
            The sealed LogRecord

        Raises:
            LogIOFailure: If the write fails
        """
        record = seal_record(LogRecord(
            seq=self.last_seq + 1,
            ts=message.timestamp,
            sender=message.sender,
            receiver=BROADCAST if message.is_broadcast else message.receiver,
            kind=message.kind,
            payload=message.text,
            prev_hash=self.last_hash,
        ))

        line = record.model_dump_json() + "\n"
        try:
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(line)
        except OSError as e:
            logger.warning("Audit log write to %s failed: %s", self.path, e)
            raise LogIOFailure(f"Cannot append to audit log {self.path}: {e}") from e

        if self.first_seq is None:
            self.first_seq = record.seq
        self.last_seq = record.seq
        self.last_hash = record.hash

        return record

    def records(self) -> List[LogRecord]:
        """
        Parse all records in the log.

        Returns:
            Records in file order (empty if the log does not exist yet)

        Raises:
            LogIOFailure: If the file cannot be read or a line is malformed
        """
        records = []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                for lineno, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        records.append(LogRecord(**json.loads(line)))
                    except (json.JSONDecodeError, TypeError, ValidationError) as e:
                        raise LogIOFailure(
                            f"Malformed audit record at {self.path}:{lineno}"
                        ) from e
        except FileNotFoundError:
            return []
        except OSError as e:
            raise LogIOFailure(f"Cannot read audit log {self.path}: {e}") from e

        return records

    def record_count(self) -> int:
        return len(self.records())

    def verify(self) -> Tuple[bool, str]:
        """
        Check sequence numbering and the hash chain.

        Returns:
            Tuple of (is_valid, message)
            message: Description of the first failure, or "OK"
        """
        try:
            records = self.records()
        except LogIOFailure as e:
            return False, str(e)

        prev_hash = GENESIS_HASH
        expected_seq = 1
        for record in records:
            if record.seq != expected_seq:
                return False, f"BAD_SEQ: expected seq {expected_seq}, got {record.seq}"
            if record.prev_hash != prev_hash:
                return False, f"BAD_CHAIN: record {record.seq} does not follow its predecessor"
            if sha256_hex(record.body()) != record.hash:
                return False, f"BAD_HASH: record {record.seq} was modified"
            prev_hash = record.hash
            expected_seq = record.seq + 1

        return True, "OK"

    def compute_log_hash(self) -> str:
        """
        Compute SHA-256 hash of the entire log file.

        Returns:
            Hex-encoded SHA-256 hash of the log
        """
        hasher = hashlib.sha256()

        try:
            with open(self.path, 'rb') as f:
                for line in f:
                    hasher.update(line)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise LogIOFailure(f"Cannot read audit log {self.path}: {e}") from e

        return hasher.hexdigest()

    def generate_receipt(self, private_key) -> LogReceipt:
        """
        Generate a signed LogReceipt over the current log contents.

        Args:
            private_key: Auditor RSA private key (cryptography)

        Returns:
            LogReceipt object
        """
        log_hash = self.compute_log_hash()
        signature = sign_data(bytes.fromhex(log_hash), private_key)

        return LogReceipt(
            first_seq=self.first_seq or 0,
            last_seq=self.last_seq,
            record_count=self.record_count(),
            log_sha256=log_hash,
            sig=signature,
        )

    def save_receipt(self, receipt: LogReceipt, receipt_path: str):
        """
        Save LogReceipt to JSON file.

        Raises:
            LogIOFailure: If the receipt cannot be written
        """
        try:
            with open(receipt_path, 'w', encoding='utf-8') as f:
                f.write(receipt.model_dump_json(indent=2))
        except OSError as e:
            raise LogIOFailure(f"Cannot write receipt {receipt_path}: {e}") from e

        logger.info("Log receipt saved to %s", receipt_path)

    def verify_receipt(self, receipt: LogReceipt, public_key) -> bool:
        """
        Check a receipt against the current log.

        Returns:
            True if the log hash matches and the signature is valid
        """
        if receipt.log_sha256 != self.compute_log_hash():
            return False
        return verify_signature(bytes.fromhex(receipt.log_sha256), receipt.sig, public_key)


def load_receipt(receipt_path: str) -> LogReceipt:
    """Load a LogReceipt saved by AuditLog.save_receipt."""
    try:
        with open(receipt_path, 'r', encoding='utf-8') as f:
            return LogReceipt(**json.load(f))
    except OSError as e:
        raise LogIOFailure(f"Cannot read receipt {receipt_path}: {e}") from e
    except (json.JSONDecodeError, TypeError, ValidationError) as e:
        raise LogIOFailure(f"Malformed receipt {receipt_path}") from e
