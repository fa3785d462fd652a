"""
Sandbox User

A user owns one identity's key pair, the public keys it has learned
from broadcasts, and a mailbox of received ciphertext messages.

Reading never consumes a message: read_* operations peek, and entries
leave the mailbox only through the delete_* operations.
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from cryptosandbox.common.exceptions import (
    DecryptionFailure, MessageNotFound, NoMessages, NoPrivateKey, UnknownPublicKey
)
from cryptosandbox.common.messages import (
    BROADCAST, CiphertextPayload, KeyPayload, Message, ReceivedMessage
)
from cryptosandbox.crypto.base import EncryptionProtocol, KeyPair

logger = logging.getLogger(__name__)


class User:
    """
    One identity in the sandbox.

    Users are created by Environment.create_user and share the
    environment's encryption protocol.
    """

    def __init__(self, name: str, protocol: EncryptionProtocol):
        self._name = name
        self._protocol = protocol
        self._keys: Optional[KeyPair] = None
        self._known_keys: Dict[str, Any] = {}
        self._mailbox: List[Message] = []

    def __repr__(self) -> str:
        return f"User(name={self._name!r}, has_keys={self.has_keys}, mailbox={len(self._mailbox)})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def public_key(self):
        """Own public key, or None before create_keys()."""
        return self._keys.public if self._keys else None

    @property
    def has_keys(self) -> bool:
        return self._keys is not None

    @property
    def known_public_keys(self) -> Mapping[str, Any]:
        return MappingProxyType(self._known_keys)

    @property
    def mailbox_size(self) -> int:
        return len(self._mailbox)

    def create_keys(self) -> Message:
        """
        Create a new public/private key pair.

        Replaces any previous pair; messages encrypted under the old key
        can no longer be read. The returned broadcast must be sent through
        the environment before others can encrypt to this user.

        Returns:
            Broadcast Message carrying the new public key
        """
        self._keys = self._protocol.generate_keys()
        logger.info("User %s generated a new %s key pair", self._name, self._protocol.name)

        return Message(
            sender=self._name,
            receiver=BROADCAST,
            payload=KeyPayload(key=self._protocol.export_public_key(self._keys.public)),
        )

    def learn_public_key(self, identity: str, key_bytes: bytes):
        """
        Record a peer's broadcast public key, replacing any older one.

        Raises:
            InvalidPublicKey: If key_bytes cannot be parsed
        """
        self._known_keys[identity] = self._protocol.import_public_key(key_bytes)

    def create_message(self, receiver: str, text: str) -> Message:
        """
        Create an encrypted message.

        The text is UTF-8 encoded and split into blocks that fit the
        receiver's key; each block is encrypted separately.

        Args:
            receiver: Identity of the receiver
            text: Plaintext

        Returns:
            Ciphertext Message addressed to receiver

        Raises:
            UnknownPublicKey: If no public key is known for receiver
        """
        try:
            key = self._known_keys[receiver]
        except KeyError:
            raise UnknownPublicKey(f"No public key known for '{receiver}'") from None

        data = text.encode('utf-8')
        size = self._protocol.max_plaintext_size(key)
        chunks = [data[i:i + size] for i in range(0, len(data), size)] or [b""]
        blocks = tuple(self._protocol.encrypt(chunk, key) for chunk in chunks)

        return Message(
            sender=self._name,
            receiver=receiver,
            payload=CiphertextPayload(blocks=blocks),
        )

    def deliver(self, message: Message):
        """
        Append a routed ciphertext message to the mailbox.

        Raises:
            ValueError: If message is a key broadcast
        """
        if message.is_broadcast:
            raise ValueError("Only ciphertext messages can be delivered to a mailbox")
        self._mailbox.append(message)

    def _decrypt(self, message: Message) -> ReceivedMessage:
        if self._keys is None:
            raise NoPrivateKey(f"User '{self._name}' has no key pair")

        data = b"".join(
            self._protocol.decrypt(block, self._keys.private)
            for block in message.payload.blocks
        )
        try:
            text = data.decode('utf-8')
        except UnicodeDecodeError:
            raise DecryptionFailure("Decryption failed") from None

        return ReceivedMessage(
            sender=message.sender,
            receiver=message.receiver,
            text=text,
            timestamp=message.timestamp,
        )

    def _entry(self, index: int) -> Message:
        if not self._mailbox:
            raise NoMessages(f"Mailbox of '{self._name}' is empty")
        if not -len(self._mailbox) <= index < len(self._mailbox):
            raise MessageNotFound(f"No message at index {index} for '{self._name}'")
        return self._mailbox[index]

    def read_last_message(self) -> ReceivedMessage:
        """
        Decrypt the most recently delivered message.

        Raises:
            NoMessages: If the mailbox is empty
            NoPrivateKey: If no key pair exists yet
            DecryptionFailure: If the message was not encrypted under the current key
        """
        return self._decrypt(self._entry(-1))

    def read_message(self, index: int) -> ReceivedMessage:
        """Decrypt the message at index (arrival order)."""
        return self._decrypt(self._entry(index))

    def read_all_messages(self) -> List[ReceivedMessage]:
        """Decrypt every message in arrival order."""
        return [self._decrypt(message) for message in self._mailbox]

    def delete_last_message(self):
        self._entry(-1)
        self._mailbox.pop()

    def delete_message(self, index: int):
        self._entry(index)
        del self._mailbox[index]

    def delete_all_messages(self):
        self._mailbox.clear()
