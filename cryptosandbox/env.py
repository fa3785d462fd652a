"""
Sandbox Environment

Owns the user registry, routes key broadcasts and ciphertext messages,
and appends every routed message to the audit log.

Delivery and audit are decoupled: if the log write fails, the message
stays delivered and LogIOFailure is raised to the caller.
"""

import logging
from typing import Dict, List, Optional

from cryptosandbox.common.config import load_settings
from cryptosandbox.common.exceptions import DuplicateUser, UserNotFound
from cryptosandbox.common.messages import BROADCAST, LogRecord, Message
from cryptosandbox.crypto.base import EncryptionProtocol
from cryptosandbox.crypto.rsa import RSA
from cryptosandbox.storage.audit_log import AuditLog
from cryptosandbox.user import User

logger = logging.getLogger(__name__)


class Environment:
    """
    Registry of users plus message router.

    Example:
        env = Environment.from_file("logs/demo.jsonl")
        env.create_user("Alice")
        env.create_user("Bob")
        env.send_message(env.get_mut_user("Bob").create_keys())
        env.send_message(env.get_user("Alice").create_message("Bob", "Hello, Bob!"))
        print(env.get_user("Bob").read_last_message().text)
    """

    def __init__(self, protocol: EncryptionProtocol, audit_log: AuditLog):
        self.protocol = protocol
        self.audit_log = audit_log
        self._users: Dict[str, User] = {}

    @classmethod
    def from_file(
        cls,
        log_path: Optional[str] = None,
        protocol: Optional[EncryptionProtocol] = None,
    ) -> "Environment":
        """
        Create an environment logging to log_path.

        Args:
            log_path: Audit log location (default: SANDBOX_LOG_PATH)
            protocol: Encryption protocol (default: RSA from settings)

        Raises:
            LogIOFailure: If an existing log cannot be resumed
        """
        if log_path is None:
            log_path = load_settings().log_path
        if protocol is None:
            protocol = RSA()

        logger.info("Environment using %r, audit log %s", protocol, log_path)
        return cls(protocol, AuditLog(log_path))

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, identity: str) -> bool:
        return identity in self._users

    @property
    def users(self) -> List[str]:
        return list(self._users)

    def create_user(self, identity: str) -> User:
        """
        Register a new user with no key material.

        Raises:
            DuplicateUser: If the identity is taken
            ValueError: If the identity is empty or the broadcast marker
        """
        if not identity:
            raise ValueError("User identity must not be empty")
        if identity == BROADCAST:
            raise ValueError(f"User identity '{BROADCAST}' is reserved for broadcasts")
        if identity in self._users:
            raise DuplicateUser(f"User '{identity}' already exists")

        user = User(identity, self.protocol)
        self._users[identity] = user
        logger.info("Registered user %s", identity)
        return user

    def get_user(self, identity: str) -> User:
        """
        Look up a user.

        Raises:
            UserNotFound: If no user has this identity
        """
        try:
            return self._users[identity]
        except KeyError:
            raise UserNotFound(f"User '{identity}' not found") from None

    def get_mut_user(self, identity: str) -> User:
        """Look up a user for a state-changing call such as create_keys()."""
        return self.get_user(identity)

    def find_user(self, identity: str) -> bool:
        return identity in self._users

    def send_message(self, message: Message) -> LogRecord:
        """
        Route a message and record it in the audit log.

        A key broadcast is learned by every user registered right now,
        the sender included. A ciphertext message is appended to its
        receiver's mailbox.

        Returns:
            The audit record written for this message

        Raises:
            UserNotFound: If the sender or the ciphertext receiver is unknown
            InvalidPublicKey: If a broadcast key cannot be parsed
            LogIOFailure: If the audit write fails (delivery is kept)
        """
        if message.sender not in self._users:
            raise UserNotFound(f"Sender '{message.sender}' not found")

        if message.is_broadcast:
            key_bytes = message.payload.transport_bytes()
            # Parse once up front so a bad key reaches no one
            self.protocol.import_public_key(key_bytes)
            for user in self._users.values():
                user.learn_public_key(message.sender, key_bytes)
            logger.info("Broadcast public key of %s to %d user(s)", message.sender, len(self._users))
        else:
            receiver = self.get_user(message.receiver)
            receiver.deliver(message)
            logger.info(
                "Delivered %d-block message %s -> %s",
                len(message.payload.blocks), message.sender, message.receiver,
            )

        return self.audit_log.append(message)
