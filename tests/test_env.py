"""
Environment tests: registry, broadcast scope, routing and audit coupling.

Usage:
    python -m pytest tests/test_env.py -v
"""

import json

import pytest

from cryptosandbox.common.exceptions import (
    DecryptionFailure, DuplicateUser, InvalidPublicKey, LogIOFailure, UnknownPublicKey, UserNotFound
)
from cryptosandbox.common.messages import BROADCAST, KeyPayload, Message
from cryptosandbox.common.utils import now_ms
from cryptosandbox.env import Environment


def read_log(path):
    with open(path, "r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


def test_create_and_find_users(env):
    env.create_user("Alice")
    env.create_user("Bob")

    assert env.find_user("Alice")
    assert env.find_user("Bob")
    assert not env.find_user("Bobb")
    assert env.get_user("Alice").name == "Alice"
    assert env.get_mut_user("Bob").name == "Bob"
    assert sorted(env.users) == ["Alice", "Bob"]
    assert len(env) == 2
    assert "Alice" in env


def test_duplicate_user_leaves_registry_unchanged(env):
    alice = env.create_user("Alice")

    with pytest.raises(DuplicateUser):
        env.create_user("Alice")

    assert len(env) == 1
    assert env.get_user("Alice") is alice


def test_empty_identity_rejected(env):
    with pytest.raises(ValueError):
        env.create_user("")
    with pytest.raises(ValueError):
        env.create_user(BROADCAST)
    assert len(env) == 0


def test_unknown_user_lookup(env):
    env.create_user("Alice")
    env.create_user("Bob")

    with pytest.raises(UserNotFound):
        env.get_user("Carol")
    with pytest.raises(UserNotFound):
        env.get_mut_user("Carol")


def test_broadcast_reaches_current_users_only(env):
    env.create_user("Alice")
    env.create_user("Bob")

    env.send_message(env.get_mut_user("Bob").create_keys())
    carol = env.create_user("Carol")

    bob_key = env.get_user("Bob").public_key
    assert env.get_user("Alice").known_public_keys["Bob"] == bob_key
    assert env.get_user("Bob").known_public_keys["Bob"] == bob_key
    assert "Bob" not in carol.known_public_keys

    with pytest.raises(UnknownPublicKey):
        carol.create_message("Bob", "Hi Bob")


def test_broadcast_is_not_placed_in_mailboxes(env):
    env.create_user("Alice")
    env.create_user("Bob")

    env.send_message(env.get_mut_user("Bob").create_keys())

    assert env.get_user("Alice").mailbox_size == 0
    assert env.get_user("Bob").mailbox_size == 0


def test_end_to_end_exchange(env):
    env.create_user("Alice")
    env.create_user("Bob")

    before_keys = now_ms()
    env.send_message(env.get_mut_user("Bob").create_keys())

    message = env.get_user("Alice").create_message("Bob", "Hello, Bob!")
    assert message.sender == "Alice"
    assert message.receiver == "Bob"
    env.send_message(message)

    received = env.get_user("Bob").read_last_message()
    assert received.sender == "Alice"
    assert received.receiver == "Bob"
    assert received.text == "Hello, Bob!"
    assert received.timestamp >= before_keys


def test_send_to_myself(env):
    alice = env.create_user("Alice")
    env.send_message(alice.create_keys())

    env.send_message(alice.create_message("Alice", "Hello, me!"))

    assert alice.read_last_message().text == "Hello, me!"


def test_conversation_with_key_rotation(env):
    alice = env.create_user("Alice")
    bob = env.create_user("Bob")

    env.send_message(bob.create_keys())
    env.send_message(alice.create_keys())
    env.send_message(alice.create_message("Bob", "Hello, Bob!"))
    env.send_message(bob.create_keys())
    env.send_message(bob.create_message("Alice", "Hello, Alice! How are you?"))
    env.send_message(alice.create_keys())
    env.send_message(alice.create_message("Bob", "I'm OK, thanks. And you?"))

    assert bob.mailbox_size == 2
    assert bob.read_last_message().text == "I'm OK, thanks. And you?"
    assert alice.mailbox_size == 1

    # Alice rotated after Bob wrote, so his message is under her old key
    with pytest.raises(DecryptionFailure):
        alice.read_last_message()


def test_unknown_receiver_is_rejected_without_logging(env, log_path):
    alice = env.create_user("Alice")
    env.send_message(alice.create_keys())
    message = alice.create_message("Alice", "hi")
    forged = Message(sender="Alice", receiver="Dave", payload=message.payload)

    with pytest.raises(UserNotFound):
        env.send_message(forged)

    assert len(read_log(log_path)) == 1


def test_unknown_sender_is_rejected(env):
    env.create_user("Alice")
    message = Message(sender="Mallory", receiver=BROADCAST, payload=KeyPayload(key=b"\x00"))

    with pytest.raises(UserNotFound):
        env.send_message(message)


def test_malformed_broadcast_reaches_no_one(env):
    alice = env.create_user("Alice")
    env.create_user("Bob")

    with pytest.raises(InvalidPublicKey):
        env.send_message(Message(sender="Bob", receiver=BROADCAST, payload=KeyPayload(key=b"junk")))

    assert "Bob" not in alice.known_public_keys


def test_every_send_is_logged_without_plaintext(env, log_path):
    alice = env.create_user("Alice")
    bob = env.create_user("Bob")

    key_record = env.send_message(bob.create_keys())
    message = alice.create_message("Bob", "Hello, Bob!")
    text_record = env.send_message(message)

    entries = read_log(log_path)
    assert [e["kind"] for e in entries] == ["key", "ciphertext"]
    assert entries[0]["receiver"] == BROADCAST
    assert entries[0]["sender"] == "Bob"
    assert entries[1]["receiver"] == "Bob"
    assert entries[1]["payload"] == message.text
    assert entries[1]["ts"] == message.timestamp
    assert (key_record.seq, text_record.seq) == (1, 2)

    with open(log_path, encoding="utf-8") as f:
        raw = f.read()
    assert "Hello, Bob!" not in raw
    assert b"Hello, Bob!".hex() not in raw
    assert str(bob._keys.private.d) not in raw
    assert format(bob._keys.private.d, "x") not in raw


def test_log_failure_keeps_delivery(env, tmp_path):
    alice = env.create_user("Alice")
    bob = env.create_user("Bob")
    env.send_message(bob.create_keys())
    message = alice.create_message("Bob", "delivered anyway")

    # Appending to a directory fails with an OSError
    env.audit_log.path = str(tmp_path)

    with pytest.raises(LogIOFailure):
        env.send_message(message)

    assert bob.read_last_message().text == "delivered anyway"


def test_log_failure_keeps_broadcast(env, tmp_path):
    alice = env.create_user("Alice")
    bob = env.create_user("Bob")
    env.audit_log.path = str(tmp_path)

    with pytest.raises(LogIOFailure):
        env.send_message(bob.create_keys())

    assert "Bob" in alice.known_public_keys


def test_from_file(engine, log_path):
    env = Environment.from_file(log_path, engine)
    env.create_user("Alice")
    env.send_message(env.get_mut_user("Alice").create_keys())

    resumed = Environment.from_file(log_path, engine)

    assert resumed.audit_log.last_seq == 1
    assert len(resumed) == 0


def test_from_file_uses_configured_log_path(engine, tmp_path, monkeypatch):
    path = tmp_path / "configured.jsonl"
    monkeypatch.setenv("SANDBOX_LOG_PATH", str(path))

    env = Environment.from_file(protocol=engine)

    assert env.audit_log.path == str(path)
