"""Password hashing with bcrypt and login token generation."""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time

import bcrypt

DEFAULT_COST = 10
MIN_COST = 4
MAX_COST = 31
_MIN_HASH_SIZE = 59
_MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash ``password`` with bcrypt at the default cost."""
    data = password.encode("utf-8")
    if len(data) > _MAX_PASSWORD_BYTES:
        raise ValueError("bcrypt: password length exceeds 72 bytes")
    salt = bcrypt.gensalt(rounds=DEFAULT_COST, prefix=b"2a")
    return bcrypt.hashpw(data, salt).decode("ascii")


def password_ok(hashed_password: str, password: str) -> bool:
    """Whether ``password`` matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def _hash_cost(hashed: str) -> int:
    if len(hashed.encode("utf-8")) < _MIN_HASH_SIZE:
        raise ValueError("hashed secret too short")
    if hashed[0] != "$":
        raise ValueError(f"invalid hash prefix {hashed[0]!r}")
    if hashed[1] > "2":
        raise ValueError(f"hash version too new {hashed[1]!r}")
    start = 3 if hashed[2] == "$" else 4
    digits = hashed[start:start + 2]
    if not digits.isascii() or not digits.isdigit():
        raise ValueError(f"invalid cost {digits!r}")
    cost = int(digits)
    if not MIN_COST <= cost <= MAX_COST:
        raise ValueError(f"cost {cost} outside allowed range")
    return cost


def is_hashed_password(password: str) -> bool:
    """Whether ``password`` already looks like a bcrypt hash."""
    try:
        _hash_cost(password)
    except ValueError:
        return False
    return True


def generate_token(username: str) -> str:
    """Create a random base64 token bound to ``username`` and the current time."""
    key = str(secrets.randbits(64)).encode("ascii")
    message = f"{username}{int(time.time())}".encode("utf-8")
    digest = hmac.new(key, message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")