"""Temporary password generation and hashing."""

from __future__ import annotations

import secrets
import string

import bcrypt

from leavedesk.config import settings

_ALPHABET = string.ascii_letters + string.digits + "!@#$%&*"


def generate_temp_password(length: int | None = None) -> str:
    """Random password with at least one lowercase, uppercase, digit and symbol."""
    length = max(length or settings.TEMP_PASSWORD_LENGTH, 8)
    while True:
        candidate = "".join(secrets.choice(_ALPHABET) for _ in range(length))
        if (
            any(c.islower() for c in candidate)
            and any(c.isupper() for c in candidate)
            and any(c.isdigit() for c in candidate)
            and any(c in "!@#$%&*" for c in candidate)
        ):
            return candidate


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
