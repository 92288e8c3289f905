"""Credential helpers for the user directory."""
from __future__ import annotations

import secrets
import uuid
from typing import Optional

from passlib.context import CryptContext

# Login still succeeds only for the exact registered password; the hash just
# keeps it out of the database.
_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def generate_token() -> str:
    return str(uuid.uuid4())


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return _pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        return False


def tokens_match(provided: Optional[str], expected: Optional[str]) -> bool:
    """Compare two tokens in constant time. Missing tokens never match."""

    if provided is None or expected is None:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


__all__ = ["generate_token", "hash_password", "tokens_match", "verify_password"]
