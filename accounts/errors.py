"""Errors raised by the user directory and the stores behind it."""

from __future__ import annotations

from typing import Iterable, Tuple


class DirectoryError(Exception):
    """Base class for failures that terminate a directory request."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(DirectoryError):
    status_code = 404


class Conflict(DirectoryError):
    status_code = 409


class Unauthorized(DirectoryError):
    status_code = 401


class BadRequest(DirectoryError):
    status_code = 400


class DuplicateUserError(ValueError):
    """Raised by a store when a write would break username/email uniqueness."""

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields: Tuple[str, ...] = tuple(sorted(set(fields)))
        super().__init__(f"A user with that {' and '.join(self.fields)} already exists")


__all__ = [
    "BadRequest",
    "Conflict",
    "DirectoryError",
    "DuplicateUserError",
    "NotFound",
    "Unauthorized",
]
