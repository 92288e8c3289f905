"""User directory: registration, login and profile management over HTTP."""

from __future__ import annotations

from typing import Any

from .database import Database, resolve_database_path
from .errors import BadRequest, Conflict, DirectoryError, NotFound, Unauthorized
from .models import User, UserStatus


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the configured ASGI application."""

    from .application import create_application as _create_application

    return _create_application(*args, **kwargs)


__all__ = [
    "BadRequest",
    "Conflict",
    "Database",
    "DirectoryError",
    "NotFound",
    "Unauthorized",
    "User",
    "UserStatus",
    "create_app",
    "resolve_database_path",
]
