"""Domain models for the user directory."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class UserStatus(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


@dataclass(frozen=True)
class NewUser:
    """A registration that has not been assigned an id by the store yet."""

    username: str
    email: str
    password_hash: str
    token: str
    status: UserStatus
    creation_date: datetime
    registration_date: str
    birthdate: Optional[str] = None


@dataclass(frozen=True)
class User:
    """Represents a user account stored in the directory."""

    id: int
    username: str
    email: str
    password_hash: str
    token: str
    status: UserStatus
    creation_date: datetime
    registration_date: str
    birthdate: Optional[str] = None


__all__ = ["NewUser", "User", "UserStatus"]
