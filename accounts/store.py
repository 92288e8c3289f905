"""Store interface used by the directory, plus an in-memory implementation."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Dict, List, Optional, Protocol

from .errors import DuplicateUserError
from .models import NewUser, User


class UserStore(Protocol):
    """Keyed persistence for :class:`User` records."""

    def insert_user(self, user: NewUser) -> User:
        ...

    def get_user(self, user_id: int) -> Optional[User]:
        ...

    def get_user_by_username(self, username: str) -> Optional[User]:
        ...

    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    def update_user(self, user: User) -> User:
        ...

    def list_users(self) -> List[User]:
        ...


class InMemoryUserStore:
    """Thread-safe dictionary store with the same uniqueness rules as SQLite."""

    def __init__(self) -> None:
        self._users: Dict[int, User] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def insert_user(self, user: NewUser) -> User:
        with self._lock:
            self._check_unique(user.username, user.email, exclude_id=None)
            stored = User(
                id=self._next_id,
                username=user.username,
                email=user.email,
                password_hash=user.password_hash,
                token=user.token,
                status=user.status,
                creation_date=user.creation_date,
                registration_date=user.registration_date,
                birthdate=user.birthdate,
            )
            self._users[stored.id] = stored
            self._next_id += 1
            return stored

    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            return next((u for u in self._users.values() if u.username == username), None)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            return next((u for u in self._users.values() if u.email == email), None)

    def update_user(self, user: User) -> User:
        with self._lock:
            current = self._users.get(user.id)
            if current is None:
                raise LookupError(f"User {user.id} does not exist")
            self._check_unique(user.username, None, exclude_id=user.id)
            # Only the owner-mutable columns are written back.
            updated = replace(current, username=user.username, birthdate=user.birthdate, status=user.status)
            self._users[user.id] = updated
            return updated

    def list_users(self) -> List[User]:
        with self._lock:
            return [self._users[key] for key in sorted(self._users)]

    def _check_unique(self, username: str, email: Optional[str], *, exclude_id: Optional[int]) -> None:
        taken = []
        for existing in self._users.values():
            if existing.id == exclude_id:
                continue
            if existing.username == username:
                taken.append("username")
            if email is not None and existing.email == email:
                taken.append("email")
        if taken:
            raise DuplicateUserError(taken)


__all__ = ["InMemoryUserStore", "UserStore"]
