"""SQLite-backed persistence for user accounts."""
from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .errors import DuplicateUserError
from .models import NewUser, User, UserStatus

_UNIQUE_COLUMNS = ("username", "email")


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the accounts database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "accounts.sqlite3").resolve(strict=False)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _duplicate_from_integrity_error(exc: sqlite3.IntegrityError) -> Optional[DuplicateUserError]:
    # sqlite reports e.g. "UNIQUE constraint failed: users.username"
    message = str(exc)
    if "UNIQUE constraint failed" not in message:
        return None
    fields = [column for column in _UNIQUE_COLUMNS if f"users.{column}" in message]
    if not fields:
        return None
    return DuplicateUserError(fields)


class Database:
    """Simple wrapper around SQLite for persisting users."""

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT NOT NULL UNIQUE,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    token TEXT NOT NULL UNIQUE,
                    status TEXT NOT NULL,
                    birthdate TEXT,
                    registration_date TEXT NOT NULL,
                    creation_date TEXT NOT NULL
                );
                """
            )

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------
    def insert_user(self, user: NewUser) -> User:
        """Persist a new user and return it with the id SQLite assigned."""

        with self._connect() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO users (
                        username,
                        email,
                        password_hash,
                        token,
                        status,
                        birthdate,
                        registration_date,
                        creation_date
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        user.username,
                        user.email,
                        user.password_hash,
                        user.token,
                        user.status.value,
                        user.birthdate,
                        user.registration_date,
                        _serialize_datetime(user.creation_date),
                    ),
                )
            except sqlite3.IntegrityError as exc:
                duplicate = _duplicate_from_integrity_error(exc)
                if duplicate is None:
                    raise
                raise duplicate from exc

            user_id = cursor.lastrowid

        stored = self.get_user(user_id)
        if stored is None:
            raise RuntimeError("Failed to load user after creation")
        return stored

    def get_user(self, user_id: int) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE username = ?", (username,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def list_users(self) -> List[User]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY id").fetchall()
        return [self._row_to_user(row) for row in rows]

    def update_user(self, user: User) -> User:
        """Write back the owner-mutable columns of an existing user."""

        with self._connect() as conn:
            try:
                cursor = conn.execute(
                    "UPDATE users SET username = ?, birthdate = ?, status = ? WHERE id = ?",
                    (user.username, user.birthdate, user.status.value, user.id),
                )
            except sqlite3.IntegrityError as exc:
                duplicate = _duplicate_from_integrity_error(exc)
                if duplicate is None:
                    raise
                raise duplicate from exc
            if cursor.rowcount == 0:
                raise LookupError(f"User {user.id} does not exist")

        refreshed = self.get_user(user.id)
        if refreshed is None:
            raise LookupError(f"User {user.id} does not exist")
        return refreshed

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=int(row["id"]),
            username=str(row["username"]),
            email=str(row["email"]),
            password_hash=str(row["password_hash"]),
            token=str(row["token"]),
            status=UserStatus(row["status"]),
            birthdate=row["birthdate"],
            registration_date=str(row["registration_date"]),
            creation_date=_parse_datetime(str(row["creation_date"])),
        )


__all__ = ["Database", "resolve_database_path"]
