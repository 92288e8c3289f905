"""Business rules for registering, authenticating and updating users."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from .errors import BadRequest, Conflict, DuplicateUserError, NotFound, Unauthorized
from .models import NewUser, User, UserStatus
from .security import generate_token, hash_password, tokens_match, verify_password
from .store import UserStore

logger = logging.getLogger("accounts.service")

REGISTRATION_DATE_FORMAT = "%d-%m-%Y %H:%M:%S"

_NOT_UNIQUE = "The {} provided {} not unique. Therefore, the user could not be created!"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _conflict_for(fields: Iterable[str]) -> Conflict:
    taken = set(fields)
    if {"username", "email"} <= taken:
        return Conflict(_NOT_UNIQUE.format("username and the email", "are"))
    if "email" in taken:
        return Conflict(_NOT_UNIQUE.format("email", "is"))
    return Conflict(_NOT_UNIQUE.format("username", "is"))


class UserDirectory:
    """Enforces uniqueness, authentication and authorization on top of a store.

    The directory keeps no state of its own; every call reads from and writes
    to the injected :class:`~accounts.store.UserStore`. The uniqueness check in
    :meth:`register` is only a pre-check, the store constraint is what holds
    under concurrent registrations.
    """

    def __init__(self, store: UserStore, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock

    def list_users(self) -> List[User]:
        return self._store.list_users()

    def get_user(self, user_id: int) -> User:
        return self._require_user(user_id)

    def register(self, username: str, email: str, password: str) -> User:
        taken = []
        if self._store.get_user_by_username(username) is not None:
            taken.append("username")
        if self._store.get_user_by_email(email) is not None:
            taken.append("email")
        if taken:
            raise _conflict_for(taken)

        now = self._clock()
        candidate = NewUser(
            username=username,
            email=email,
            password_hash=hash_password(password),
            token=generate_token(),
            status=UserStatus.ONLINE,
            creation_date=now,
            registration_date=now.strftime(REGISTRATION_DATE_FORMAT),
        )
        try:
            user = self._store.insert_user(candidate)
        except DuplicateUserError as exc:
            raise _conflict_for(exc.fields) from exc

        logger.info("Registered user %s (%s)", user.id, user.username)
        return user

    def login(self, username: str, password: str) -> User:
        user = self._store.get_user_by_username(username)
        if user is None:
            raise BadRequest("username not found")

        if not verify_password(password, user.password_hash):
            logger.warning("Rejected login for user %s: wrong password", user.id)
            raise Unauthorized("password does not match with username")

        user = self._store.update_user(replace(user, status=UserStatus.ONLINE))
        logger.info("User %s logged in", user.id)
        return user

    def update(
        self,
        user_id: int,
        token: Optional[str],
        *,
        username: Optional[str],
        birthdate: Optional[str],
    ) -> User:
        """Overwrite username and birthdate. Both fields are always written,
        so a missing birthdate clears the stored one."""

        user = self._require_user(user_id)
        self._check_access(user, token)

        if not username or not username.strip():
            raise BadRequest("username must not be empty")
        if username != user.username:
            holder = self._store.get_user_by_username(username)
            if holder is not None and holder.id != user.id:
                raise Conflict(f"The username {username} is already taken")

        try:
            updated = self._store.update_user(replace(user, username=username, birthdate=birthdate))
        except DuplicateUserError as exc:
            raise Conflict(f"The username {username} is already taken") from exc

        logger.info("Updated profile of user %s", user_id)
        return updated

    def set_offline(self, user_id: int, token: Optional[str]) -> User:
        user = self._require_user(user_id)
        self._check_access(user, token)

        updated = self._store.update_user(replace(user, status=UserStatus.OFFLINE))
        logger.info("User %s is now offline", user_id)
        return updated

    def _require_user(self, user_id: int) -> User:
        user = self._store.get_user(user_id)
        if user is None:
            raise NotFound("User with this ID does not exist")
        return user

    @staticmethod
    def _check_access(user: User, token: Optional[str]) -> None:
        if not tokens_match(token, user.token):
            logger.warning("Rejected change to user %s: token mismatch", user.id)
            raise Unauthorized("You have no access to change this Users Information")


__all__ = ["REGISTRATION_DATE_FORMAT", "UserDirectory"]
