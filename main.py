"""Command-line interface for the accounts service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from getpass import getpass
from pathlib import Path
from typing import Sequence


def _running_in_virtualenv() -> bool:
    """Return ``True`` when the current interpreter is executing inside a venv."""

    base_prefix = getattr(sys, "base_prefix", sys.prefix)
    return sys.prefix != base_prefix


def _bootstrap_virtualenv() -> None:
    """Re-exec the script using the bundled virtualenv interpreter when available."""

    if _running_in_virtualenv():
        return

    root = Path(__file__).resolve().parent
    venv_dir = root / ".venv"
    if not venv_dir.is_dir():
        return

    candidates = (
        venv_dir / "bin" / "python",
        venv_dir / "bin" / "python3",
        venv_dir / "Scripts" / "python.exe",
        venv_dir / "Scripts" / "python",
    )

    script = str(Path(__file__).resolve())
    for candidate in candidates:
        if candidate.exists():
            os.execv(str(candidate), [str(candidate), script, *sys.argv[1:]])


if __name__ == "__main__":
    _bootstrap_virtualenv()

from accounts.application import build_database
from accounts.config import Settings, load_settings
from accounts.database import Database
from accounts.errors import DirectoryError
from accounts.service import UserDirectory

logger = logging.getLogger("accounts.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Accounts service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Initialise the accounts database")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP accounts service")
    serve_parser.add_argument("--host", default=None, help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP API (default: ACCOUNTS_PORT or 8080)",
    )

    subparsers.add_parser("list-users", help="Print all registered users")

    add_parser = subparsers.add_parser("add-user", help="Register a new user")
    add_parser.add_argument("username", help="Unique username")
    add_parser.add_argument("email", help="Unique email address")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "list-users", "add-user"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _serve(*, database: Database, settings: Settings, host: str | None, port: int | None) -> None:
    from accounts import create_app
    import uvicorn

    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("Starting accounts API on http://%s:%s", bind_host, bind_port)

    app = create_app(settings=settings, store=database)
    uvicorn.run(app, host=bind_host, port=bind_port, log_level=settings.log_level.lower())


def _list_users(database: Database) -> None:
    users = UserDirectory(database).list_users()
    if not users:
        print("No users are currently registered.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>4}  {'Username':<24}  {'Email':<32}  {'Status':<8}  Registered")
    print("-" * 90)
    for user in users:
        print(f"{user.id:>4}  {user.username:<24}  {user.email:<32}  {user.status.value:<8}  {user.registration_date}")


def _add_user(database: Database, username: str, email: str) -> int:
    password = _prompt_for_password()
    if password is None:
        print("Aborted creating user.")
        return 1

    try:
        user = UserDirectory(database).register(username.strip(), email.strip(), password)
    except DirectoryError as exc:
        print(f"Failed to create user: {exc.message}")
        return 1

    print(f"Created user #{user.id}: {user.username} <{user.email}>")
    return 0


def _prompt_for_password() -> str | None:
    for _ in range(3):
        password = getpass("Password: ")
        if not password:
            print("Password must not be empty. Please try again.")
            continue
        confirmation = getpass("Confirm password: ")
        if password != confirmation:
            print("Passwords do not match. Please try again.")
            continue
        return password
    return None


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    database = build_database(settings)

    if args.command == "serve":
        _serve(database=database, settings=settings, host=args.host, port=args.port)
    elif args.command == "list-users":
        _list_users(database)
    elif args.command == "add-user":
        return _add_user(database, args.username, args.email)
    elif args.command == "init-db":
        print("Database initialisation complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
