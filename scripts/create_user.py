import argparse
import getpass
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from accounts.database import Database, resolve_database_path
from accounts.errors import DirectoryError
from accounts.service import UserDirectory


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Register an account in the user directory")
    parser.add_argument("username", help="Unique username")
    parser.add_argument("email", help="Unique email address")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the SQLite database (defaults to ACCOUNTS_DB_PATH or data/accounts.sqlite3)",
    )
    return parser.parse_args()


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if not password:
            print("Password must not be empty.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def main() -> int:
    args = parse_args()
    password = prompt_for_password()

    db_env = args.db_path or os.getenv("ACCOUNTS_DB_PATH")
    db_path = resolve_database_path(db_env)

    database = Database(db_path)
    database.initialize()

    try:
        user = UserDirectory(database).register(args.username.strip(), args.email.strip(), password)
    except DirectoryError as exc:  # duplicates
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    print(f"Created user #{user.id}: {user.username} <{user.email}>")
    print(f"Token: {user.token}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
