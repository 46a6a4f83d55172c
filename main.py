#!/usr/bin/env python3
"""
Inkwell -- operator command line.

Usage:
  python main.py init-db
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py create-user alice alice@example.com

Environment variables:
  SECRET_KEY    Token signing key, 32+ chars. Required unless DEBUG=true.
  DATABASE_URL  SQLAlchemy URL. Defaults to a SQLite file next to this script.
"""

import argparse
import getpass
import sys

from auth.passwords import PasswordHasher
from auth.store import UserStore
from core.config import get_settings
from core.database import create_db_engine
from core.errors import ConflictError
from core.models import User


def _init_db(args: argparse.Namespace) -> int:
    engine = create_db_engine(get_settings().database_url)
    print(f"  Schema ready at {engine.url.render_as_string(hide_password=True)}")
    engine.dispose()
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _create_user(args: argparse.Namespace) -> int:
    """Register an account from the shell. The password is prompted, never passed as an argument."""
    if not 3 <= len(args.username) <= 20:
        print("  [!] Username must be 3-20 characters.")
        return 1
    password = getpass.getpass("Password: ")
    if len(password) < 6:
        print("  [!] Password must be at least 6 characters.")
        return 1
    if len(password.encode("utf-8")) > PasswordHasher.MAX_BYTES:
        print(f"  [!] Password must be at most {PasswordHasher.MAX_BYTES} bytes.")
        return 1
    if getpass.getpass("Repeat password: ") != password:
        print("  [!] Passwords do not match.")
        return 1

    settings = get_settings()
    engine = create_db_engine(settings.database_url)
    store = UserStore(engine)
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    try:
        user_id = store.create_user(User(username=args.username, email=args.email, hashed_password=hasher.hash(password)))
    except ConflictError as exc:
        print(f"  [!] {exc.message}")
        return 1
    finally:
        engine.dispose()
    print(f"  Created user {args.username} (id {user_id})")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="inkwell",
        description="Inkwell blogging backend -- operator commands.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py init-db
  python main.py serve --reload
  DEBUG=true python main.py create-user alice alice@example.com
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    sub.add_parser("init-db", help="Create the users and posts tables if they do not exist")

    serve = sub.add_parser("serve", help="Run the API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development)")

    create = sub.add_parser("create-user", help="Register an account; prompts for the password")
    create.add_argument("username", help="3-20 characters")
    create.add_argument("email", help="Unique email address")

    args = parser.parse_args()

    handlers = {
        "init-db": _init_db,
        "serve": _serve,
        "create-user": _create_user,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return
    sys.exit(handler(args))


if __name__ == "__main__":
    main()
