"""
Create a user (e.g. first admin) without going through the HTTP API. Run from project root:
  python -m hireauth.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m hireauth.scripts.create_user admin your-secure-password Admin
"""
import argparse
import sys

from hireauth.core.config import get_settings
from hireauth.core.database import build_engine, build_session_factory
from hireauth.core.errors import ConflictError
from hireauth.core.security import hash_password
from hireauth.models import ROLE_USER, ROLES
from hireauth.services.users import UserRepository


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a hireauth user.")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("password", help="Password (1-128 chars)")
    parser.add_argument("role", nargs="?", default=ROLE_USER, choices=ROLES)
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username or len(username) > 255:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not args.password or len(args.password) > 128:
        print("Password must be 1-128 characters.", file=sys.stderr)
        return 1

    settings = get_settings()
    engine = build_engine(settings)
    db = build_session_factory(engine)()
    try:
        users = UserRepository(db)
        if users.find_by_username(username) is not None:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        try:
            users.create(
                username=username,
                password_hash=hash_password(args.password, rounds=settings.BCRYPT_ROUNDS),
                role=args.role,
            )
        except ConflictError:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        print(f"Created user '{username}' with role '{args.role}'.")
        return 0
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
