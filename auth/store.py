"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as blog/store.py).
UserStore is the repository; core.database.row_to_user is the mapper.
Route and service code never touches SQL directly.

Uniqueness:
  username and email are unique at the database level (core/database.py).
  create_user() and update_user() translate the resulting IntegrityError into
  ConflictError. Two concurrent registrations for the same username therefore
  produce exactly one row, whichever request commits first wins.

Deletion:
  delete_user() issues a single DELETE. posts.author_id has ON DELETE CASCADE,
  so the user's posts are removed atomically with the account.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or blog/.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from core.assembler import assemble_profile
from core.database import posts, row_to_post, row_to_user, users
from core.errors import ConflictError
from core.models import User, UserProfile

# Fields a profile update may touch. Anything else is a programmer error.
_MUTABLE_FIELDS = ("username", "email", "bio")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore(create_db_engine("sqlite:///inkwell.db"))
        user_id = store.create_user(User(username="alice", email="a@x.com", hashed_password=h))
        user = store.get_by_username("alice")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_username(self, username: str) -> Optional[User]:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(select(users).where(users.c.username == username)).fetchone()
        return row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        with self.engine.connect() as conn:
            row = conn.execute(select(users).where(users.c.id == user_id)).fetchone()
        return row_to_user(row) if row is not None else None

    def find_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        """Return any user holding either the username or the email, or None.

        One query covers both unique columns so registration can reject a
        collision on either field with a single lookup.
        """
        with self.engine.connect() as conn:
            row = conn.execute(
                select(users).where(or_(users.c.username == username, users.c.email == email)).limit(1)
            ).fetchone()
        return row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users ordered by id."""
        with self.engine.connect() as conn:
            rows = conn.execute(select(users).order_by(users.c.id)).fetchall()
        return [row_to_user(r) for r in rows]

    def get_profile(self, user_id: int) -> Optional[UserProfile]:
        """Return the user joined with their posts (newest first), or None.

        LEFT OUTER JOIN so a user with no posts still comes back as one row
        with NULL post columns.
        """
        stmt = (
            select(users, posts)
            .select_from(users.outerjoin(posts, posts.c.author_id == users.c.id))
            .where(users.c.id == user_id)
            .order_by(posts.c.created_at.desc(), posts.c.id.desc())
        )
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        if not rows:
            return None
        user = row_to_user(rows[0])
        authored = [row_to_post(r) for r in rows if r._mapping[posts.c.id] is not None]
        return assemble_profile(user, authored)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises ConflictError if the username or email already exists. The
        check is the unique index itself, so it holds under concurrency.
        """
        now = _now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    users.insert().values(
                        username=user.username,
                        email=user.email,
                        hashed_password=user.hashed_password,
                        bio=user.bio,
                        created_at=now,
                        updated_at=now,
                    )
                )
                conn.commit()
                return result.inserted_primary_key[0]
        except IntegrityError as exc:
            raise ConflictError() from exc

    def update_user(self, user_id: int, fields: dict) -> bool:
        """Apply a partial update to username / email / bio.

        Merge-by-presence: only keys present in fields with a non-None value are
        written. Unknown keys raise ValueError rather than being silently
        ignored -- they mean a caller bypassed request validation.

        Raises ConflictError if the new username or email belongs to another
        user. Returns True if a row was updated, False if user_id was not found.
        """
        unknown = set(fields) - set(_MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)!r}")
        values: dict = {}
        for name in _MUTABLE_FIELDS:
            if name in fields and fields[name] is not None:
                values[name] = fields[name]
        values["updated_at"] = _now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(users.update().where(users.c.id == user_id).values(**values))
                conn.commit()
        except IntegrityError as exc:
            raise ConflictError() from exc
        return result.rowcount > 0

    def delete_user(self, user_id: int) -> bool:
        """Permanently delete a user and, through the FK cascade, their posts.

        Returns True if deleted, False if not found. Ownership is the caller's
        responsibility (AuthService.delete_account).
        """
        with self.engine.connect() as conn:
            result = conn.execute(users.delete().where(users.c.id == user_id))
            conn.commit()
        return result.rowcount > 0
