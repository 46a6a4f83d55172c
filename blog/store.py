"""
blog/store.py -- SQLAlchemy-backed post repository with ownership enforcement.

Pattern: Repository + Data Mapper. PostStore is the repository; the row_to_*
functions in core/database.py are the mappers; core/assembler.py turns
(post, author) pairs into PostView. Route handlers never touch SQL directly.

Ownership gate:
  update_post() and delete_post() load the post, raise NotFoundError if it is
  missing, then raise ForbiddenError if its author_id differs from the
  requester -- strictly before any field is applied. Authorship is the only
  permission; there is no admin override.

  The write itself is also scoped by author_id in its WHERE clause, and a
  rowcount of 0 means the post vanished between the check and the write
  (deleted by its author in a concurrent request). That surfaces as
  NotFoundError, never as a partial write.

Authorship:
  create_post() takes author_id as a separate argument, sourced from the
  verified token. An "author_id" key inside fields is rejected as unknown.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = PostStore(engine)
    view = store.create_post({"title": "Hello", "content": "0123456789"}, author_id=1)
    store.update_post(view.id, {"published": True}, requester_id=1)
    store.list_published()
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from core.assembler import assemble_posts
from core.database import posts, row_to_post, row_to_user, users
from core.errors import ForbiddenError, NotFoundError
from core.models import Post, PostView

logger = logging.getLogger("inkwell.blog")

# Client-settable post fields. author_id, id and timestamps are server-owned.
_MUTABLE_FIELDS = ("title", "content", "published")
_REQUIRED_FIELDS = ("title", "content")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _check_fields(fields: dict) -> None:
    """Reject keys outside _MUTABLE_FIELDS.

    Request models already restrict the shape; an unknown key here is a
    programmer error, not a business outcome.
    """
    unknown = set(fields) - set(_MUTABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown post fields: {sorted(unknown)!r}")


def _post_not_found(post_id: int) -> NotFoundError:
    return NotFoundError(f"Post with ID {post_id} not found")


def _joined():
    """SELECT posts JOIN users -- every read path returns posts with their author."""
    return select(posts, users).select_from(posts.join(users, users.c.id == posts.c.author_id))


def _newest_first(stmt):
    return stmt.order_by(posts.c.created_at.desc(), posts.c.id.desc())


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class PostStore:
    """Repository for Post entities."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_published(self) -> list[PostView]:
        """Return every published post, newest first, joined with its author."""
        return self._fetch_views(_newest_first(_joined().where(posts.c.published.is_(True))))

    def list_by_author(self, author_id: int) -> list[PostView]:
        """Return all of one author's posts, published or not, newest first."""
        return self._fetch_views(_newest_first(_joined().where(posts.c.author_id == author_id)))

    def get_post(self, post_id: int) -> PostView:
        """Return one post joined with its author. Raises NotFoundError if missing."""
        views = self._fetch_views(_joined().where(posts.c.id == post_id))
        if not views:
            raise _post_not_found(post_id)
        return views[0]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_post(self, fields: dict, author_id: int) -> PostView:
        """Insert a post owned by author_id and return it joined with its author.

        Raises NotFoundError if author_id does not reference an existing user
        (the account was deleted while its token was still valid). The foreign
        key reports this; there is no separate lookup.
        """
        _check_fields(fields)
        missing = [name for name in _REQUIRED_FIELDS if fields.get(name) is None]
        if missing:
            raise ValueError(f"Missing post fields: {missing!r}")
        now = _now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    posts.insert().values(
                        title=fields["title"],
                        content=fields["content"],
                        published=bool(fields.get("published") or False),
                        author_id=author_id,
                        created_at=now,
                        updated_at=now,
                    )
                )
                conn.commit()
                post_id = result.inserted_primary_key[0]
        except IntegrityError as exc:
            raise NotFoundError(f"User with ID {author_id} not found") from exc
        return self.get_post(post_id)

    def update_post(self, post_id: int, fields: dict, requester_id: int) -> PostView:
        """Apply a partial update to a post the requester owns.

        Merge-by-presence, one field at a time: a key that is absent or None
        leaves the stored value alone. None is never read as "clear this field".

        Raises NotFoundError if the post does not exist (or disappears before
        the write lands) and ForbiddenError if requester_id is not the author.
        """
        _check_fields(fields)
        self._get_owned(post_id, requester_id)

        values: dict = {}
        if fields.get("title") is not None:
            values["title"] = fields["title"]
        if fields.get("content") is not None:
            values["content"] = fields["content"]
        if fields.get("published") is not None:
            values["published"] = bool(fields["published"])
        values["updated_at"] = _now_iso()

        with self.engine.connect() as conn:
            result = conn.execute(
                posts.update()
                .where((posts.c.id == post_id) & (posts.c.author_id == requester_id))
                .values(**values)
            )
            conn.commit()
        if result.rowcount == 0:
            raise _post_not_found(post_id)
        return self.get_post(post_id)

    def delete_post(self, post_id: int, requester_id: int) -> None:
        """Hard-delete a post the requester owns. Same gate as update_post()."""
        self._get_owned(post_id, requester_id)
        with self.engine.connect() as conn:
            result = conn.execute(
                posts.delete().where((posts.c.id == post_id) & (posts.c.author_id == requester_id))
            )
            conn.commit()
        if result.rowcount == 0:
            raise _post_not_found(post_id)
        logger.info("Post %d deleted by user %d", post_id, requester_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_owned(self, post_id: int, requester_id: int) -> Post:
        with self.engine.connect() as conn:
            row = conn.execute(select(posts).where(posts.c.id == post_id)).fetchone()
        if row is None:
            raise _post_not_found(post_id)
        post = row_to_post(row)
        if post.author_id != requester_id:
            logger.warning("User %d denied write on post %d (author %d)", requester_id, post_id, post.author_id)
            raise ForbiddenError("You can only modify your own posts")
        return post

    def _fetch_views(self, stmt) -> list[PostView]:
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return assemble_posts((row_to_post(r), row_to_user(r)) for r in rows)
