"""
core/database.py -- Shared SQLAlchemy Core schema and engine factory.

Both stores (auth/store.py for users, blog/store.py for posts) run against the
same engine so read paths can join posts to their authors in one query.

Uses SQLAlchemy Core (not ORM) so the dataclasses in core/models.py remain the
authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Constraints live in the schema, not in application code:
  - UNIQUE(username) and UNIQUE(email) on users. Two racing registrations are
    settled by the database; the loser gets IntegrityError.
  - posts.author_id REFERENCES users(id) ON DELETE CASCADE. Deleting a user
    removes their posts in the same statement.

SQLite needs PRAGMA foreign_keys=ON on every connection for the second rule to
hold; _set_sqlite_pragmas() takes care of that.
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    text,
)
from sqlalchemy.engine import Engine

from core.models import Post, User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(20), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("bio", String(255)),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

posts = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(200), nullable=False),
    Column("content", Text, nullable=False),
    Column("published", Boolean, nullable=False, server_default="0"),
    Column(
        "author_id",
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Per-connection setup
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. In-memory databases ignore WAL silently.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ---------------------------------------------------------------------------
# Engine factory
# ---------------------------------------------------------------------------


def create_db_engine(db_url: str) -> Engine:
    """Create an engine for db_url and make sure the schema exists.

    Usage:
        engine = create_db_engine("sqlite:///inkwell.db")
        engine = create_db_engine("postgresql://user:pw@host/db")
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    init_db(engine)
    return engine


def init_db(engine: Engine) -> None:
    """Create database tables if they do not exist."""
    metadata.create_all(engine)


def ping(engine: Engine) -> bool:
    """Return True if the database answers a trivial query."""
    with engine.connect() as conn:
        return conn.execute(text("SELECT 1")).scalar() == 1


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
#
# Rows are read through Column keys rather than attribute names so the same
# mapper works for plain selects and for JOINs where users and posts both
# contribute id / created_at / updated_at columns.
# ---------------------------------------------------------------------------


def row_to_user(row) -> User:
    m = row._mapping
    return User(
        id=m[users.c.id],
        username=m[users.c.username],
        email=m[users.c.email],
        hashed_password=m[users.c.hashed_password],
        bio=m[users.c.bio],
        created_at=m[users.c.created_at],
        updated_at=m[users.c.updated_at],
    )


def row_to_post(row) -> Post:
    m = row._mapping
    return Post(
        id=m[posts.c.id],
        title=m[posts.c.title],
        content=m[posts.c.content],
        published=bool(m[posts.c.published]),
        author_id=m[posts.c.author_id],
        created_at=m[posts.c.created_at],
        updated_at=m[posts.c.updated_at],
    )
