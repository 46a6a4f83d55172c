"""
core/models.py -- Domain dataclasses for Inkwell.

Pure data containers with zero logic. Stores map rows onto these; the
assembler (core/assembler.py) builds the outward-facing views from them.

User carries hashed_password because the credential store and login flow need
it. Nothing that leaves the process is built from User directly -- the view
types below (AuthorSummary, UserProfile) have no password field at all.

id is None before the record is written to the database.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class User:
    username: str
    email: str
    hashed_password: str
    id: Optional[int] = None
    bio: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""


@dataclass
class Post:
    title: str
    content: str
    author_id: int  # immutable after insert
    published: bool = False
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""


# ---------------------------------------------------------------------------
# Read views (assembled at query time, never stored)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AuthorSummary:
    """Public fields of a User. Used standalone and nested inside PostView."""

    id: int
    username: str
    email: str
    bio: Optional[str]
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class PostView:
    """A Post joined with its author's public fields."""

    id: int
    title: str
    content: str
    published: bool
    author_id: int
    created_at: str
    updated_at: str
    author: AuthorSummary


@dataclass(frozen=True)
class PostSummary:
    """A Post without the nested author, for lists already scoped to one user."""

    id: int
    title: str
    content: str
    published: bool
    author_id: int
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class UserProfile:
    """A User's public fields joined with the posts they authored."""

    id: int
    username: str
    email: str
    bio: Optional[str]
    created_at: str
    updated_at: str
    posts: list[PostSummary] = field(default_factory=list)
