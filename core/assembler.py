"""
core/assembler.py -- Build read views from domain records.

Relationships are assembled at read time, not stored. Each function takes the
entity plus whatever related records the caller already fetched (usually via a
single JOIN query in a store) and returns a frozen view. Views never hold a
reference back to their parent, so a PostView's author has no posts list and a
UserProfile's posts have no author.

hashed_password is dropped here. No view type has a field for it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Optional

from core.models import AuthorSummary, Post, PostSummary, PostView, User, UserProfile

AuthorLookup = Callable[[int], Optional[User]]


def author_summary(user: User) -> AuthorSummary:
    return AuthorSummary(
        id=user.id,
        username=user.username,
        email=user.email,
        bio=user.bio,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def post_summary(post: Post) -> PostSummary:
    return PostSummary(
        id=post.id,
        title=post.title,
        content=post.content,
        published=post.published,
        author_id=post.author_id,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


def assemble_post(post: Post, author_lookup: AuthorLookup) -> PostView:
    """Join a post with its author.

    author_lookup maps an author id to the User record. Every post has an
    author that existed at creation time and deleting a user cascades to their
    posts, so a missing author means the caller passed an incomplete lookup.
    """
    author = author_lookup(post.author_id)
    if author is None:
        raise LookupError(f"author {post.author_id} missing for post {post.id}")
    return PostView(
        id=post.id,
        title=post.title,
        content=post.content,
        published=post.published,
        author_id=post.author_id,
        created_at=post.created_at,
        updated_at=post.updated_at,
        author=author_summary(author),
    )


def assemble_posts(rows: Iterable[tuple[Post, User]]) -> list[PostView]:
    """Assemble views for (post, author) pairs as returned by a JOIN, keeping order."""
    pairs = list(rows)
    authors = {user.id: user for _post, user in pairs}
    return [assemble_post(post, authors.get) for post, _user in pairs]


def assemble_profile(user: User, posts: Iterable[Post]) -> UserProfile:
    return UserProfile(
        id=user.id,
        username=user.username,
        email=user.email,
        bio=user.bio,
        created_at=user.created_at,
        updated_at=user.updated_at,
        posts=[post_summary(p) for p in posts],
    )
