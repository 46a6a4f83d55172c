"""Unit tests for core/assembler.py -- pure functions, no database."""

from dataclasses import fields

import pytest

from core.assembler import assemble_post, assemble_posts, assemble_profile, author_summary
from core.models import AuthorSummary, Post, PostView, User


def _user(user_id: int = 1, username: str = "alice") -> User:
    return User(
        id=user_id,
        username=username,
        email=f"{username}@example.com",
        hashed_password="$2b$04$secret",
        created_at="2024-01-01T00:00:00.000000+00:00",
        updated_at="2024-01-01T00:00:00.000000+00:00",
    )


def _post(post_id: int, author_id: int = 1) -> Post:
    return Post(
        id=post_id,
        title=f"Post {post_id}",
        content="0123456789",
        author_id=author_id,
        created_at="2024-01-02T00:00:00.000000+00:00",
        updated_at="2024-01-02T00:00:00.000000+00:00",
    )


def test_views_have_no_password_field() -> None:
    for view_type in (AuthorSummary, PostView):
        assert "hashed_password" not in {f.name for f in fields(view_type)}


def test_author_summary_copies_public_fields() -> None:
    summary = author_summary(_user())
    assert summary.username == "alice"
    assert summary.email == "alice@example.com"


def test_assemble_post_attaches_author() -> None:
    view = assemble_post(_post(5), {1: _user()}.get)
    assert view.id == 5
    assert view.author.id == 1


def test_assemble_post_missing_author_raises() -> None:
    with pytest.raises(LookupError):
        assemble_post(_post(5, author_id=2), {1: _user()}.get)


def test_assemble_posts_keeps_order() -> None:
    alice, bob = _user(1, "alice"), _user(2, "bob")
    views = assemble_posts([(_post(3, 2), bob), (_post(1, 1), alice), (_post(2, 2), bob)])
    assert [v.id for v in views] == [3, 1, 2]
    assert [v.author.username for v in views] == ["bob", "alice", "bob"]


def test_assemble_profile_posts_have_no_author() -> None:
    profile = assemble_profile(_user(), [_post(2), _post(1)])
    assert [p.id for p in profile.posts] == [2, 1]
    assert not hasattr(profile.posts[0], "author")
    assert not hasattr(profile, "hashed_password")
