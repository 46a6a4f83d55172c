"""Integration tests for blog/store.py (PostStore).

Covers:
- create returns the post joined with its author, unpublished by default
- list_published filters drafts, list_by_author includes them, both newest first
- get_post of an unknown id raises NotFoundError, repeated reads are identical
- update/delete by a non-author raise ForbiddenError and change nothing
- update/delete of an unknown id raise NotFoundError
- partial update ignores None values and unknown keys are rejected
- create for an author that no longer exists raises NotFoundError
- a post deleted between the ownership check and the write raises NotFoundError
"""

import pytest

from auth.store import UserStore
from blog.store import PostStore
from core.database import posts
from core.errors import ForbiddenError, NotFoundError
from core.models import User

CONTENT = "Long enough content for a post."


@pytest.fixture
def alice(user_store: UserStore) -> int:
    return user_store.create_user(User(username="alice", email="alice@example.com", hashed_password="h"))


@pytest.fixture
def bob(user_store: UserStore) -> int:
    return user_store.create_user(User(username="bob", email="bob@example.com", hashed_password="h"))


class TestCreateAndRead:
    def test_create_defaults_to_draft_with_author(self, post_store: PostStore, alice: int) -> None:
        view = post_store.create_post({"title": "Hello", "content": CONTENT}, author_id=alice)
        assert view.id is not None
        assert view.published is False
        assert view.author_id == alice
        assert view.author.id == alice
        assert view.author.username == "alice"
        assert not hasattr(view.author, "hashed_password")

    def test_get_post_is_idempotent(self, post_store: PostStore, alice: int) -> None:
        view = post_store.create_post({"title": "Hello", "content": CONTENT}, author_id=alice)
        assert post_store.get_post(view.id) == post_store.get_post(view.id) == view

    def test_get_unknown_post_raises(self, post_store: PostStore) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            post_store.get_post(999)
        assert exc_info.value.message == "Post with ID 999 not found"

    def test_list_published_excludes_drafts(self, post_store: PostStore, alice: int) -> None:
        post_store.create_post({"title": "Draft", "content": CONTENT}, author_id=alice)
        live = post_store.create_post({"title": "Live", "content": CONTENT, "published": True}, author_id=alice)
        assert [p.id for p in post_store.list_published()] == [live.id]

    def test_lists_are_newest_first(self, post_store: PostStore, alice: int, bob: int) -> None:
        ids = [
            post_store.create_post({"title": f"Post {n}", "content": CONTENT, "published": True}, author_id=author).id
            for n, author in enumerate((alice, bob, alice))
        ]
        assert [p.id for p in post_store.list_published()] == list(reversed(ids))
        assert [p.id for p in post_store.list_by_author(alice)] == [ids[2], ids[0]]

    def test_list_by_author_includes_drafts(self, post_store: PostStore, alice: int, bob: int) -> None:
        post_store.create_post({"title": "Draft", "content": CONTENT}, author_id=alice)
        assert len(post_store.list_by_author(alice)) == 1
        assert post_store.list_by_author(bob) == []

    def test_create_for_missing_author_raises_not_found(self, post_store: PostStore) -> None:
        with pytest.raises(NotFoundError):
            post_store.create_post({"title": "Orphan", "content": CONTENT}, author_id=777)
        assert post_store.list_by_author(777) == []

    def test_author_id_in_fields_is_rejected(self, post_store: PostStore, alice: int, bob: int) -> None:
        with pytest.raises(ValueError):
            post_store.create_post({"title": "Hi", "content": CONTENT, "author_id": bob}, author_id=alice)

    def test_missing_required_field_is_rejected(self, post_store: PostStore, alice: int) -> None:
        with pytest.raises(ValueError):
            post_store.create_post({"title": "No content"}, author_id=alice)


class TestUpdate:
    def test_partial_update_ignores_none(self, post_store: PostStore, alice: int) -> None:
        view = post_store.create_post({"title": "Hello", "content": CONTENT}, author_id=alice)
        updated = post_store.update_post(view.id, {"published": True, "title": None}, requester_id=alice)
        assert updated.published is True
        assert updated.title == "Hello"
        assert updated.content == CONTENT
        assert updated.created_at == view.created_at
        assert updated.updated_at >= view.updated_at

    def test_non_author_update_is_forbidden(self, post_store: PostStore, alice: int, bob: int) -> None:
        view = post_store.create_post({"title": "Hello", "content": CONTENT}, author_id=alice)
        with pytest.raises(ForbiddenError) as exc_info:
            post_store.update_post(view.id, {"title": "Hacked"}, requester_id=bob)
        assert exc_info.value.message == "You can only modify your own posts"
        assert post_store.get_post(view.id) == view

    def test_update_unknown_post_raises(self, post_store: PostStore, alice: int) -> None:
        with pytest.raises(NotFoundError):
            post_store.update_post(999, {"title": "Nope"}, requester_id=alice)

    def test_update_unknown_field_is_rejected(self, post_store: PostStore, alice: int, bob: int) -> None:
        view = post_store.create_post({"title": "Hello", "content": CONTENT}, author_id=alice)
        with pytest.raises(ValueError):
            post_store.update_post(view.id, {"author_id": bob}, requester_id=alice)
        assert post_store.get_post(view.id).author_id == alice


class TestDelete:
    def test_author_can_delete(self, post_store: PostStore, alice: int) -> None:
        view = post_store.create_post({"title": "Hello", "content": CONTENT}, author_id=alice)
        post_store.delete_post(view.id, requester_id=alice)
        with pytest.raises(NotFoundError):
            post_store.get_post(view.id)

    def test_non_author_delete_is_forbidden(self, post_store: PostStore, alice: int, bob: int) -> None:
        view = post_store.create_post({"title": "Hello", "content": CONTENT}, author_id=alice)
        with pytest.raises(ForbiddenError):
            post_store.delete_post(view.id, requester_id=bob)
        assert post_store.get_post(view.id) == view

    def test_delete_twice_is_not_found(self, post_store: PostStore, alice: int) -> None:
        view = post_store.create_post({"title": "Hello", "content": CONTENT}, author_id=alice)
        post_store.delete_post(view.id, requester_id=alice)
        with pytest.raises(NotFoundError):
            post_store.delete_post(view.id, requester_id=alice)


class TestConcurrentDelete:
    """The post disappears after the ownership check passes but before the write lands."""

    @staticmethod
    def _delete_after_check(post_store: PostStore, monkeypatch) -> None:
        checked = post_store._get_owned

        def check_then_vanish(post_id: int, requester_id: int):
            post = checked(post_id, requester_id)
            with post_store.engine.connect() as conn:
                conn.execute(posts.delete().where(posts.c.id == post_id))
                conn.commit()
            return post

        monkeypatch.setattr(post_store, "_get_owned", check_then_vanish)

    def test_update_of_vanished_post_is_not_found(self, post_store: PostStore, alice: int, monkeypatch) -> None:
        view = post_store.create_post({"title": "Hello", "content": CONTENT}, author_id=alice)
        self._delete_after_check(post_store, monkeypatch)
        with pytest.raises(NotFoundError) as exc_info:
            post_store.update_post(view.id, {"title": "Too late"}, requester_id=alice)
        assert exc_info.value.message == f"Post with ID {view.id} not found"

    def test_delete_of_vanished_post_is_not_found(self, post_store: PostStore, alice: int, monkeypatch) -> None:
        view = post_store.create_post({"title": "Hello", "content": CONTENT}, author_id=alice)
        self._delete_after_check(post_store, monkeypatch)
        with pytest.raises(NotFoundError):
            post_store.delete_post(view.id, requester_id=alice)
        assert post_store.list_by_author(alice) == []
