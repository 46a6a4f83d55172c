"""
tests/conftest.py -- Shared test fixtures for Inkwell.

This module provides:
  - engine / user_store / post_store / hasher / tokens / auth_service:
    function-scoped units over a private in-memory SQLite database
  - _patch_lifespan(): wires a test engine into app.state, bypassing real startup
  - api_client: TestClient over the real app with an isolated database
  - register_user: helper that registers an account through the HTTP API

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
api_client because TestClient runs sync route handlers in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

Environment must be set before any api/core import:
  DEBUG=true          -- get_settings() auto-generates SECRET_KEY
  BCRYPT_ROUNDS=4     -- bcrypt's minimum cost keeps the suite fast
  ALLOWED_HOSTS       -- TestClient sends Host: testserver
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from typing import Optional

# CRITICAL: Set env before any api/auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')

import pytest
from fastapi.testclient import TestClient

from api.main import app, attach_services
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenService
from blog.store import PostStore
from core.config import get_settings
from core.database import create_db_engine

TEST_SECRET = "test-secret-key-that-is-at-least-32-characters"


# ---------------------------------------------------------------------------
# Unit fixtures -- one private in-memory database per test
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    eng = create_db_engine("sqlite://")
    yield eng
    eng.dispose()


@pytest.fixture
def user_store(engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def post_store(engine) -> PostStore:
    return PostStore(engine)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(TEST_SECRET, expire_seconds=3600)


@pytest.fixture
def auth_service(user_store, hasher, tokens) -> AuthService:
    return AuthService(user_store, hasher, tokens)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(engine):
    """Return an async context manager that replaces the real lifespan.

    Wires the test engine into app.state so TestClient routes see an
    isolated database rather than the configured one.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        attach_services(app, engine, get_settings())
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[TestClient, None, None]:
    """Yield a TestClient over the real FastAPI app with a fresh database.

    Module-scoped for speed: one database per test module. Tests create
    their own users with unique names so they do not depend on order.
    """
    db_name = request.module.__name__.replace(".", "_")
    engine = create_db_engine(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")
    app.router.lifespan_context = _patch_lifespan(engine)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    engine.dispose()


@pytest.fixture
def register_user(api_client: TestClient):
    """Return a helper that registers through the API.

    The helper returns {"id", "token", "headers"} for the new account.
    """

    def _register(username: str, password: str = "secret1", email: Optional[str] = None) -> dict:
        resp = api_client.post(
            "/api/v1/auth/register",
            json={"username": username, "email": email or f"{username}@example.com", "password": password},
        )
        assert resp.status_code == 201, f"register {username} failed: {resp.status_code} {resp.text}"
        data = resp.json()
        token = data["access_token"]
        return {"id": data["user"]["id"], "token": token, "headers": {"Authorization": f"Bearer {token}"}}

    return _register
