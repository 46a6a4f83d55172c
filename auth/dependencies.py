"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The bearer token is read from the Authorization header and verified with the
TokenService stored on app.state at startup. A verified token is turned into a
Subject (id, username) without a database round trip -- possession of a valid,
unexpired token is the proof of identity. Whether the account still exists is
decided by the operation that needs it (profile fetch, post creation).

try_get_current_subject() is the soft variant (returns None on failure).
get_current_subject() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: no imports from api/ or blog/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request

from auth.models import Subject
from auth.tokens import TokenService


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def try_get_current_subject(request: Request) -> Optional[Subject]:
    """Authenticate the request via its Bearer token.

    Returns the Subject on success, None on any failure (missing header, bad
    scheme, bad signature, expired, missing claims). Never raises.
    """
    token = _bearer_token(request)
    if token is None:
        return None
    tokens: TokenService = request.app.state.tokens
    claims = tokens.verify(token)
    if claims is None:
        return None
    return Subject(id=claims.sub, username=claims.username)


def get_current_subject(request: Request) -> Subject:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(subject: Subject = Depends(get_current_subject)): ...
    """
    subject = try_get_current_subject(request)
    if subject is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return subject
