"""
auth/models.py -- Dataclasses for authentication results.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in core/models.py -- dataclasses own domain shape; services and routes do
the work.

Layer rule: no imports from api/ or blog/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenClaims:
    """The decoded, verified contents of a bearer token.

    sub is the user id. JWT requires the sub claim to be a string on the wire;
    TokenService converts it back to int before building this object.
    iat / exp are POSIX timestamps.
    """

    sub: int
    username: str
    iat: int
    exp: int


@dataclass(frozen=True)
class Subject:
    """The identity a caller proved with a verified token."""

    id: int
    username: str


@dataclass(frozen=True)
class AccountInfo:
    """Non-sensitive user fields returned from register and login."""

    id: int
    username: str
    email: str


@dataclass(frozen=True)
class AuthResult:
    user: AccountInfo
    access_token: str
    expires_in: int
