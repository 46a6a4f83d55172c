"""
auth/tokens.py -- Signed bearer tokens (JWT).

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with the server secret and
       carry sub (user id), username, iat and exp. Verification returns None
       on any failure -- the route layer turns that into a 401 and never tells
       the caller whether the signature, the expiry or the claims were wrong.

  Secret: passed into TokenService at construction. api/main.py reads it once
       from core.config.get_settings() during startup; nothing in this module
       reads configuration on its own. Rotating the secret invalidates every
       token issued under the old one. There is no revocation list.

  sub claim: RFC 7519 requires a string, and python-jose rejects a non-string
       sub on decode. The user id is written as str(id) and converted back to
       int in verify(). A sub that is not an integer string is invalid.

Layer rule: no imports from api/ or blog/.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from auth.models import TokenClaims

_REQUIRED_CLAIMS = ("sub", "username", "iat", "exp")


class TokenService:
    """Issue and verify signed, expiring bearer tokens.

    Usage:
        tokens = TokenService(secret_key=settings.secret_key, expire_seconds=3600)
        token = tokens.issue(42, "alice")
        claims = tokens.verify(token)   # TokenClaims(sub=42, username="alice", ...)
        tokens.verify("garbage")        # None
    """

    ALGORITHM = "HS256"

    def __init__(self, secret_key: str, expire_seconds: int = 3600, algorithm: str = ALGORITHM) -> None:
        if not secret_key:
            raise ValueError("Token signing secret cannot be empty")
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds
        self._algorithm = algorithm

    def issue(self, subject_id: int, username: str) -> str:
        """Encode a signed JWT for the given subject."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(subject_id),
            "username": username,
            "iat": now,
            "exp": now + timedelta(seconds=self.expire_seconds),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> Optional[TokenClaims]:
        """Decode and verify a JWT. Returns the claims or None on any failure.

        Returning None (rather than raising) keeps the caller simple: any invalid
        token is treated as unauthenticated.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError:
            return None
        if any(claim not in payload for claim in _REQUIRED_CLAIMS):
            return None
        try:
            subject_id = int(payload["sub"])
        except (TypeError, ValueError):
            return None
        username = payload["username"]
        if not isinstance(username, str):
            return None
        return TokenClaims(
            sub=subject_id,
            username=username,
            iat=int(payload["iat"]),
            exp=int(payload["exp"]),
        )
