"""
core/errors.py -- Business error taxonomy shared by auth/ and blog/.

Every error here is a deterministic function of current state: retrying the
same call with the same input fails the same way. The API layer renders them
with one exception handler (api/main.py), so stores and services raise these
instead of HTTPException and stay transport-agnostic.

Malformed input that slipped past request validation is not part of this
taxonomy. Stores raise ValueError for it, which the API treats as a 500.
"""

from __future__ import annotations

from typing import Optional


class InkwellError(Exception):
    """Base class for recoverable business errors."""

    code: str = "error"
    status_code: int = 400
    default_message: str = "Request failed."

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ConflictError(InkwellError):
    """Username or email already taken."""

    code = "conflict"
    status_code = 409
    default_message = "Username or email already exists."


class UnauthorizedError(InkwellError):
    """Missing, invalid or expired token, or bad login credentials.

    Unknown username and wrong password both produce this error with the same
    message so callers cannot enumerate accounts.
    """

    code = "unauthorized"
    status_code = 401
    default_message = "Authentication required."


class ForbiddenError(InkwellError):
    """Authenticated, but not the owner of the resource."""

    code = "forbidden"
    status_code = 403
    default_message = "You do not own this resource."


class NotFoundError(InkwellError):
    code = "not_found"
    status_code = 404
    default_message = "Resource not found."
