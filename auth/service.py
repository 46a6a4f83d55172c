"""
auth/service.py -- Registration, login, and account flows.

AuthService composes the credential store, the password hasher and the token
service. It owns the business rules; the routes in api/routes/v1/ only map
HTTP in and out.

Security design decisions:
  Login does not leak which half of the credential pair was wrong. An unknown
  username still runs one bcrypt verification (PasswordHasher.dummy_verify) so
  the response time matches a wrong password, and both paths raise the same
  UnauthorizedError.

  Registration does one lookup over username OR email for a friendly early
  Conflict, but the unique indexes are what actually guarantee uniqueness. Two
  racing registrations both pass the lookup; the store turns the loser's
  IntegrityError into ConflictError.

  Account updates and deletion follow the same ownership rule as posts: only
  the subject may touch their own account.

Layer rule: no imports from api/ or blog/.
"""

from __future__ import annotations

import logging

from auth.models import AccountInfo, AuthResult
from auth.passwords import PasswordHasher
from auth.store import UserStore
from auth.tokens import TokenService
from core.assembler import author_summary
from core.errors import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError
from core.models import AuthorSummary, User, UserProfile

logger = logging.getLogger("inkwell.auth")


def _user_not_found(user_id: int) -> NotFoundError:
    return NotFoundError(f"User with ID {user_id} not found")


class AuthService:
    """Register, log in, and manage accounts.

    Usage:
        service = AuthService(UserStore(engine), PasswordHasher(12), TokenService(secret))
        result = service.register("alice", "alice@x.com", "secret1")
        result = service.login("alice", "secret1")
        profile = service.get_profile(result.user.id)
    """

    def __init__(self, users: UserStore, hasher: PasswordHasher, tokens: TokenService) -> None:
        self.users = users
        self.hasher = hasher
        self.tokens = tokens

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def register(self, username: str, email: str, password: str) -> AuthResult:
        """Create an account and return its public fields plus a fresh token.

        Raises ConflictError if the username or the email is already taken.
        """
        if self.users.find_by_username_or_email(username, email) is not None:
            raise ConflictError()
        user_id = self.users.create_user(
            User(username=username, email=email, hashed_password=self.hasher.hash(password))
        )
        logger.info("Registered user %d (%s)", user_id, username)
        return self._issue(user_id, username, email)

    def login(self, username: str, password: str) -> AuthResult:
        """Verify credentials and return a fresh token.

        Raises UnauthorizedError for an unknown username and for a wrong
        password alike.
        """
        user = self.users.get_by_username(username)
        if user is None:
            # Equalize timing -- do NOT return early before running bcrypt
            self.hasher.dummy_verify(password)
            logger.warning("Failed login for unknown username")
            raise UnauthorizedError("Invalid credentials")
        if not self.hasher.verify(password, user.hashed_password):
            logger.warning("Failed login for user %d", user.id)
            raise UnauthorizedError("Invalid credentials")
        return self._issue(user.id, user.username, user.email)

    def get_profile(self, subject_id: int) -> UserProfile:
        """Return the subject's account with their posts.

        Raises NotFoundError if the account was deleted while the token was
        still valid.
        """
        profile = self.users.get_profile(subject_id)
        if profile is None:
            raise _user_not_found(subject_id)
        return profile

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def list_users(self) -> list[AuthorSummary]:
        return [author_summary(u) for u in self.users.list_users()]

    def get_user(self, user_id: int) -> UserProfile:
        return self.get_profile(user_id)

    def update_profile(self, user_id: int, fields: dict, requester_id: int) -> UserProfile:
        """Partially update username / email / bio on the requester's own account.

        Raises NotFoundError, ForbiddenError (not the account owner) or
        ConflictError (new username / email belongs to someone else).
        """
        self._require_owner(user_id, requester_id)
        if not self.users.update_user(user_id, fields):
            raise _user_not_found(user_id)
        return self.get_profile(user_id)

    def delete_account(self, user_id: int, requester_id: int) -> None:
        """Delete the requester's own account and, by cascade, all their posts."""
        self._require_owner(user_id, requester_id)
        if not self.users.delete_user(user_id):
            raise _user_not_found(user_id)
        logger.info("Deleted user %d and their posts", user_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_owner(self, user_id: int, requester_id: int) -> None:
        if self.users.get_by_id(user_id) is None:
            raise _user_not_found(user_id)
        if user_id != requester_id:
            raise ForbiddenError("You can only modify your own account")

    def _issue(self, user_id: int, username: str, email: str) -> AuthResult:
        return AuthResult(
            user=AccountInfo(id=user_id, username=username, email=email),
            access_token=self.tokens.issue(user_id, username),
            expires_in=self.tokens.expire_seconds,
        )
