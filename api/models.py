"""
API request and response models for Inkwell REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in core/models.py, which
own the internal domain representation. Route handlers map between the two.

Request models are where field validation happens (lengths, email syntax).
Stores and services trust that it already ran.

No response model has a password field. User-shaped responses are built from
AuthorSummary / UserProfile / AccountInfo, none of which carry the hash.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from auth.models import AuthResult
from core.models import AuthorSummary, PostView, UserProfile

# bcrypt only accepts the first 72 bytes of a password, and bcrypt 5 raises
# above that. Characters are capped here too; bytes are checked below.
_PASSWORD_MAX = 72


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > _PASSWORD_MAX:
        raise ValueError(f"Password must be at most {_PASSWORD_MAX} bytes when UTF-8 encoded.")
    return value


# ---------------------------------------------------------------------------
# Auth -- requests
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register.

    Username and email are stripped; the password is kept byte for byte so
    LoginRequest can check exactly what was hashed.
    """

    username: str = Field(min_length=3, max_length=20)
    email: EmailStr
    password: str = Field(min_length=6, max_length=_PASSWORD_MAX)

    @field_validator("username", "email", mode="before")
    @classmethod
    def strip_identity(cls, value):
        return _strip(value)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=_PASSWORD_MAX)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value):
        return _strip(value)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


# ---------------------------------------------------------------------------
# Users / posts -- requests
# ---------------------------------------------------------------------------


class UserUpdate(BaseModel):
    """Request body for PATCH /api/v1/users/{user_id}. All fields optional."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    username: Optional[str] = Field(default=None, min_length=3, max_length=20)
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(default=None, max_length=255)


class PostCreate(BaseModel):
    """Request body for POST /api/v1/posts.

    There is no author field: the author is always the authenticated caller.
    """

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=3, max_length=200)
    content: str = Field(min_length=10)
    published: bool = False


class PostUpdate(BaseModel):
    """Request body for PATCH /api/v1/posts/{post_id}. All fields optional."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=3, max_length=200)
    content: Optional[str] = Field(default=None, min_length=10)
    published: Optional[bool] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    username: str
    email: str


class AuthResponse(BaseModel):
    """Response body for register and login."""

    model_config = ConfigDict(frozen=True)

    message: str
    user: AccountResponse
    access_token: str
    token_type: str = "bearer"  # noqa: S105 # nosec B105 -- OAuth token type, not a password
    expires_in: int

    @classmethod
    def from_result(cls, message: str, result: AuthResult) -> "AuthResponse":
        return cls(
            message=message,
            user=AccountResponse.model_validate(result.user),
            access_token=result.access_token,
            expires_in=result.expires_in,
        )


class AuthorResponse(BaseModel):
    """Public user fields. Used for user lists and as the author of a post."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    username: str
    email: str
    bio: Optional[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_summary(cls, summary: AuthorSummary) -> "AuthorResponse":
        return cls.model_validate(summary)


class PostSummaryResponse(BaseModel):
    """A post without its author -- nested inside a user profile."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    title: str
    content: str
    published: bool
    author_id: int
    created_at: str
    updated_at: str


class PostResponse(PostSummaryResponse):
    """A post with its author's public fields."""

    author: AuthorResponse

    @classmethod
    def from_view(cls, view: PostView) -> "PostResponse":
        return cls.model_validate(view)


class UserProfileResponse(AuthorResponse):
    """A user's public fields with the posts they authored."""

    posts: list[PostSummaryResponse] = Field(default_factory=list)

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserProfileResponse":
        return cls.model_validate(profile)


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
