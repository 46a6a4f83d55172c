"""
api/routes/v1/users.py -- Public user directory and self-service account management.

Routes:
  GET    /users            -- list users (public fields only)
  GET    /users/{user_id}  -- one user with their posts
  PATCH  /users/{user_id}  -- update own username / email / bio (requires auth, self only)
  DELETE /users/{user_id}  -- delete own account and all its posts (requires auth, self only)

Ownership: PATCH and DELETE pass the subject id to AuthService, which returns
403 when it differs from user_id. There is no admin override.
"""

from fastapi import APIRouter, Depends, Request

from api.models import AuthorResponse, MessageResponse, UserProfileResponse, UserUpdate
from auth.dependencies import get_current_subject
from auth.models import Subject
from auth.service import AuthService

# Auth policy:
# - GET    /api/v1/users:            public
# - GET    /api/v1/users/{user_id}:  public
# - PATCH  /api/v1/users/{user_id}:  requires auth + self
# - DELETE /api/v1/users/{user_id}:  requires auth + self
router = APIRouter()


@router.get("/users", response_model=list[AuthorResponse])
def list_users(request: Request) -> list[AuthorResponse]:
    service: AuthService = request.app.state.auth_service
    return [AuthorResponse.from_summary(u) for u in service.list_users()]


@router.get("/users/{user_id}", response_model=UserProfileResponse)
def get_user(request: Request, user_id: int) -> UserProfileResponse:
    """Return one user with all posts they authored."""
    service: AuthService = request.app.state.auth_service
    return UserProfileResponse.from_profile(service.get_user(user_id))


@router.patch("/users/{user_id}", response_model=UserProfileResponse)
def update_user(
    request: Request,
    user_id: int,
    body: UserUpdate,
    subject: Subject = Depends(get_current_subject),
) -> UserProfileResponse:
    """Partially update the caller's own profile.

    Only fields present in the request body are applied. 409 if the new
    username or email belongs to another account.
    """
    service: AuthService = request.app.state.auth_service
    fields = body.model_dump(exclude_unset=True)
    if "email" in fields and fields["email"] is not None:
        fields["email"] = str(fields["email"])
    return UserProfileResponse.from_profile(service.update_profile(user_id, fields, subject.id))


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    request: Request,
    user_id: int,
    subject: Subject = Depends(get_current_subject),
) -> MessageResponse:
    """Delete the caller's own account. Their posts are deleted with it."""
    service: AuthService = request.app.state.auth_service
    service.delete_account(user_id, subject.id)
    return MessageResponse(message=f"User with ID {user_id} has been deleted")
