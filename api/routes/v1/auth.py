"""
api/routes/v1/auth.py -- Registration, login and profile endpoints.

Routes:
  POST /api/v1/auth/register  -- create account; returns user + JWT (201)
  POST /api/v1/auth/login     -- password login; returns user + JWT
  GET  /api/v1/auth/profile   -- current user with their posts (requires auth)

Security:
  AuthService.login() equalizes timing between unknown user and wrong password.
  Do NOT inline get_by_username() + verify() here -- that re-introduces the
  timing difference.
  Cache-Control: no-store on every response that carries a token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import AuthResponse, LoginRequest, RegisterRequest, UserProfileResponse
from auth.dependencies import get_current_subject
from auth.models import Subject
from auth.service import AuthService

# Auth policy:
# - POST /api/v1/auth/register: public
# - POST /api/v1/auth/login:    public
# - GET  /api/v1/auth/profile:  requires auth (get_current_subject)
router = APIRouter()


def _token_response(status_code: int, body: AuthResponse) -> JSONResponse:
    resp = JSONResponse(status_code=status_code, content=body.model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and log it in.

    409 if the username or email is already taken. The password hash is never
    part of the response.
    """
    service: AuthService = request.app.state.auth_service
    result = service.register(body.username, str(body.email), body.password)
    return _token_response(201, AuthResponse.from_result("Registration successful", result))


@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password.

    Returns the same 401 for wrong username and wrong password to avoid
    leaking username existence.
    """
    service: AuthService = request.app.state.auth_service
    result = service.login(body.username, body.password)
    return _token_response(200, AuthResponse.from_result("Login successful", result))


@router.get("/auth/profile", response_model=UserProfileResponse)
def profile(request: Request, subject: Subject = Depends(get_current_subject)) -> UserProfileResponse:
    """Return the authenticated user's account with their posts.

    404 if the account was deleted after the token was issued.
    """
    service: AuthService = request.app.state.auth_service
    return UserProfileResponse.from_profile(service.get_profile(subject.id))
