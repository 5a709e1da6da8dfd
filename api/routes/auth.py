"""
Auth API Routes.

Endpoints:
- POST /auth/signup - Register a candidate or interviewer
- POST /auth/login - Exchange credentials for a session token
- GET /auth/me - Current user
"""

from fastapi import APIRouter, Depends, HTTPException

from api.auth import any_user, get_auth_service
from api.models.auth_schemas import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
    UserResponse,
)
from api.models.common import ErrorResponse
from models.user import User
from services.auth_service import AuthService
from services.exceptions import (
    DuplicateEmailError,
    InterviewValidationError,
    InvalidCredentialsError,
)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    responses={400: {"model": ErrorResponse, "description": "Missing field, unknown role or duplicate email"}},
)
def signup(request: SignupRequest, auth_service: AuthService = Depends(get_auth_service)):
    """Register a new user. Role defaults to `candidate`."""
    try:
        user = auth_service.signup(
            name=request.name,
            email=request.email,
            password=request.password,
            role=request.role.value if request.role else None,
        )
    except (DuplicateEmailError, InterviewValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SignupResponse(message="Signup successful", user=UserResponse.model_validate(user))


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
def login(request: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    """
    Log in and receive a bearer token.

    **Returns:**
    - `token`: send as `Authorization: Bearer <token>`; valid for one hour by default
    - `user`: the authenticated user
    """
    try:
        user = auth_service.login(request.email, request.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return LoginResponse(token=auth_service.issue_token(user), user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse, responses={401: {"model": ErrorResponse}})
def me(user: User = Depends(any_user)):
    return UserResponse.model_validate(user)
