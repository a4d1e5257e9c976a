"""Auth API router: POST /auth/signup, POST /auth/login."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.dependencies import get_auth_service
from app.application.auth_service import AuthService
from app.domain.schemas.user import AuthResponse, Credentials, UserResponse

router = APIRouter()


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(
    body: Credentials,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Register a new user with the default role and return an access token."""
    user, token = await auth_service.signup(body.email, body.password)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: Credentials,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    user, token = await auth_service.login(body.email, body.password)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)
