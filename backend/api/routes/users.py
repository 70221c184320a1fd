"""
User API routes: registration, login and the current principal.
"""
import logging
import secrets
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.auth import get_current_user
from api.responses import ApiResponse, api_response
from db import SessionLocal
from domain.errors import AuthenticationError, ValidationError
from domain.models import User
from repositories import UsersRepository
from services.passwords import hash_password, verify_password

router = APIRouter()
users_repo = UsersRepository()
logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class UserCreate(BaseModel):
    name: str
    email: str
    password: str


class UserLogin(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    created_at: str


class AuthenticatedUserResponse(UserResponse):
    access_token: str


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        created_at=user.created_at.isoformat(),
    )


def _with_token(user: User) -> AuthenticatedUserResponse:
    return AuthenticatedUserResponse(**user_to_response(user).model_dump(), access_token=user.access_token)


@router.post("/register", status_code=201, response_model=ApiResponse[AuthenticatedUserResponse])
def register(data: UserCreate):
    """Register a user and issue its access token."""
    name = data.name.strip()
    email = data.email.strip().lower()
    if not name or not email or not data.password:
        raise ValidationError("All fields are required.")
    if "@" not in email:
        raise ValidationError("Invalid email address.")
    if len(data.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

    with SessionLocal() as session:
        if users_repo.get_by_email(session, email):
            raise ValidationError("Email already registered.")
        user = users_repo.create_user(
            session,
            User(
                id=User.generate_id(),
                name=name,
                email=email,
                access_token=secrets.token_urlsafe(32),
                password_hash=hash_password(data.password),
            ),
        )
    logger.info("Registered user %s", user.id)
    return api_response(201, _with_token(user), "User registered successfully.")


@router.post("/login", response_model=ApiResponse[AuthenticatedUserResponse])
def login(data: UserLogin):
    """Exchange email and password for the user's access token."""
    email = data.email.strip().lower()
    if not email or not data.password:
        raise ValidationError("All fields are required.")

    with SessionLocal() as session:
        user = users_repo.get_by_email(session, email)
    if not user or not verify_password(data.password, user.password_hash):
        logger.info("Failed login for %s", email)
        raise AuthenticationError("Invalid email or password.")
    return api_response(200, _with_token(user), "Login successful.")


@router.get("/me", response_model=ApiResponse[UserResponse])
async def me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user."""
    return api_response(200, user_to_response(current_user), "User found successfully.")
