"""
Request principal resolution.

Clients send the access token issued at registration as
`Authorization: Bearer <token>`.
"""
from typing import Optional

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from db import get_session
from domain.errors import AuthenticationError
from domain.models import User
from repositories import UsersRepository

bearer_scheme = HTTPBearer(auto_error=False)
users_repo = UsersRepository()


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    session: Session = Depends(get_session),
) -> User:
    """FastAPI dependency returning the authenticated user."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Unauthorized.")
    user = users_repo.get_by_token(session, credentials.credentials)
    if not user:
        raise AuthenticationError("Unauthorized.")
    return user
