"""
User repository backed by SQLAlchemy/SQLite.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from domain.models import User
from repositories.models import UserORM


def _user_from_orm(orm: UserORM) -> User:
    return User(
        id=orm.id,
        name=orm.name,
        email=orm.email,
        access_token=orm.access_token,
        password_hash=orm.password_hash,
        created_at=orm.created_at,
    )


class UsersRepository:
    """Lookups and registration for users."""

    def get_by_email(self, session: Session, email: str) -> Optional[User]:
        orm = session.query(UserORM).filter(UserORM.email == email).first()
        return _user_from_orm(orm) if orm else None

    def get_by_token(self, session: Session, token: str) -> Optional[User]:
        orm = session.query(UserORM).filter(UserORM.access_token == token).first()
        return _user_from_orm(orm) if orm else None

    def create_user(self, session: Session, user: User) -> User:
        orm = UserORM(
            id=user.id,
            name=user.name,
            email=user.email,
            access_token=user.access_token,
            password_hash=user.password_hash,
            created_at=user.created_at or datetime.utcnow(),
        )
        session.add(orm)
        session.commit()
        session.refresh(orm)
        return _user_from_orm(orm)
