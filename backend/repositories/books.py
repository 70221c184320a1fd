"""
Book repository backed by SQLAlchemy/SQLite.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from domain.models import Book
from repositories.models import BookORM

# Columns a caller may change after creation; author_id is immutable.
UPDATABLE_FIELDS = ("title", "genre", "description", "cover_image", "file")


def _book_from_orm(orm: BookORM) -> Book:
    return Book(
        id=orm.id,
        title=orm.title,
        genre=orm.genre,
        description=orm.description,
        author_id=orm.author_id,
        cover_image=orm.cover_image,
        file=orm.file,
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


class BooksRepository:
    """CRUD operations for books."""

    def list_books(self, session: Session) -> List[Book]:
        books = session.query(BookORM).order_by(BookORM.created_at.asc()).all()
        return [_book_from_orm(b) for b in books]

    def get_book(self, session: Session, book_id: str) -> Optional[Book]:
        orm = session.get(BookORM, book_id)
        if not orm:
            return None
        return _book_from_orm(orm)

    def create_book(self, session: Session, book: Book) -> Book:
        now = datetime.utcnow()
        orm = BookORM(
            id=book.id,
            title=book.title,
            genre=book.genre,
            description=book.description,
            author_id=book.author_id,
            cover_image=book.cover_image,
            file=book.file,
            created_at=book.created_at or now,
            updated_at=book.updated_at or now,
        )
        session.add(orm)
        session.commit()
        session.refresh(orm)
        return _book_from_orm(orm)

    def update_book(
        self, session: Session, book_id: str, changes: Dict[str, Any]
    ) -> Optional[Book]:
        """Apply a partial update. Returns None if the book does not exist."""
        orm = session.get(BookORM, book_id)
        if not orm:
            return None
        for key, value in changes.items():
            if key not in UPDATABLE_FIELDS:
                raise ValueError(f"Field cannot be updated: {key}")
            setattr(orm, key, value)
        orm.updated_at = datetime.utcnow()
        session.add(orm)
        session.commit()
        session.refresh(orm)
        return _book_from_orm(orm)

    def delete_book(self, session: Session, book_id: str) -> bool:
        orm = session.get(BookORM, book_id)
        if not orm:
            return False
        session.delete(orm)
        session.commit()
        return True
