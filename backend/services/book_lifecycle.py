"""
Book lifecycle service.

Sequences validation, asset store calls and repository calls for creating,
reading, updating and deleting books. Every operation either returns a
result or raises a BookServiceError; unexpected faults are converted to
InternalError so nothing escapes untyped.

Asset replacement uploads the new asset and persists it before the old one
is removed, so a failed upload never leaves a record pointing at a deleted
asset.
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from domain.errors import (
    AssetRemovalError,
    AssetStoreError,
    AuthorizationError,
    BookServiceError,
    InternalError,
    NotFoundError,
    PersistenceError,
    UploadError,
    ValidationError,
)
from domain.models import Book, BookFields, UploadedFiles
from repositories import BooksRepository
from storage.asset_store import AssetStore, get_asset_store

logger = logging.getLogger(__name__)

ASSET_SLOTS = ("cover_image", "file")


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def principal_id(principal: Any) -> str:
    """Normalize a principal (User or bare id) to its identifier string."""
    return str(getattr(principal, "id", principal))


@contextmanager
def _typed_errors(fallback_message: str):
    """Let BookServiceErrors through; convert anything else to InternalError."""
    try:
        yield
    except BookServiceError:
        raise
    except Exception as exc:
        logger.exception("%s", fallback_message)
        raise InternalError(str(exc) or fallback_message) from exc


class BookService:
    """Book CRUD coordinated with the asset store."""

    def __init__(
        self,
        books_repo: Optional[BooksRepository] = None,
        asset_store: Optional[AssetStore] = None,
    ):
        self.books_repo = books_repo or BooksRepository()
        self._asset_store = asset_store

    @property
    def asset_store(self) -> AssetStore:
        if self._asset_store is None:
            self._asset_store = get_asset_store()
        return self._asset_store

    # ----------------------------------------
    # Asset helpers
    # ----------------------------------------

    def _upload_slots(self, slots: Dict[str, str]) -> Dict[str, str]:
        """
        Upload each slot's local file and return slot -> public URL.

        On the first failure the assets uploaded so far are removed again and
        UploadError is raised.
        """
        uploaded: Dict[str, str] = {}
        for slot, local_path in slots.items():
            try:
                stored = self.asset_store.upload(local_path)
            except AssetStoreError as exc:
                logger.warning("Upload of %s failed: %s", slot, exc)
                stored = None
            if not stored or not stored.public_url:
                self._discard(uploaded.values(), "upload of a sibling asset failed")
                raise UploadError("Error uploading cover image or file.")
            uploaded[slot] = stored.public_url
        return uploaded

    def _discard(self, urls: Iterable[str], reason: str) -> None:
        """Best-effort removal; failures are logged, not raised."""
        for url in urls:
            try:
                self.asset_store.remove(url)
            except Exception as exc:
                logger.warning("Could not remove asset %s (%s): %s", url, reason, exc)

    # ----------------------------------------
    # Operations
    # ----------------------------------------

    def create_book(
        self,
        session: Session,
        fields: BookFields,
        files: Optional[UploadedFiles],
        author_id: Any,
    ) -> Book:
        with _typed_errors("Error while creating book."):
            if any(_is_blank(v) for v in (fields.genre, fields.title, fields.description)):
                raise ValidationError("All fields are required.")
            if not files or not files.cover_image or not files.file:
                raise ValidationError("Cover image & file are required.")

            urls = self._upload_slots({"cover_image": files.cover_image, "file": files.file})

            book = Book(
                id=Book.generate_id(),
                title=fields.title.strip(),
                genre=fields.genre.strip(),
                description=fields.description.strip(),
                author_id=principal_id(author_id),
                cover_image=urls["cover_image"],
                file=urls["file"],
            )
            try:
                created = self.books_repo.create_book(session, book)
            except Exception:
                self._discard(urls.values(), "book could not be saved")
                raise
            if not created:
                self._discard(urls.values(), "book could not be saved")
                raise PersistenceError("Error creating book.")

            logger.info("Created book %s (%r) for author %s", created.id, created.title, created.author_id)
            return created

    def get_book(self, session: Session, book_id: str) -> Book:
        with _typed_errors("Error while getting book."):
            book = self.books_repo.get_book(session, book_id)
            if not book:
                raise NotFoundError("Book not found.")
            return book

    def list_books(self, session: Session) -> List[Book]:
        with _typed_errors("Error while listing books."):
            return self.books_repo.list_books(session)

    def update_book(
        self,
        session: Session,
        book_id: str,
        requester_id: Any,
        fields: BookFields,
        files: Optional[UploadedFiles] = None,
    ) -> Book:
        with _typed_errors("Error while updating book."):
            book = self.books_repo.get_book(session, book_id)
            if not book:
                raise NotFoundError("Book not found.")
            if principal_id(book.author_id) != principal_id(requester_id):
                raise AuthorizationError("You are not authorized to update this book.")

            changes: Dict[str, Any] = {}
            for name in ("genre", "title"):
                value = getattr(fields, name)
                if value is None:
                    continue
                if _is_blank(value):
                    raise ValidationError("All fields are required.")
                changes[name] = value.strip()

            # Branch on which slots were sent: both, cover only, file only, or neither.
            slots = {}
            if files is not None:
                slots = {slot: getattr(files, slot) for slot in ASSET_SLOTS if getattr(files, slot)}
            new_urls = self._upload_slots(slots)
            changes.update(new_urls)

            try:
                updated = self.books_repo.update_book(session, book_id, changes)
            except Exception:
                self._discard(new_urls.values(), "book could not be updated")
                raise
            if not updated:
                self._discard(new_urls.values(), "book could not be updated")
                raise PersistenceError("Error updating book.")

            stale = [getattr(book, slot) for slot in new_urls if getattr(book, slot) != new_urls[slot]]
            self._discard(stale, "replaced by a new upload")

            logger.info("Updated book %s (%s)", book_id, ", ".join(sorted(changes)) or "no changes")
            return updated

    def delete_book(self, session: Session, book_id: str, requester_id: Any) -> None:
        with _typed_errors("Error while deleting book."):
            book = self.books_repo.get_book(session, book_id)
            if not book:
                raise NotFoundError("Book not found.")
            if principal_id(book.author_id) != principal_id(requester_id):
                raise AuthorizationError("You are not authorized to delete this book.")

            for url in (book.cover_image, book.file):
                try:
                    self.asset_store.remove(url)
                except AssetStoreError as exc:
                    logger.error("Failed to remove asset %s of book %s: %s", url, book_id, exc)
                    raise AssetRemovalError("Error removing book assets.") from exc

            if not self.books_repo.delete_book(session, book_id):
                raise PersistenceError("Error deleting book.")
            logger.info("Deleted book %s", book_id)
