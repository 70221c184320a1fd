"""
Books API routes.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel

from api.auth import get_current_user
from api.responses import ApiResponse, api_response
from db import SessionLocal
from domain.models import Book, BookFields, User
from services.book_lifecycle import BookService
from services.uploads import stage_uploads

router = APIRouter()
book_service = BookService()


class BookResponse(BaseModel):
    id: str
    title: str
    genre: str
    description: str
    author_id: str
    cover_image: str
    file: str
    created_at: str
    updated_at: str


def book_to_response(book: Book) -> BookResponse:
    """Convert domain Book to API response."""
    return BookResponse(
        id=book.id,
        title=book.title,
        genre=book.genre,
        description=book.description,
        author_id=book.author_id,
        cover_image=book.cover_image,
        file=book.file,
        created_at=book.created_at.isoformat(),
        updated_at=book.updated_at.isoformat(),
    )


@router.post("", status_code=201, response_model=ApiResponse[BookResponse])
def create_book(
    title: Optional[str] = Form(None),
    genre: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    file: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
):
    """Create a book from form fields plus a cover image and a book file."""
    fields = BookFields(title=title, genre=genre, description=description)
    with stage_uploads(cover_image, file) as files, SessionLocal() as session:
        book = book_service.create_book(session, fields, files, current_user.id)
    return api_response(201, book_to_response(book), "Book created successfully.")


@router.get("", response_model=ApiResponse[List[BookResponse]])
def list_books():
    """List all books."""
    with SessionLocal() as session:
        books = book_service.list_books(session)
    return api_response(200, [book_to_response(b) for b in books], "Books found successfully.")


@router.get("/{book_id}", response_model=ApiResponse[BookResponse])
def get_book(book_id: str):
    """Get a book by ID."""
    with SessionLocal() as session:
        book = book_service.get_book(session, book_id)
    return api_response(200, book_to_response(book), "Book found successfully.")


@router.patch("/{book_id}", response_model=ApiResponse[BookResponse])
def update_book(
    book_id: str,
    title: Optional[str] = Form(None),
    genre: Optional[str] = Form(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    file: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
):
    """Update title/genre and optionally replace the cover image and/or file."""
    fields = BookFields(title=title, genre=genre)
    with stage_uploads(cover_image, file) as files, SessionLocal() as session:
        book = book_service.update_book(session, book_id, current_user.id, fields, files)
    return api_response(200, book_to_response(book), "Book updated successfully.")


@router.delete("/{book_id}", response_model=ApiResponse)
def delete_book(book_id: str, current_user: User = Depends(get_current_user)):
    """Delete a book and both of its assets. Only the author may delete."""
    with SessionLocal() as session:
        book_service.delete_book(session, book_id, current_user.id)
    return api_response(200, None, "Book deleted successfully.")
