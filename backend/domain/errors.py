"""
Typed errors raised by the book services.

Each error carries the HTTP status it maps to; the API layer renders them
through a single exception handler.
"""


class BookServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Internal server error."

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(BookServiceError):
    status_code = 400
    default_message = "All fields are required."


class AuthenticationError(BookServiceError):
    status_code = 401
    default_message = "Unauthorized."


class AuthorizationError(BookServiceError):
    status_code = 403
    default_message = "You are not authorized to delete this book."


class NotFoundError(BookServiceError):
    status_code = 404
    default_message = "Book not found."


class UploadError(BookServiceError):
    status_code = 500
    default_message = "Error uploading cover image or file."


class AssetRemovalError(BookServiceError):
    status_code = 500
    default_message = "Error removing book assets."


class PersistenceError(BookServiceError):
    status_code = 500
    default_message = "Error saving book."


class InternalError(BookServiceError):
    status_code = 500


class AssetStoreError(Exception):
    """Raised by asset store clients when an upload or removal fails."""
