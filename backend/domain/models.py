"""
Core domain models for the digital library.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
import uuid


@dataclass
class User:
    """
    A registered library administrator.

    The access token is issued at registration (and returned again on login)
    and presented as a bearer token; the user it resolves to is the request
    principal. Only a salted hash of the password is kept.
    """
    id: str
    name: str
    email: str
    access_token: str
    created_at: datetime = field(default_factory=datetime.utcnow)
    password_hash: Optional[str] = None

    @staticmethod
    def generate_id() -> str:
        return str(uuid.uuid4())


@dataclass
class Book:
    """
    A book in the catalog.

    cover_image and file are public URLs of assets held by the asset store.
    author_id is fixed at creation.
    """
    id: str
    title: str
    genre: str
    description: str
    author_id: str
    cover_image: str
    file: str
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @staticmethod
    def generate_id() -> str:
        return str(uuid.uuid4())


@dataclass
class BookFields:
    """Text fields submitted with a create or update request."""
    title: Optional[str] = None
    genre: Optional[str] = None
    description: Optional[str] = None


@dataclass
class UploadedFiles:
    """
    The two file slots of a book request.

    Each slot is a local path that is only valid while the request is handled.
    """
    cover_image: Optional[str] = None
    file: Optional[str] = None


@dataclass(frozen=True)
class StoredAsset:
    """An asset held by the asset store."""
    public_url: str
    public_id: Optional[str] = None
    resource_type: Optional[str] = None
