from .books import BooksRepository
from .users import UsersRepository
from . import models

__all__ = ["BooksRepository", "UsersRepository", "models"]
