"""Database module for SQLite storage."""

from .models import Base, Book, Loan, User
from .schemas import BookCreate, BookResponse, BookStatus, UserCreate, UserResponse
from .sqlite import Database, get_db, reset_db

__all__ = [
    "Base",
    "Book",
    "Loan",
    "User",
    "BookCreate",
    "BookResponse",
    "BookStatus",
    "UserCreate",
    "UserResponse",
    "Database",
    "get_db",
    "reset_db",
]
