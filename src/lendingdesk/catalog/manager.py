"""Catalog manager for book lookups."""

import logging
from typing import Iterable, Optional

from sqlalchemy import func, select

from ..db.models import Book
from ..db.schemas import BookCreate
from ..db.sqlite import Database, get_db

_log = logging.getLogger(__name__)


class Catalog:
    """Stores and exposes book records."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize catalog.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def seed(self, books: Iterable[BookCreate]) -> int:
        """Load the initial inventory.

        Codes already present are skipped, so seeding twice is harmless.

        Args:
            books: Catalog entries in display order

        Returns:
            Number of books inserted
        """
        inserted = 0
        seen: set[str] = set()
        with self.db.get_session() as session:
            position = session.execute(select(func.count()).select_from(Book)).scalar() or 0

            for data in books:
                if data.code in seen or session.get(Book, data.code) is not None:
                    continue
                seen.add(data.code)
                session.add(
                    Book(
                        code=data.code,
                        title=data.title,
                        author=data.author,
                        position=position,
                    )
                )
                position += 1
                inserted += 1

        _log.info("Seeded %d book(s) into the catalog", inserted)
        return inserted

    def find_by_code(self, code: str) -> Optional[Book]:
        """Get a book by its code.

        Args:
            code: Book code, matched exactly

        Returns:
            Book or None
        """
        with self.db.get_session() as session:
            book = session.execute(
                select(Book).where(Book.code == code)
            ).unique().scalar_one_or_none()
            if book:
                session.expunge(book)
            _log.debug("Lookup %s -> %s", code, book)
            return book

    def list_all(self) -> list[Book]:
        """List all books in creation order.

        The returned objects are detached snapshots; changing them has no
        effect on the stored records.
        """
        with self.db.get_session() as session:
            stmt = select(Book).order_by(Book.position)
            books = session.execute(stmt).unique().scalars().all()
            for book in books:
                session.expunge(book)
            return list(books)

    def is_available(self, code: str) -> bool:
        """Check if a book exists and nobody holds it."""
        book = self.find_by_code(code)
        return book is not None and not book.on_loan
