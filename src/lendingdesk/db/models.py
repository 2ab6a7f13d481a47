"""SQLAlchemy ORM models for the lending desk database.

Tables:
- books: Catalog records (fixed seed set)
- users: Registered accounts with veto state
- loans: Active loans only; a row is deleted when the book comes back

A book's "on loan" state is not stored. It is derived from the presence
of a loan row for its code, so the two can never disagree.
"""

from datetime import date, datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from .schemas import BookStatus


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string for primary keys."""
    return str(uuid4())


class Book(Base):
    """Book model - one copy of a title in the inventory."""

    __tablename__ = "books"

    code: Mapped[str] = mapped_column(String(20), primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(500), nullable=False, index=True)

    # Creation order, for listing
    position: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    created_at: Mapped[str] = mapped_column(
        String(26), default=lambda: datetime.now(timezone.utc).isoformat()
    )

    # Relationships
    loan: Mapped[Optional["Loan"]] = relationship(
        "Loan", uselist=False, viewonly=True, lazy="joined"
    )

    def __repr__(self) -> str:
        return f"<Book(code={self.code}, title='{self.title}', on_loan={self.on_loan})>"

    @property
    def on_loan(self) -> bool:
        """Check if some user currently holds this book."""
        return self.loan is not None

    @property
    def status(self) -> str:
        """Availability label for the inventory table."""
        return BookStatus.ON_LOAN.value if self.on_loan else BookStatus.AVAILABLE.value


class User(Base):
    """User model - a registered library member."""

    __tablename__ = "users"

    identity_number: Mapped[str] = mapped_column(String(50), primary_key=True)

    # Profile
    full_name: Mapped[str] = mapped_column(String(200), default="")
    birth_date: Mapped[str] = mapped_column(String(20), default="")  # as entered
    age: Mapped[int] = mapped_column(Integer, default=0)
    gender: Mapped[str] = mapped_column(String(50), default="")
    email: Mapped[str] = mapped_column(String(200), default="")

    # Credentials
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(200), nullable=False)

    # Lending state
    loan_history_count: Mapped[int] = mapped_column(Integer, default=0)
    vetoed: Mapped[bool] = mapped_column(Boolean, default=False)
    veto_end_date: Mapped[Optional[str]] = mapped_column(String(10))  # ISO date

    created_at: Mapped[str] = mapped_column(
        String(26), default=lambda: datetime.now(timezone.utc).isoformat()
    )

    # Relationships
    active_loan: Mapped[Optional["Loan"]] = relationship(
        "Loan",
        uselist=False,
        back_populates="borrower",
        cascade="all, delete-orphan",
        lazy="joined",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.identity_number}, username='{self.username}')>"

    @property
    def has_active_loan(self) -> bool:
        """Check if the user holds a book."""
        return self.active_loan is not None

    @property
    def veto_until(self) -> Optional[date]:
        """Veto end date as a date (None when not vetoed)."""
        if not self.veto_end_date:
            return None
        return date.fromisoformat(self.veto_end_date)


class Loan(Base):
    """Loan model - the single in-progress borrowing of a user."""

    __tablename__ = "loans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    # One active loan per book and per user
    book_code: Mapped[str] = mapped_column(
        String(20), ForeignKey("books.code"), nullable=False, unique=True
    )
    borrower_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("users.identity_number"), nullable=False, unique=True
    )

    # Dates
    start_date: Mapped[str] = mapped_column(String(10), nullable=False)  # ISO date
    due_date: Mapped[str] = mapped_column(String(10), nullable=False)  # ISO date

    # Relationships
    borrower: Mapped["User"] = relationship("User", back_populates="active_loan")

    def __repr__(self) -> str:
        return f"<Loan(id={self.id}, book_code={self.book_code}, due={self.due_date})>"
