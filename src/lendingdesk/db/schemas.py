"""Pydantic schemas for data validation.

These schemas describe books and users as they cross the boundary between
the managers and the presentation layer.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class BookStatus(str, Enum):
    """Availability of a book."""

    AVAILABLE = "Available"
    ON_LOAN = "On loan"


# ============================================================================
# Books
# ============================================================================


class BookCreate(BaseModel):
    """Schema for a catalog entry at initialization."""

    code: str = Field(..., min_length=1, max_length=20, description="Unique book code")
    title: str = Field(..., min_length=1, description="Book title")
    author: str = Field(..., min_length=1, description="Author")


class BookResponse(BaseModel):
    """Schema for book responses."""

    code: str
    title: str
    author: str
    on_loan: bool
    status: BookStatus

    model_config = {"from_attributes": True}


# ============================================================================
# Users
# ============================================================================


class UserCreate(BaseModel):
    """Schema for registering a user."""

    full_name: str = ""
    identity_number: str = Field(..., min_length=1, max_length=50)
    birth_date: str = Field("", description="Birth date as entered (DD/MM/YYYY)")
    age: int = Field(..., ge=0, le=150)
    gender: str = ""
    email: str = ""
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., max_length=200)

    @field_validator("identity_number", "username")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Reject values made only of whitespace."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class UserResponse(BaseModel):
    """Schema for user responses (credentials excluded)."""

    identity_number: str
    full_name: str
    birth_date: str
    age: int
    gender: str
    email: str
    username: str
    loan_history_count: int
    has_active_loan: bool
    vetoed: bool
    veto_until: Optional[date] = None

    model_config = {"from_attributes": True}
