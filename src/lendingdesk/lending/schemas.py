"""Pydantic schemas for lending results."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ReturnKind(str, Enum):
    """How a return was classified."""

    ON_TIME = "on_time"
    LATE = "late"


class LoanResponse(BaseModel):
    """Schema for a successful borrow."""

    book_code: str
    book_title: str
    borrower_id: str
    start_date: date
    due_date: date
    loan_history_count: int


class ReturnOutcome(BaseModel):
    """Schema for a processed return."""

    kind: ReturnKind
    book_code: str
    book_title: str
    due_date: date
    returned_on: date
    veto_until: Optional[date] = None

    @property
    def is_late(self) -> bool:
        """Check if the return triggered a veto."""
        return self.kind == ReturnKind.LATE


class StatusSnapshot(BaseModel):
    """Read-only view of a user's lending state."""

    identity_number: str
    vetoed: bool
    veto_until: Optional[date] = None
    has_active_loan: bool
    book_code: Optional[str] = None
    book_title: Optional[str] = None
    due_date: Optional[date] = None
    loan_history_count: int = 0
