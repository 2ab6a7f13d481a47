"""Lending engine.

Provides functionality for:
- Borrowing one book at a time, due seven days later
- Returning books on time or late
- Three-day borrowing vetoes after late returns, lifted lazily
"""

from .manager import LendingEngine
from .schemas import LoanResponse, ReturnKind, ReturnOutcome, StatusSnapshot
from .state import (
    LOAN_PERIOD,
    VETO_PERIOD,
    Borrow,
    GiveBack,
    Late,
    LoanRecord,
    MemberState,
    OnTime,
    RefreshVeto,
    refresh_veto,
    transition,
)

__all__ = [
    "LendingEngine",
    "LoanResponse",
    "ReturnKind",
    "ReturnOutcome",
    "StatusSnapshot",
    "LOAN_PERIOD",
    "VETO_PERIOD",
    "Borrow",
    "GiveBack",
    "Late",
    "LoanRecord",
    "MemberState",
    "OnTime",
    "RefreshVeto",
    "refresh_veto",
    "transition",
]
