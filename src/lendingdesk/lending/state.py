"""Loan and veto state machine.

A member moves between FREE, HAS_LOAN and VETOED:

    FREE --borrow--> HAS_LOAN --give back on time--> FREE
                     HAS_LOAN --give back late-----> VETOED --veto expires--> FREE

``transition`` takes the current ``MemberState`` and an action and returns
the next state together with the outcome. It never mutates its input and
raises a ``LendingRuleError`` before producing any new state, so callers
can persist the result or discard it as a unit.

Dates are whole calendar days. "After" is strict everywhere: a book
returned on its due date is on time, and a veto ending on day D still
blocks borrowing on day D.
"""

from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Optional, Union

from ..errors import (
    AlreadyHasLoan,
    BookNotFound,
    BookUnavailable,
    NoActiveLoan,
    VetoActive,
)

LOAN_PERIOD = timedelta(days=7)
VETO_PERIOD = timedelta(days=3)


@dataclass(frozen=True)
class LoanRecord:
    """An active loan."""

    book_code: str
    borrower_id: str
    start_date: date
    due_date: date

    @classmethod
    def open(cls, book_code: str, borrower_id: str, today: date) -> "LoanRecord":
        """Start a loan today, due one loan period later."""
        return cls(
            book_code=book_code,
            borrower_id=borrower_id,
            start_date=today,
            due_date=today + LOAN_PERIOD,
        )

    def is_late(self, return_date: date) -> bool:
        """Check if returning on ``return_date`` is past the due date."""
        return return_date > self.due_date


@dataclass(frozen=True)
class MemberState:
    """Lending state of one user."""

    identity_number: str
    loan_history_count: int = 0
    active_loan: Optional[LoanRecord] = None
    vetoed: bool = False
    veto_end_date: Optional[date] = None

    @property
    def has_active_loan(self) -> bool:
        return self.active_loan is not None


# Actions


@dataclass(frozen=True)
class Borrow:
    """Request to borrow a book.

    The caller resolves the code against the catalog beforehand, so the
    state machine stays free of storage concerns.
    """

    book_code: str
    book_exists: bool
    book_on_loan: bool


@dataclass(frozen=True)
class GiveBack:
    """Request to return the active loan."""


@dataclass(frozen=True)
class RefreshVeto:
    """Lift an expired veto, nothing else."""


Action = Union[Borrow, GiveBack, RefreshVeto]


# Outcomes


@dataclass(frozen=True)
class OnTime:
    """Book came back on or before its due date."""


@dataclass(frozen=True)
class Late:
    """Book came back after its due date; borrowing is vetoed."""

    veto_until: date


ReturnResult = Union[OnTime, Late]
Outcome = Union[LoanRecord, OnTime, Late, None]


def refresh_veto(state: MemberState, today: date) -> MemberState:
    """Clear the veto if it ended before ``today``."""
    if state.vetoed and state.veto_end_date is not None and today > state.veto_end_date:
        return replace(state, vetoed=False, veto_end_date=None)
    return state


def _borrow(state: MemberState, action: Borrow, today: date) -> tuple[MemberState, LoanRecord]:
    state = refresh_veto(state, today)

    # Order matters: the first failing check is the one reported
    if state.vetoed:
        raise VetoActive(until=state.veto_end_date)
    if state.has_active_loan:
        raise AlreadyHasLoan()
    if not action.book_exists:
        raise BookNotFound(action.book_code)
    if action.book_on_loan:
        raise BookUnavailable(action.book_code)

    loan = LoanRecord.open(action.book_code, state.identity_number, today)
    return (
        replace(
            state,
            active_loan=loan,
            loan_history_count=state.loan_history_count + 1,
        ),
        loan,
    )


def _give_back(state: MemberState, today: date) -> tuple[MemberState, ReturnResult]:
    if state.active_loan is None:
        raise NoActiveLoan()

    if state.active_loan.is_late(today):
        veto_until = today + VETO_PERIOD
        return (
            replace(state, active_loan=None, vetoed=True, veto_end_date=veto_until),
            Late(veto_until=veto_until),
        )

    # On time: an old veto, expired or not, is left as it is
    return replace(state, active_loan=None), OnTime()


def transition(
    state: MemberState, action: Action, today: date
) -> tuple[MemberState, Outcome]:
    """Apply ``action`` on ``today``.

    Args:
        state: Current member state
        action: Borrow, GiveBack or RefreshVeto
        today: Date of the request

    Returns:
        (next state, outcome) where the outcome is the new ``LoanRecord``
        for Borrow, ``OnTime``/``Late`` for GiveBack and None for RefreshVeto

    Raises:
        LendingRuleError: If the request breaks a lending rule
    """
    if isinstance(action, Borrow):
        return _borrow(state, action, today)
    if isinstance(action, GiveBack):
        return _give_back(state, today)
    if isinstance(action, RefreshVeto):
        return refresh_veto(state, today), None
    raise TypeError(f"Unknown action: {action!r}")
