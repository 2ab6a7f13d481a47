"""Lending engine for borrow, return and veto operations."""

import logging
import threading
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..catalog.manager import Catalog
from ..db.models import Loan, User
from ..db.schemas import UserResponse
from ..db.sqlite import Database, get_db
from ..errors import (
    AlreadyHasLoan,
    BookUnavailable,
    InconsistentStateError,
    LendingRuleError,
    UserNotFound,
)
from .schemas import LoanResponse, ReturnKind, ReturnOutcome, StatusSnapshot
from .state import (
    Borrow,
    GiveBack,
    Late,
    LoanRecord,
    MemberState,
    RefreshVeto,
    transition,
)

_log = logging.getLogger(__name__)


class LendingEngine:
    """Applies the borrow/return/veto rules to stored users and books.

    Every operation reads the user's state, runs it through ``transition``
    and writes the result back in a single session. Operations are
    serialized by an engine-wide lock, so a front end sharing one engine
    between threads never sees a half-applied borrow or return.
    """

    def __init__(self, db: Optional[Database] = None, catalog: Optional[Catalog] = None):
        """Initialize lending engine.

        Args:
            db: Database instance
            catalog: Catalog used for book lookups (defaults to one on ``db``)
        """
        self.db = db or get_db()
        self.catalog = catalog or Catalog(self.db)
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # State loading and saving
    # -------------------------------------------------------------------------

    @staticmethod
    def _get_user(session: Session, identity_number: str) -> User:
        user = session.execute(
            select(User).where(User.identity_number == identity_number)
        ).unique().scalar_one_or_none()
        if user is None:
            raise UserNotFound(identity_number)
        return user

    @staticmethod
    def _to_state(user: User) -> MemberState:
        loan = None
        if user.active_loan is not None:
            loan = LoanRecord(
                book_code=user.active_loan.book_code,
                borrower_id=user.active_loan.borrower_id,
                start_date=date.fromisoformat(user.active_loan.start_date),
                due_date=date.fromisoformat(user.active_loan.due_date),
            )
        return MemberState(
            identity_number=user.identity_number,
            loan_history_count=user.loan_history_count or 0,
            active_loan=loan,
            vetoed=bool(user.vetoed),
            veto_end_date=user.veto_until,
        )

    def _read_state(self, identity_number: str) -> MemberState:
        with self.db.get_session() as session:
            return self._to_state(self._get_user(session, identity_number))

    def _write_state(self, state: MemberState) -> None:
        with self.db.get_session() as session:
            user = self._get_user(session, state.identity_number)

            user.loan_history_count = state.loan_history_count
            user.vetoed = state.vetoed
            user.veto_end_date = (
                state.veto_end_date.isoformat() if state.veto_end_date else None
            )

            if state.active_loan is None:
                # delete-orphan cascade removes the loan row
                user.active_loan = None
            elif user.active_loan is None:
                record = state.active_loan
                user.active_loan = Loan(
                    book_code=record.book_code,
                    borrower_id=record.borrower_id,
                    start_date=record.start_date.isoformat(),
                    due_date=record.due_date.isoformat(),
                )
            elif user.active_loan.book_code != state.active_loan.book_code:
                # Stored loan changed since the state was read
                raise AlreadyHasLoan()

    def _save_refresh(self, state: MemberState, today: date) -> MemberState:
        refreshed, _ = transition(state, RefreshVeto(), today)
        if refreshed != state:
            self._write_state(refreshed)
            _log.info("Veto for %s expired, lifted on %s", state.identity_number, today)
        return refreshed

    def _book_title(self, code: str, identity_number: str) -> str:
        book = self.catalog.find_by_code(code)
        if book is None:
            _log.error(
                "Active loan of %s references unknown book code %s", identity_number, code
            )
            raise InconsistentStateError(
                f"Loan of user '{identity_number}' references missing book '{code}'"
            )
        return book.title

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def refresh_veto_status(self, identity_number: str, today: date) -> UserResponse:
        """Lift the user's veto if it ended before ``today``.

        Args:
            identity_number: User identity number
            today: Current date

        Returns:
            UserResponse with the user's record after the check
        """
        with self._lock:
            self._save_refresh(self._read_state(identity_number), today)
            with self.db.get_session() as session:
                return UserResponse.model_validate(self._get_user(session, identity_number))

    def borrow(self, identity_number: str, book_code: str, today: date) -> LoanResponse:
        """Lend a book to a user.

        Checks, in order: veto, existing loan, unknown code, book on loan.

        Args:
            identity_number: Borrower identity number
            book_code: Code of the requested book
            today: Loan start date

        Returns:
            LoanResponse with the due date

        Raises:
            VetoActive, AlreadyHasLoan, BookNotFound, BookUnavailable
        """
        with self._lock:
            state = self._read_state(identity_number)
            book = self.catalog.find_by_code(book_code)
            action = Borrow(
                book_code=book_code,
                book_exists=book is not None,
                book_on_loan=book is not None and book.on_loan,
            )

            try:
                new_state, loan = transition(state, action, today)
            except LendingRuleError as e:
                self._save_refresh(state, today)
                _log.info("Borrow of %s by %s refused: %s", book_code, identity_number, e)
                raise

            try:
                self._write_state(new_state)
            except IntegrityError as e:
                # Another engine on the same database got there first
                _log.warning("Concurrent borrow of %s by %s: %s", book_code, identity_number, e)
                if "loans.borrower_id" in str(e.orig):
                    raise AlreadyHasLoan() from e
                raise BookUnavailable(book_code) from e

            _log.info(
                "Lent %s to %s on %s, due %s",
                book_code,
                identity_number,
                loan.start_date,
                loan.due_date,
            )
            return LoanResponse(
                book_code=loan.book_code,
                book_title=book.title,
                borrower_id=loan.borrower_id,
                start_date=loan.start_date,
                due_date=loan.due_date,
                loan_history_count=new_state.loan_history_count,
            )

    def give_back(self, identity_number: str, today: date) -> ReturnOutcome:
        """Process the return of the user's active loan.

        A return strictly after the due date vetoes the user for three days
        from ``today``.

        Args:
            identity_number: Borrower identity number
            today: Return date

        Returns:
            ReturnOutcome, on time or late with the veto end date

        Raises:
            NoActiveLoan: If the user holds no book
            InconsistentStateError: If the loan points at a missing book
        """
        with self._lock:
            state = self._read_state(identity_number)
            new_state, result = transition(state, GiveBack(), today)

            loan = state.active_loan
            title = self._book_title(loan.book_code, identity_number)

            self._write_state(new_state)

            if isinstance(result, Late):
                _log.info(
                    "Late return of %s by %s (due %s), vetoed until %s",
                    loan.book_code,
                    identity_number,
                    loan.due_date,
                    result.veto_until,
                )
                return ReturnOutcome(
                    kind=ReturnKind.LATE,
                    book_code=loan.book_code,
                    book_title=title,
                    due_date=loan.due_date,
                    returned_on=today,
                    veto_until=result.veto_until,
                )

            _log.info("On-time return of %s by %s", loan.book_code, identity_number)
            return ReturnOutcome(
                kind=ReturnKind.ON_TIME,
                book_code=loan.book_code,
                book_title=title,
                due_date=loan.due_date,
                returned_on=today,
            )

    def describe_status(self, identity_number: str, today: date) -> StatusSnapshot:
        """Report veto and loan state, lifting an expired veto first.

        Args:
            identity_number: User identity number
            today: Current date

        Returns:
            StatusSnapshot
        """
        with self._lock:
            state = self._save_refresh(self._read_state(identity_number), today)

            snapshot = StatusSnapshot(
                identity_number=identity_number,
                vetoed=state.vetoed,
                veto_until=state.veto_end_date if state.vetoed else None,
                has_active_loan=state.has_active_loan,
                loan_history_count=state.loan_history_count,
            )
            if state.active_loan is not None:
                snapshot.book_code = state.active_loan.book_code
                snapshot.book_title = self._book_title(
                    state.active_loan.book_code, identity_number
                )
                snapshot.due_date = state.active_loan.due_date
            return snapshot

    def active_book_code(self, identity_number: str) -> Optional[str]:
        """Code of the book the user holds, or None."""
        with self._lock:
            state = self._read_state(identity_number)
        return state.active_loan.book_code if state.active_loan else None
