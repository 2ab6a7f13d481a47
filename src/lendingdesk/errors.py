"""Exceptions raised by the lending desk."""

from datetime import date


class LendingDeskError(Exception):
    """Base exception."""


# *** rule violations (expected, shown to the user, never mutate state) ***


class LendingRuleError(LendingDeskError):
    """Raised when a borrow or return request breaks a lending rule."""


class VetoActive(LendingRuleError):
    """Raised when a vetoed user tries to borrow.

    Args:
        until   Last day of the veto (inclusive)
    """

    def __init__(self, until: date):
        super().__init__(f"Borrowing is suspended until {until.isoformat()}")
        self.until = until


class AlreadyHasLoan(LendingRuleError):
    """Raised when a user with an active loan tries to borrow again."""

    def __init__(self):
        super().__init__("You already have a book on loan. Return it first.")


class BookNotFound(LendingRuleError):
    """Raised when a book code is not in the catalog."""

    def __init__(self, code: str):
        super().__init__(f"No book with code '{code}'")
        self.code = code


class BookUnavailable(LendingRuleError):
    """Raised when the requested book is already on loan."""

    def __init__(self, code: str):
        super().__init__(f"Book '{code}' is not available")
        self.code = code


class NoActiveLoan(LendingRuleError):
    """Raised when a user without a loan tries to return a book."""

    def __init__(self):
        super().__init__("You have no book on loan to return.")


# *** accounts ***


class UserNotFound(LendingDeskError):
    """Raised when an identity number does not belong to a registered user."""

    def __init__(self, identity_number: str):
        super().__init__(f"No user with identity number '{identity_number}'")
        self.identity_number = identity_number


class RegistrationError(LendingDeskError):
    """Raised when a registration is rejected (duplicate id or username)."""


class AuthenticationError(LendingDeskError):
    """Raised when a username/password pair does not match any user."""


# *** internal faults ***


class InconsistentStateError(LendingDeskError):
    """Raised when stored records contradict each other.

    An active loan that points at a book code missing from the catalog is
    a bug, not a user mistake, and must not be silently repaired.
    """
