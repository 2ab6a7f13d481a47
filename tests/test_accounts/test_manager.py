"""Tests for AccountManager."""

import pytest
from pydantic import ValidationError

from lendingdesk.accounts import DEMO_ACCOUNT
from lendingdesk.db.schemas import UserCreate, UserResponse
from lendingdesk.errors import AuthenticationError, RegistrationError


class TestRegister:
    """Tests for registration."""

    def test_register(self, accounts, sample_user_data):
        """New users start with no loan, no veto and no history."""
        user = accounts.register(sample_user_data)

        assert user.identity_number == "1001"
        assert user.username == "laura"
        assert user.full_name == "Laura Gómez"
        assert user.age == 26
        assert user.loan_history_count == 0
        assert not user.has_active_loan
        assert not user.vetoed
        assert user.veto_until is None

    def test_duplicate_identity(self, accounts, member, sample_user_data):
        """Identity numbers are unique."""
        data = sample_user_data.model_copy(update={"username": "other"})
        with pytest.raises(RegistrationError, match="already registered"):
            accounts.register(data)

    def test_duplicate_username_case_insensitive(self, accounts, member):
        """Usernames are unique regardless of case."""
        data = UserCreate(identity_number="3003", age=40, username="LAURA", password="x")
        with pytest.raises(RegistrationError, match="already taken"):
            accounts.register(data)

    @pytest.mark.parametrize("field", ["identity_number", "username"])
    def test_blank_required_fields(self, field):
        """Identity number and username cannot be empty."""
        values = {"identity_number": "1", "age": 1, "username": "u", "password": "p"}
        values[field] = "   "
        with pytest.raises(ValidationError):
            UserCreate(**values)

    def test_age_must_be_number(self):
        """Age must parse as an integer."""
        with pytest.raises(ValidationError):
            UserCreate(identity_number="1", age="twenty", username="u", password="p")

    def test_user_response_hides_password(self, member):
        """Responses never carry credentials."""
        response = UserResponse.model_validate(member)
        assert "password" not in response.model_dump()
        assert response.has_active_loan is False


class TestAuthenticate:
    """Tests for login."""

    def test_login(self, accounts, member):
        """Matching credentials return the user."""
        user = accounts.authenticate("laura", "s3cret")
        assert user.identity_number == member.identity_number

    def test_username_case_insensitive(self, accounts, member):
        """Usernames match regardless of case."""
        assert accounts.authenticate("Laura", "s3cret").identity_number == "1001"

    def test_password_exact(self, accounts, member):
        """Passwords must match exactly."""
        with pytest.raises(AuthenticationError):
            accounts.authenticate("laura", "S3CRET")

    def test_unknown_user(self, accounts):
        """Unknown usernames fail."""
        with pytest.raises(AuthenticationError):
            accounts.authenticate("ghost", "x")


class TestLookup:
    """Tests for user lookups and seeding."""

    def test_get_user(self, accounts, member):
        """Users are found by identity number."""
        assert accounts.get_user("1001").username == "laura"
        assert accounts.get_user("9999") is None

    def test_list_users(self, accounts, member, other_member):
        """Users are listed by username."""
        assert [u.username for u in accounts.list_users()] == ["andres", "laura"]

    def test_seed_demo_account(self, accounts):
        """The demo account is created once."""
        assert accounts.seed_demo_account() is True
        assert accounts.seed_demo_account() is False

        user = accounts.authenticate("admin", "admin")
        assert user.identity_number == DEMO_ACCOUNT.identity_number
        assert user.full_name == "Usuario Admin"
