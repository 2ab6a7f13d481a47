"""Pytest configuration and shared fixtures.

This module provides fixtures for testing the lending desk, including
in-memory databases, a seeded catalog and registered users.
"""

import os
from datetime import date
from typing import Generator

import pytest

from lendingdesk.accounts import AccountManager
from lendingdesk.catalog import SEED_BOOKS, Catalog
from lendingdesk.config import reset_config
from lendingdesk.db.models import User
from lendingdesk.db.schemas import UserCreate
from lendingdesk.db.sqlite import Database, reset_db
from lendingdesk.lending import LendingEngine


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture(scope="function")
def db() -> Generator[Database, None, None]:
    """Create an in-memory database for testing."""
    reset_db()
    reset_config()

    database = Database(":memory:")
    database.create_tables()
    yield database

    reset_db()


@pytest.fixture
def catalog(db: Database) -> Catalog:
    """Create a Catalog holding the seed inventory."""
    catalog = Catalog(db)
    catalog.seed(SEED_BOOKS)
    return catalog


@pytest.fixture
def accounts(db: Database) -> AccountManager:
    """Create an AccountManager on the test database."""
    return AccountManager(db)


@pytest.fixture
def engine(db: Database, catalog: Catalog) -> LendingEngine:
    """Create a LendingEngine on the seeded catalog."""
    return LendingEngine(db, catalog)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_user_data() -> UserCreate:
    """Registration data for a regular member."""
    return UserCreate(
        full_name="Laura Gómez",
        identity_number="1001",
        birth_date="12/03/1999",
        age=26,
        gender="F",
        email="laura@example.com",
        username="laura",
        password="s3cret",
    )


@pytest.fixture
def member(accounts: AccountManager, sample_user_data: UserCreate) -> User:
    """A registered member with no loan and no veto."""
    return accounts.register(sample_user_data)


@pytest.fixture
def other_member(accounts: AccountManager) -> User:
    """A second registered member."""
    return accounts.register(
        UserCreate(
            full_name="Andrés Ruiz",
            identity_number="2002",
            age=31,
            username="andres",
            password="pw",
        )
    )


@pytest.fixture
def jan_1() -> date:
    """Reference loan date used in the scenarios."""
    return date(2024, 1, 1)


# ============================================================================
# CLI Testing Fixtures
# ============================================================================


@pytest.fixture
def cli_env() -> Generator[None, None, None]:
    """Point the CLI at a fresh in-memory database."""
    reset_db()
    reset_config()
    os.environ["LENDINGDESK_DB_PATH"] = ":memory:"
    os.environ["LENDINGDESK_SEED"] = "1"

    yield

    reset_db()
    reset_config()
    for key in ("LENDINGDESK_DB_PATH", "LENDINGDESK_SEED", "LENDINGDESK_TODAY"):
        os.environ.pop(key, None)


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner."""
    from typer.testing import CliRunner
    return CliRunner()
