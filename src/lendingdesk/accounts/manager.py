"""Account manager for registration and login."""

import logging
from typing import Optional

from sqlalchemy import func, select

from ..db.models import User
from ..db.schemas import UserCreate
from ..db.sqlite import Database, get_db
from ..errors import AuthenticationError, RegistrationError

_log = logging.getLogger(__name__)

DEMO_ACCOUNT = UserCreate(
    full_name="Usuario Admin",
    identity_number="0000",
    birth_date="01/01/2000",
    age=25,
    gender="N/A",
    email="admin@test.com",
    username="admin",
    password="admin",
)


class AccountManager:
    """Manages user accounts."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize account manager.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def register(self, data: UserCreate) -> User:
        """Register a new user.

        Args:
            data: Registration data

        Returns:
            Created user

        Raises:
            RegistrationError: If the identity number or username is taken
        """
        with self.db.get_session() as session:
            if session.get(User, data.identity_number) is not None:
                raise RegistrationError(
                    f"Identity number '{data.identity_number}' is already registered"
                )

            taken = session.execute(
                select(User).where(func.lower(User.username) == data.username.lower())
            ).unique().scalar_one_or_none()
            if taken:
                raise RegistrationError(f"Username '{data.username}' is already taken")

            user = User(
                identity_number=data.identity_number,
                full_name=data.full_name,
                birth_date=data.birth_date,
                age=data.age,
                gender=data.gender,
                email=data.email,
                username=data.username,
                password=data.password,
                loan_history_count=0,
                vetoed=False,
                veto_end_date=None,
                active_loan=None,
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            session.expunge(user)

        _log.info("Registered user %s (%s)", user.identity_number, user.username)
        return user

    def authenticate(self, username: str, password: str) -> User:
        """Find the user matching a username/password pair.

        The username is matched case-insensitively, the password exactly.

        Raises:
            AuthenticationError: If no user matches
        """
        with self.db.get_session() as session:
            user = session.execute(
                select(User).where(func.lower(User.username) == username.strip().lower())
            ).unique().scalar_one_or_none()

            if user is None or user.password != password:
                _log.info("Failed login for '%s'", username)
                raise AuthenticationError("Incorrect username or password.")

            session.expunge(user)
            _log.debug("User %s logged in", user.identity_number)
            return user

    def get_user(self, identity_number: str) -> Optional[User]:
        """Get a user by identity number.

        Args:
            identity_number: Identity number

        Returns:
            User or None
        """
        with self.db.get_session() as session:
            user = session.get(User, identity_number)
            if user:
                session.expunge(user)
            return user

    def list_users(self) -> list[User]:
        """List all users ordered by username."""
        with self.db.get_session() as session:
            users = session.execute(
                select(User).order_by(User.username)
            ).unique().scalars().all()
            for u in users:
                session.expunge(u)
            return list(users)

    def seed_demo_account(self) -> bool:
        """Create the demo account unless it exists.

        Returns:
            True if created
        """
        if self.get_user(DEMO_ACCOUNT.identity_number) is not None:
            return False
        self.register(DEMO_ACCOUNT)
        return True
