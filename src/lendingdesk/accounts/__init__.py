"""User accounts: registration and credential lookup."""

from .manager import DEMO_ACCOUNT, AccountManager

__all__ = ["AccountManager", "DEMO_ACCOUNT"]
