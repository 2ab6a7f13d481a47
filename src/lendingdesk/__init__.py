"""Lending desk for a small library.

Tracks the book inventory, registered users and their loans, enforcing
one active loan per user and a short borrowing veto after late returns.
"""

__version__ = "0.1.0"
