"""Book catalog.

Owns the book records and answers lookup and availability queries.
Books are only ever added at initialization.
"""

from .manager import Catalog
from .seed import SEED_BOOKS

__all__ = ["Catalog", "SEED_BOOKS"]
