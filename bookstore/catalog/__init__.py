"""
Catalog package for the bookstore.

Holds the ``Book`` schema, the in-memory ``Catalog`` store that owns
per-title stock, and the REST routes under ``/api/catalog`` (imported by
``bookstore.main``).
"""

from .schemas import Book, Category  # noqa: F401
from .store import Catalog  # noqa: F401
