"""
In-memory catalogue store with per-title stock.

``Catalog`` is the only owner of ``Book`` records. It is built
explicitly (usually through ``Catalog.from_json`` on the bundled sample
dataset) and handed to the cart and checkout code, so every test or
application instance works against its own store.

Locking
-------
Each book id has its own re-entrant lock. ``reserve_stock``,
``restock``, ``set_price`` and ``remove`` hold the lock of the book they
touch, so a read-then-decrement can never interleave with another one on
the same title while unrelated titles stay independent. A book id keeps
its lock for the life of the catalogue, across ``remove`` and a later
``add`` of the same id. A separate
short-lived lock protects the id -> record and id -> lock maps; it is
never held while waiting on a book lock. ``hold()`` takes several book
locks at once in ascending id order, which is what the checkout commit
phase uses.
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import ExitStack, contextmanager
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from pydantic import ValidationError

from ..errors import BookNotFound, DuplicateBook, InsufficientStock, InvalidPrice, InvalidQuantity
from .schemas import Book, Category

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _load_sample_books(path: Path) -> List[Book]:
    """Load books from a JSON file.

    The file holds a list of objects with the ``Book`` fields. A missing
    or unreadable file yields an empty list; entries that fail
    validation are skipped. Both cases are logged.
    """
    books: List[Book] = []
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Could not load catalogue data from %s: %s", path, exc)
        return books
    if not isinstance(raw, list):
        logger.warning("Catalogue data in %s is not a list, ignoring it", path)
        return books
    for entry in raw:
        try:
            books.append(Book.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping malformed catalogue entry %r: %s", entry, exc)
    return books


def _norm(s: Optional[str]) -> str:
    """Lowercase and strip a string; ``None`` becomes the empty string."""
    return (s or "").strip().lower()


class Catalog:
    """Authoritative store of book records and their stock."""

    def __init__(self, books: Optional[Iterable[Book]] = None) -> None:
        self._books: Dict[str, Book] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._lock = threading.Lock()
        for book in books or []:
            self.add(book)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "Catalog":
        catalog = cls(_load_sample_books(Path(path)))
        logger.info("Loaded %d books from %s", len(catalog), path)
        return catalog

    def __len__(self) -> int:
        with self._lock:
            return len(self._books)

    def __contains__(self, book_id: object) -> bool:
        with self._lock:
            return book_id in self._books

    # ------------------------------------------------------------------
    # Read paths

    def get(self, book_id: str) -> Book:
        with self._lock:
            book = self._books.get(book_id)
        if book is None:
            raise BookNotFound(book_id)
        return book

    def list_books(self) -> List[Book]:
        with self._lock:
            return list(self._books.values())

    def list_by_category(self, category: Union[Category, str]) -> List[Book]:
        category = Category(category)
        return [b for b in self.list_books() if b.category == category]

    def search(self, q: Optional[str] = None, category: Optional[Union[Category, str]] = None) -> List[Book]:
        """Filter the catalogue by category and a free-text query.

        The query is matched case-insensitively against title and author.
        Results keep catalogue order.
        """
        items = self.list_by_category(category) if category else self.list_books()
        nq = _norm(q)
        if nq:
            items = [b for b in items if nq in f"{_norm(b.title)} {_norm(b.author)}"]
        return items

    # ------------------------------------------------------------------
    # Mutators

    def add(self, book: Book) -> Book:
        book = book.model_copy(update={"price": book.price.quantize(CENT)})
        with self._lock:
            if book.id in self._books:
                raise DuplicateBook(book.id)
            self._books[book.id] = book
            # A re-added id keeps the lock it had before it was removed.
            self._locks.setdefault(book.id, threading.RLock())
        logger.debug("Added book %s (%s)", book.id, book.title)
        return book

    def remove(self, book_id: str) -> Book:
        with self._book_lock(book_id):
            with self._lock:
                book = self._books.pop(book_id, None)
        if book is None:
            raise BookNotFound(book_id)
        logger.info("Removed book %s from the catalogue", book_id)
        return book

    def reserve_stock(self, book_id: str, quantity: int) -> int:
        """Take ``quantity`` copies out of stock and return what is left.

        Raises ``InsufficientStock`` without touching the record when
        fewer than ``quantity`` copies are available.
        """
        if quantity < 1:
            raise InvalidQuantity(quantity, book_id)
        with self._book_lock(book_id):
            book = self.get(book_id)
            if book.stock < quantity:
                raise InsufficientStock(book_id, quantity, book.stock)
            updated = self._replace(book, stock=book.stock - quantity)
        logger.debug("Reserved %d of %s, %d left", quantity, book_id, updated.stock)
        return updated.stock

    def restock(self, book_id: str, delta: int) -> Book:
        with self._book_lock(book_id):
            book = self.get(book_id)
            new_stock = book.stock + delta
            if new_stock < 0:
                raise InsufficientStock(book_id, -delta, book.stock)
            updated = self._replace(book, stock=new_stock)
        logger.info("Restocked %s by %+d, stock now %d", book_id, delta, updated.stock)
        return updated

    def set_price(self, book_id: str, price: Union[Decimal, int, float, str]) -> Book:
        try:
            value = Decimal(str(price))
        except InvalidOperation:
            raise InvalidPrice(f"Invalid price {price!r}", book_id=book_id) from None
        if not value.is_finite() or value < 0:
            raise InvalidPrice(f"Price must be a non-negative amount, got {price!r}", book_id=book_id)
        value = value.quantize(CENT)
        with self._book_lock(book_id):
            updated = self._replace(self.get(book_id), price=value)
        logger.info("Price of %s set to %s", book_id, value)
        return updated

    @contextmanager
    def hold(self, book_ids: Iterable[str]) -> Iterator[None]:
        """Hold the locks of several books, taken in ascending id order."""
        with ExitStack() as stack:
            for book_id in sorted(set(book_ids)):
                stack.enter_context(self._book_lock(book_id))
            yield

    # ------------------------------------------------------------------
    # Internals

    def _book_lock(self, book_id: str) -> threading.RLock:
        with self._lock:
            lock = self._locks.get(book_id)
        if lock is None:
            raise BookNotFound(book_id)
        return lock

    def _replace(self, book: Book, **changes) -> Book:
        # Caller holds the book lock.
        updated = book.model_copy(update=changes)
        with self._lock:
            if book.id not in self._books:
                raise BookNotFound(book.id)
            self._books[book.id] = updated
        return updated
