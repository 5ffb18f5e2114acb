"""
Session-scoped shopping cart.

A cart only remembers ``book id -> quantity`` in insertion order. Titles
and prices are looked up in the catalogue every time the cart is shown
or totalled, so a price change made after a book was added is reflected
straight away, and a book delisted in the meantime is reported as
``BookNotFound`` instead of being priced from a stale copy.

Stock is not checked here; that is the checkout engine's job.
"""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Dict, List, Tuple

from ..catalog.store import Catalog
from ..errors import InvalidQuantity
from ..models import CartItem

ZERO = Decimal("0.00")


class Cart:
    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog
        self._lines: Dict[str, int] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    def locked(self) -> threading.RLock:
        """The cart's lock, for callers that need several steps to be atomic."""
        return self._lock

    def add_item(self, book_id: str, quantity: int = 1) -> int:
        """Add ``quantity`` copies of a book and return the line's new quantity."""
        if quantity < 1:
            raise InvalidQuantity(quantity, book_id)
        # Raises BookNotFound for unknown ids.
        self._catalog.get(book_id)
        with self._lock:
            self._lines[book_id] = self._lines.get(book_id, 0) + quantity
            return self._lines[book_id]

    def remove_item(self, book_id: str) -> None:
        with self._lock:
            self._lines.pop(book_id, None)

    def set_quantity(self, book_id: str, quantity: int) -> None:
        if quantity < 0:
            raise InvalidQuantity(quantity, book_id)
        with self._lock:
            if book_id not in self._lines:
                return
            if quantity == 0:
                del self._lines[book_id]
            else:
                self._lines[book_id] = quantity

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def lines(self) -> List[Tuple[str, int]]:
        with self._lock:
            return list(self._lines.items())

    def snapshot(self) -> List[CartItem]:
        items: List[CartItem] = []
        for book_id, quantity in self.lines():
            book = self._catalog.get(book_id)
            items.append(CartItem(book=book, quantity=quantity, line_total=book.price * quantity))
        return items

    def total(self) -> Decimal:
        return sum((item.line_total for item in self.snapshot()), ZERO)
