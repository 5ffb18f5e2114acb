"""
Error types raised by the inventory, cart and checkout code.

Every error carries a short ``reason`` code. The checkout engine copies
these codes into the problem list of a rejected checkout, and the HTTP
layer maps each class to a status code (see ``STATUS_CODES``).
"""

from __future__ import annotations

from typing import Dict, Optional, Type


class BookstoreError(Exception):
    """Base class for recoverable, per-request bookstore errors."""

    reason = "Error"

    def __init__(self, message: str, book_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.book_id = book_id


class BookNotFound(BookstoreError):
    reason = "NotFound"

    def __init__(self, book_id: str) -> None:
        super().__init__(f"Book {book_id} not found", book_id=book_id)


class InsufficientStock(BookstoreError):
    reason = "InsufficientStock"

    def __init__(self, book_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Not enough stock for book {book_id}: requested {requested}, available {available}",
            book_id=book_id,
        )
        self.requested = requested
        self.available = available


class InvalidQuantity(BookstoreError):
    reason = "InvalidQuantity"

    def __init__(self, quantity: int, book_id: Optional[str] = None) -> None:
        super().__init__(f"Invalid quantity {quantity}", book_id=book_id)
        self.quantity = quantity


class InvalidPrice(BookstoreError):
    reason = "InvalidPrice"


class DuplicateBook(BookstoreError):
    reason = "DuplicateBook"

    def __init__(self, book_id: str) -> None:
        super().__init__(f"Book {book_id} already exists", book_id=book_id)


class IllegalTransition(BookstoreError):
    """Raised when the checkout state machine is driven out of order."""

    reason = "IllegalTransition"


# HTTP status for each error kind; consumed by the exception handler in main.
STATUS_CODES: Dict[Type[BookstoreError], int] = {
    BookNotFound: 404,
    InsufficientStock: 409,
    DuplicateBook: 409,
    InvalidQuantity: 400,
    InvalidPrice: 400,
    IllegalTransition: 500,
}


def status_code_for(exc: BookstoreError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 400
