"""
Pydantic schema definitions for the catalog module.

The ``Book`` model is the single record type for every title in the
shop; the category is a plain enumeration tag rather than a subclass.
Books are frozen: the catalog store replaces a record with an updated
copy (``model_copy(update=...)``) whenever its price or stock changes,
so a ``Book`` handed to a caller is a stable snapshot. The
``PaginatedBooks`` model bundles a page of books with pagination
metadata so that clients know how many pages of results are available.
"""

from decimal import Decimal
from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class Category(str, Enum):
    """The closed set of shelves the shop sells from."""

    FICTION = "Fiction"
    RELIGIOUS = "Religious"
    ACADEMIC = "Academic"


class Book(BaseModel):
    """A single book entry with its current price and stock.

    ``id`` is the ISBN in the bundled sample data but any unique string
    works. ``price`` is kept as a ``Decimal`` so that cart totals add up
    exactly; ``stock`` never drops below zero.
    """

    id: str = Field(..., min_length=1)
    title: str
    author: str = ""
    price: Decimal = Field(..., ge=0, decimal_places=2)
    category: Category
    image_url: str = ""
    stock: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    def describe(self) -> str:
        return f"{self.title} by {self.author} ({self.category.value}) - ${self.price:.2f}"


class PriceUpdate(BaseModel):
    price: Decimal = Field(..., ge=0, decimal_places=2)


class RestockRequest(BaseModel):
    # Negative values are allowed for stock corrections.
    quantity: int


class PaginatedBooks(BaseModel):
    """A wrapper for paginated results returned from ``/books`` endpoint."""

    page: int
    page_size: int
    total: int
    total_pages: int
    items: List[Book]
