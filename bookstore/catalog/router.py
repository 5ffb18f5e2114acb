"""
Route definitions for the catalogue API.

Endpoints under /api/catalog:
- GET    /books                      : list books, filtered by category / text
- GET    /books/{book_id}            : get one book
- POST   /books                      : add a book (admin)
- PUT    /books/{book_id}/price      : change the price (admin)
- POST   /books/{book_id}/restock    : add or correct stock (admin)
- DELETE /books/{book_id}            : delist a book (admin)

Errors raised by the store (``BookNotFound``, ``InsufficientStock``...)
are turned into HTTP responses by the handler registered in ``main``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..deps import get_bookstore
from ..service import Bookstore
from .schemas import Book, Category, PaginatedBooks, PriceUpdate, RestockRequest

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


@router.get("/books", response_model=PaginatedBooks)
def list_books(
    category: Optional[Category] = Query(default=None, description="Filter by category"),
    q: Optional[str] = Query(default=None, description="Search title or author"),
    page: int = Query(default=1, ge=1, description="Current page (1-indexed)"),
    page_size: int = Query(default=12, ge=1, le=200, description="Page size"),
    store: Bookstore = Depends(get_bookstore),
) -> PaginatedBooks:
    """Return a page of books in catalogue order."""
    books = store.catalog.search(q=q, category=category)

    total = len(books)
    total_pages = max(1, (total + page_size - 1) // page_size) if total > 0 else 1
    page = min(max(1, page), total_pages)

    start = (page - 1) * page_size
    end = start + page_size
    return PaginatedBooks(
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
        items=books[start:end],
    )


@router.get("/books/{book_id}", response_model=Book)
def get_book(book_id: str, store: Bookstore = Depends(get_bookstore)) -> Book:
    return store.catalog.get(book_id)


@router.post("/books", response_model=Book, status_code=status.HTTP_201_CREATED)
def add_book(book: Book, store: Bookstore = Depends(get_bookstore)) -> Book:
    return store.catalog.add(book)


@router.put("/books/{book_id}/price", response_model=Book)
def set_price(book_id: str, req: PriceUpdate, store: Bookstore = Depends(get_bookstore)) -> Book:
    return store.catalog.set_price(book_id, req.price)


@router.post("/books/{book_id}/restock", response_model=Book)
def restock(book_id: str, req: RestockRequest, store: Bookstore = Depends(get_bookstore)) -> Book:
    return store.catalog.restock(book_id, req.quantity)


@router.delete("/books/{book_id}")
def remove_book(book_id: str, store: Bookstore = Depends(get_bookstore)):
    store.catalog.remove(book_id)
    return {"status": "ok"}
