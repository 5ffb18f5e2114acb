"""
Route definitions for shopping carts.

Carts are keyed by an opaque ``session_id`` supplied by the front-end
(for example the logged-in user's id); no authentication happens here.

Endpoints under /api/cart:
- GET    /{session_id}                   : view the cart with live prices
- POST   /{session_id}/items             : add a book (quantity defaults to 1)
- PUT    /{session_id}/items/{book_id}   : set a line's quantity (0 removes it)
- DELETE /{session_id}/items/{book_id}   : remove a line
- DELETE /{session_id}                   : empty the cart
- POST   /{session_id}/checkout          : buy everything in the cart
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..deps import get_bookstore
from ..models import AddItemRequest, CartView, CheckoutResult, SetQuantityRequest
from ..service import Bookstore

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("/{session_id}", response_model=CartView)
def view_cart(session_id: str, store: Bookstore = Depends(get_bookstore)) -> CartView:
    return store.view_cart(session_id)


@router.post("/{session_id}/items", response_model=CartView)
def add_item(session_id: str, req: AddItemRequest, store: Bookstore = Depends(get_bookstore)) -> CartView:
    return store.add_to_cart(session_id, req.book_id, req.quantity)


@router.put("/{session_id}/items/{book_id}", response_model=CartView)
def set_quantity(
    session_id: str,
    book_id: str,
    req: SetQuantityRequest,
    store: Bookstore = Depends(get_bookstore),
) -> CartView:
    return store.set_cart_quantity(session_id, book_id, req.quantity)


@router.delete("/{session_id}/items/{book_id}", response_model=CartView)
def remove_item(session_id: str, book_id: str, store: Bookstore = Depends(get_bookstore)) -> CartView:
    return store.remove_from_cart(session_id, book_id)


@router.delete("/{session_id}", response_model=CartView)
def clear_cart(session_id: str, store: Bookstore = Depends(get_bookstore)) -> CartView:
    return store.clear_cart(session_id)


@router.post(
    "/{session_id}/checkout",
    response_model=CheckoutResult,
    responses={status.HTTP_409_CONFLICT: {"model": CheckoutResult}},
)
def checkout(session_id: str, store: Bookstore = Depends(get_bookstore)):
    """Buy the whole cart or nothing.

    A rejected checkout answers 409 with the list of problem lines; the
    cart is left as it was so the shopper can fix it and retry.
    """
    result = store.checkout(session_id)
    if not result.ok:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=result.model_dump(mode="json"),
        )
    return result
