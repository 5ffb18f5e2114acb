"""
Request-layer entry points for the cart and checkout.

``Bookstore`` bundles an explicitly constructed ``Catalog`` with the
cart registry and the checkout engine. HTTP routes and tests talk to
this object; nothing in the package keeps a global store.
"""

from __future__ import annotations

import logging

from .cart.cart import ZERO
from .catalog.store import Catalog
from .checkout import CheckoutEngine
from .config import Settings
from .models import CartView, CheckoutResult
from .sessions import CartRegistry

logger = logging.getLogger(__name__)


class Bookstore:
    def __init__(self, catalog: Catalog, currency: str = "USD") -> None:
        self.catalog = catalog
        self.currency = currency
        self.carts = CartRegistry(catalog)
        self.engine = CheckoutEngine(catalog, currency=currency)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Bookstore":
        return cls(Catalog.from_json(settings.data_file), currency=settings.currency)

    def add_to_cart(self, session_id: str, book_id: str, quantity: int = 1) -> CartView:
        with self.carts.open(session_id) as cart:
            cart.add_item(book_id, quantity)
        logger.debug("Session %s added %d x %s", session_id, quantity, book_id)
        return self.view_cart(session_id)

    def set_cart_quantity(self, session_id: str, book_id: str, quantity: int) -> CartView:
        with self.carts.open(session_id) as cart:
            cart.set_quantity(book_id, quantity)
        return self.view_cart(session_id)

    def remove_from_cart(self, session_id: str, book_id: str) -> CartView:
        with self.carts.open(session_id) as cart:
            cart.remove_item(book_id)
        return self.view_cart(session_id)

    def clear_cart(self, session_id: str) -> CartView:
        with self.carts.open(session_id) as cart:
            cart.clear()
        return self.view_cart(session_id)

    def view_cart(self, session_id: str) -> CartView:
        cart = self.carts.find(session_id)
        if cart is None:
            return CartView(session_id=session_id, currency=self.currency)
        with cart.locked():
            items = cart.snapshot()
        total = sum((item.line_total for item in items), ZERO)
        return CartView(session_id=session_id, items=items, total=total, currency=self.currency)

    def checkout(self, session_id: str) -> CheckoutResult:
        # A successful checkout empties the cart, which unregisters it.
        with self.carts.open(session_id) as cart:
            result = self.engine.checkout(cart)
        logger.info("Session %s checkout: %s", session_id, result.status)
        return result
