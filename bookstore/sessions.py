# bookstore/sessions.py
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from .cart.cart import Cart
from .catalog.store import Catalog


class CartRegistry:
    """Keeps one cart per session id while that cart has lines.

    Carts are created by ``open()`` and dropped again as soon as they are
    left empty (checkout, clear, removing the last line, a failed add),
    so looking at an unknown session never registers anything.

    Lock order is cart lock, then registry lock.
    """

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog
        self._carts: Dict[str, Cart] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._carts)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._carts

    def find(self, session_id: str) -> Optional[Cart]:
        with self._lock:
            return self._carts.get(session_id)

    @contextmanager
    def open(self, session_id: str) -> Iterator[Cart]:
        """Yield the session's cart, locked and registered.

        The cart is created if needed and unregistered on exit when it
        ends up empty.
        """
        while True:
            with self._lock:
                cart = self._carts.get(session_id)
                if cart is None:
                    cart = Cart(self._catalog)
                    self._carts[session_id] = cart
            with cart.locked():
                with self._lock:
                    registered = self._carts.get(session_id) is cart
                if not registered:
                    # Dropped while we waited for its lock.
                    continue
                try:
                    yield cart
                finally:
                    if cart.is_empty:
                        with self._lock:
                            if self._carts.get(session_id) is cart:
                                del self._carts[session_id]
                return
