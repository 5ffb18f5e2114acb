"""
Shopping cart package: the per-session ``Cart`` and its routes under
``/api/cart`` (imported by ``bookstore.main``).
"""

from .cart import Cart  # noqa: F401
