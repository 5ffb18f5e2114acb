"""Toy online bookstore: catalogue, per-session carts and atomic checkout."""

__version__ = "1.0.0"
