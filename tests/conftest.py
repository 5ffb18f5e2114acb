"""Shared fixtures: a small catalogue, carts, the engine and an API client."""

import zlib
from decimal import Decimal

import numpy as np
import pytest
from fastapi.testclient import TestClient

from bookstore.assistant import ReadingAssistant
from bookstore.cart.cart import Cart
from bookstore.catalog.schemas import Book, Category
from bookstore.catalog.store import Catalog
from bookstore.checkout import CheckoutEngine
from bookstore.main import create_app
from bookstore.service import Bookstore


class HashingEmbedder:
    """Bag-of-words embedder with the sentence-transformers ``encode`` signature."""

    dim = 256

    def __init__(self):
        self.calls = 0

    def encode(self, texts, convert_to_numpy=True):
        self.calls += 1
        out = np.zeros((len(texts), self.dim))
        for i, text in enumerate(texts):
            for word in text.lower().replace(",", " ").replace(".", " ").split():
                out[i, zlib.crc32(word.encode("utf-8")) % self.dim] += 1.0
        return out


@pytest.fixture
def books():
    return [
        Book(id="A", title="Dune", author="Frank Herbert", price=Decimal("10.00"),
             category=Category.FICTION, image_url="images/dune.jpg", stock=5),
        Book(id="B", title="Standard Mathematics", author="Prof. Davis", price=Decimal("25.50"),
             category=Category.ACADEMIC, image_url="images/maths.jpg", stock=5),
        Book(id="C", title="Tao Te Ching", author="Laozi", price=Decimal("7.25"),
             category=Category.RELIGIOUS, image_url="images/tao.jpg", stock=3),
        Book(id="D", title="The Hobbit", author="J.R.R. Tolkien", price=Decimal("14.00"),
             category=Category.FICTION, image_url="images/hobbit.jpg", stock=0),
    ]


@pytest.fixture
def catalog(books):
    return Catalog(books)


@pytest.fixture
def cart(catalog):
    return Cart(catalog)


@pytest.fixture
def engine(catalog):
    return CheckoutEngine(catalog)


@pytest.fixture
def bookstore(catalog):
    return Bookstore(catalog)


@pytest.fixture
def embedder():
    return HashingEmbedder()


@pytest.fixture
def assistant(catalog, embedder):
    return ReadingAssistant(catalog, embedder=embedder, seed=7)


@pytest.fixture
def client(bookstore, assistant):
    with TestClient(create_app(bookstore=bookstore, assistant=assistant)) as c:
        yield c
