"""Tests for the in-memory catalogue.

Coverage:
- Lookups and category filtering
- reserve_stock (success, exact stock, insufficient, unknown id)
- Admin mutators: set_price, restock, add, remove
- Snapshot immutability
- Loading the bundled sample data
"""

import json
import threading
from decimal import Decimal

import pytest
from pydantic import ValidationError

from bookstore.catalog.schemas import Book, Category
from bookstore.catalog.store import Catalog
from bookstore.config import PACKAGE_DIR
from bookstore.errors import (
    BookNotFound,
    DuplicateBook,
    InsufficientStock,
    InvalidPrice,
    InvalidQuantity,
)


class TestCatalogReads:
    def test_get_returns_record(self, catalog):
        book = catalog.get("A")
        assert book.title == "Dune"
        assert book.price == Decimal("10.00")
        assert book.stock == 5

    def test_get_unknown_id(self, catalog):
        with pytest.raises(BookNotFound) as exc_info:
            catalog.get("nope")
        assert exc_info.value.book_id == "nope"
        assert exc_info.value.reason == "NotFound"

    def test_list_by_category_keeps_catalogue_order(self, catalog):
        fiction = catalog.list_by_category(Category.FICTION)
        assert [b.id for b in fiction] == ["A", "D"]

    def test_list_by_category_accepts_name(self, catalog):
        assert [b.id for b in catalog.list_by_category("Religious")] == ["C"]

    def test_list_by_unknown_category(self, catalog):
        with pytest.raises(ValueError):
            catalog.list_by_category("Cookbooks")

    def test_search_by_text(self, catalog):
        assert [b.id for b in catalog.search(q="tolkien")] == ["D"]
        assert [b.id for b in catalog.search(q="DUNE", category=Category.FICTION)] == ["A"]
        assert catalog.search(q="dune", category=Category.ACADEMIC) == []

    def test_snapshot_is_frozen(self, catalog):
        book = catalog.get("A")
        with pytest.raises(ValidationError):
            book.stock = 100

    def test_snapshot_does_not_follow_later_changes(self, catalog):
        before = catalog.get("A")
        catalog.reserve_stock("A", 2)
        assert before.stock == 5
        assert catalog.get("A").stock == 3


class TestReserveStock:
    def test_decrements_and_returns_new_stock(self, catalog):
        assert catalog.reserve_stock("A", 2) == 3
        assert catalog.get("A").stock == 3

    def test_exact_stock_leaves_zero(self, catalog):
        assert catalog.reserve_stock("C", 3) == 0
        assert catalog.get("C").stock == 0

    def test_insufficient_stock_changes_nothing(self, catalog):
        with pytest.raises(InsufficientStock) as exc_info:
            catalog.reserve_stock("C", 4)
        assert exc_info.value.requested == 4
        assert exc_info.value.available == 3
        assert catalog.get("C").stock == 3

    def test_unknown_book(self, catalog):
        with pytest.raises(BookNotFound):
            catalog.reserve_stock("nope", 1)

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_rejects_non_positive_quantity(self, catalog, quantity):
        with pytest.raises(InvalidQuantity):
            catalog.reserve_stock("A", quantity)
        assert catalog.get("A").stock == 5

    def test_concurrent_reservations_never_oversell(self, catalog):
        # 5 copies, 20 threads each wanting one.
        barrier = threading.Barrier(20)
        outcomes = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            try:
                catalog.reserve_stock("A", 1)
                result = "ok"
            except InsufficientStock:
                result = "short"
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("ok") == 5
        assert outcomes.count("short") == 15
        assert catalog.get("A").stock == 0


class TestAdminMutators:
    def test_set_price(self, catalog):
        updated = catalog.set_price("A", "12.5")
        assert updated.price == Decimal("12.50")
        assert catalog.get("A").price == Decimal("12.50")

    def test_set_price_zero_is_allowed(self, catalog):
        assert catalog.set_price("A", 0).price == Decimal("0.00")

    def test_set_price_negative(self, catalog):
        with pytest.raises(InvalidPrice):
            catalog.set_price("A", Decimal("-1"))
        assert catalog.get("A").price == Decimal("10.00")

    def test_set_price_garbage(self, catalog):
        with pytest.raises(InvalidPrice):
            catalog.set_price("A", "ten")

    def test_set_price_unknown_book(self, catalog):
        with pytest.raises(BookNotFound):
            catalog.set_price("nope", 1)

    def test_restock_adds(self, catalog):
        assert catalog.restock("D", 4).stock == 4

    def test_restock_negative_correction(self, catalog):
        assert catalog.restock("A", -2).stock == 3

    def test_restock_below_zero_is_refused(self, catalog):
        with pytest.raises(InsufficientStock):
            catalog.restock("C", -4)
        assert catalog.get("C").stock == 3

    def test_add_and_duplicate(self, catalog):
        book = Book(id="E", title="Dictionary", price=Decimal("5"), category=Category.ACADEMIC, stock=1)
        catalog.add(book)
        assert catalog.get("E") == book
        assert len(catalog) == 5
        with pytest.raises(DuplicateBook):
            catalog.add(book)

    def test_remove(self, catalog):
        removed = catalog.remove("A")
        assert removed.id == "A"
        assert "A" not in catalog
        with pytest.raises(BookNotFound):
            catalog.get("A")
        with pytest.raises(BookNotFound):
            catalog.remove("A")

    def test_add_rounds_price_to_cents(self, catalog):
        book = Book(id="E", title="Dictionary", price=Decimal("10.5"), category=Category.ACADEMIC, stock=1)
        stored = catalog.add(book)
        assert str(stored.price) == "10.50"
        assert str(catalog.get("E").price) == "10.50"
        assert str(Catalog([book]).get("E").price) == "10.50"

    def test_readded_book_shares_lock_with_old_holders(self, catalog):
        # A thread queued on the book before remove + add must still be
        # excluded by whoever holds the book afterwards.
        done = threading.Event()

        def reserve():
            catalog.reserve_stock("A", 1)
            done.set()

        with catalog.hold(["A"]):
            old = catalog.remove("A")
            catalog.add(old)
            worker = threading.Thread(target=reserve)
            worker.start()
            assert not done.wait(0.2)
            assert catalog.get("A").stock == 5
        worker.join(timeout=5)
        assert done.is_set()
        assert catalog.get("A").stock == 4

    def test_removed_book_cannot_be_reserved(self, catalog):
        catalog.remove("C")
        with pytest.raises(BookNotFound):
            catalog.reserve_stock("C", 1)
        with pytest.raises(BookNotFound):
            catalog.restock("C", 1)


class TestBookModel:
    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError):
            Book(id="X", title="X", price=Decimal("1"), category=Category.FICTION, stock=-1)

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            Book(id="X", title="X", price=Decimal("-1"), category=Category.FICTION)

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            Book(id="X", title="X", price=Decimal("1"), category="Poetry")

    def test_describe(self, catalog):
        assert catalog.get("A").describe() == "Dune by Frank Herbert (Fiction) - $10.00"


class TestLoading:
    def test_bundled_sample_data(self):
        catalog = Catalog.from_json(PACKAGE_DIR / "data" / "sample_books.json")
        assert len(catalog) == 36
        for category in Category:
            shelf = catalog.list_by_category(category)
            assert len(shelf) == 12
            assert all(b.stock == 3 for b in shelf)
        assert catalog.get("9780123456789").title == "Acids And Bases"

    def test_missing_file_gives_empty_catalogue(self, tmp_path):
        assert len(Catalog.from_json(tmp_path / "missing.json")) == 0

    def test_malformed_entries_are_skipped(self, tmp_path):
        path = tmp_path / "books.json"
        path.write_text(
            json.dumps(
                [
                    {"id": "1", "title": "Ok", "price": "3.00", "category": "Fiction", "stock": 1},
                    {"id": "2", "title": "Bad stock", "price": "3.00", "category": "Fiction", "stock": -4},
                    {"id": "3", "title": "Bad category", "price": "3.00", "category": "Poetry"},
                ]
            ),
            encoding="utf-8",
        )
        catalog = Catalog.from_json(path)
        assert [b.id for b in catalog.list_books()] == ["1"]

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "books.json"
        path.write_text('{"id": "1"}', encoding="utf-8")
        assert len(Catalog.from_json(path)) == 0
