"""Tests for the reading assistant (recommendations and category Q&A)."""

import pytest

from bookstore.assistant import FALLBACK_ANSWER, KNOWLEDGE_BASE, ReadingAssistant, parse_category
from bookstore.catalog.schemas import Category


class TestParseCategory:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("fiction", Category.FICTION),
            ("  Academic ", Category.ACADEMIC),
            ("RELIGIOUS", Category.RELIGIOUS),
            (Category.FICTION, Category.FICTION),
            ("general", None),
            ("", None),
            (None, None),
        ],
    )
    def test_values(self, value, expected):
        assert parse_category(value) == expected


class TestRecommend:
    def test_only_in_stock_books(self, assistant):
        # D is fiction too but out of stock.
        for _ in range(10):
            assert assistant.recommend(Category.FICTION).id == "A"

    def test_accepts_category_name(self, assistant):
        assert assistant.recommend("Religious").id == "C"

    def test_nothing_in_stock(self, assistant, catalog):
        catalog.reserve_stock("C", 3)
        assert assistant.recommend(Category.RELIGIOUS) is None

    def test_seeded_choice_is_repeatable(self, catalog, embedder):
        catalog.restock("D", 2)
        one = ReadingAssistant(catalog, embedder=embedder, seed=3)
        two = ReadingAssistant(catalog, embedder=embedder, seed=3)
        first = [one.recommend("Fiction").id for _ in range(8)]
        second = [two.recommend("Fiction").id for _ in range(8)]
        assert first == second
        assert set(first) <= {"A", "D"}


class TestAnswer:
    def test_picks_closest_statement(self, assistant):
        answer = assistant.answer("Fiction", "Does fiction include genres like mystery and romance?")
        assert answer.category == Category.FICTION
        assert answer.answer == "Regarding fiction books: " + KNOWLEDGE_BASE[Category.FICTION][2]
        assert 0.0 < answer.confidence <= 1.0

    def test_other_category(self, assistant):
        answer = assistant.answer(Category.ACADEMIC, "Are these books great for students and researchers?")
        assert answer.answer.endswith(KNOWLEDGE_BASE[Category.ACADEMIC][1])

    def test_unknown_category(self, assistant, embedder):
        answer = assistant.answer("general", "What should I read?")
        assert answer.category is None
        assert answer.answer == FALLBACK_ANSWER
        assert answer.confidence == 0.0
        assert embedder.calls == 0

    def test_statement_vectors_are_cached(self, assistant, embedder):
        assistant.answer("Fiction", "stories")
        assistant.answer("Fiction", "creativity")
        # One call for the knowledge base, one per question.
        assert embedder.calls == 3
