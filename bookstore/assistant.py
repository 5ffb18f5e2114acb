# bookstore/assistant.py
import logging
import threading
from typing import Any, Dict, List, Optional, Union

import numpy as np

from .catalog.schemas import Book, Category
from .catalog.store import Catalog
from .models import Answer

logger = logging.getLogger(__name__)


KNOWLEDGE_BASE: Dict[Category, List[str]] = {
    Category.ACADEMIC: [
        "Academic books focus on educational content for various subjects.",
        "These books are great for students and researchers.",
        "They typically contain factual information and research findings.",
    ],
    Category.FICTION: [
        "Fiction books contain imaginative stories and narratives.",
        "They are great for entertainment and developing creativity.",
        "Fiction includes genres like mystery, sci-fi, and romance.",
    ],
    Category.RELIGIOUS: [
        "Religious books contain spiritual teachings and beliefs.",
        "They provide guidance on faith and moral values.",
        "These books are important for religious studies and personal growth.",
    ],
}

FALLBACK_ANSWER = (
    "I'm not sure about that topic. "
    "Can you ask about Academic, Fiction, or Religious books?"
)


def parse_category(value: Union[Category, str, None]) -> Optional[Category]:
    """Case-insensitive lookup of a category name; ``None`` when unknown."""
    if isinstance(value, Category):
        return value
    wanted = (value or "").strip().lower()
    for category in Category:
        if category.value.lower() == wanted:
            return category
    return None


def _cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    denom = np.linalg.norm(a) * np.linalg.norm(b)
    if denom == 0:
        return 0.0
    return float(np.dot(a, b) / denom)


class ReadingAssistant:
    """Recommends books and answers simple questions about a category.

    The sentence embedding model is loaded on first use. Anything with a
    sentence-transformers style ``encode(texts, convert_to_numpy=True)``
    method can be passed as ``embedder`` instead.
    """

    def __init__(
        self,
        catalog: Catalog,
        embedder: Optional[Any] = None,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        seed: Optional[int] = None,
    ) -> None:
        self._catalog = catalog
        self._embedder = embedder
        self._model_name = model_name
        self._rng = np.random.default_rng(seed)
        self._kb_vectors: Dict[Category, np.ndarray] = {}
        self._lock = threading.Lock()

    def _get_embedder(self) -> Any:
        with self._lock:
            if self._embedder is None:
                from sentence_transformers import SentenceTransformer

                logger.info("Loading embedding model %s", self._model_name)
                self._embedder = SentenceTransformer(self._model_name)
            return self._embedder

    def _statement_vectors(self, category: Category) -> np.ndarray:
        vectors = self._kb_vectors.get(category)
        if vectors is None:
            vectors = self._get_embedder().encode(KNOWLEDGE_BASE[category], convert_to_numpy=True)
            self._kb_vectors[category] = vectors
        return vectors

    def recommend(self, category: Union[Category, str]) -> Optional[Book]:
        """Pick a random in-stock book from the category."""
        books = [b for b in self._catalog.list_by_category(category) if b.in_stock]
        if not books:
            return None
        with self._lock:
            idx = int(self._rng.integers(len(books)))
        return books[idx]

    def answer(self, category: Union[Category, str], question: str) -> Answer:
        """Answer with the knowledge-base statement closest to the question."""
        cat = parse_category(category)
        if cat is None:
            return Answer(category=None, answer=FALLBACK_ANSWER, confidence=0.0)

        statements = KNOWLEDGE_BASE[cat]
        vectors = self._statement_vectors(cat)
        q_vec = self._get_embedder().encode([question], convert_to_numpy=True)[0]

        sims = [_cosine_similarity(q_vec, v) for v in vectors]
        best = int(np.argmax(sims))
        return Answer(
            category=cat,
            answer=f"Regarding {cat.value.lower()} books: {statements[best]}",
            confidence=round(max(0.0, sims[best]), 3),
        )
