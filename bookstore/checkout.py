"""Checkout engine: turns a cart into stock decrements, all or nothing.

Every checkout runs through a small state machine::

    IDLE -> VALIDATING -> COMMITTING -> DONE
                 |             |
                 +-> REJECTED <+

VALIDATING checks every cart line against the live catalogue and
collects all problems, so a shopper learns about every unavailable title
in one response. Nothing is mutated when a problem is found.

COMMITTING holds the locks of every book in the cart (ascending id order)
and reserves each line. Stock can still have moved between validation
and lock acquisition because of a concurrent checkout; in that case the
decrements already applied are restocked before the locks are released
and the checkout is rejected with the conflicting line.

DONE clears the cart. An empty cart passes through the same path and
ends in DONE with a zero charge.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, List, Tuple

from .cart.cart import Cart
from .catalog.store import Catalog
from .errors import BookNotFound, IllegalTransition, InsufficientStock
from .models import CheckoutResult, Problem, ReceiptItem

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class CheckoutState(str, Enum):
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    COMMITTING = "COMMITTING"
    DONE = "DONE"
    REJECTED = "REJECTED"


TRANSITIONS: Dict[CheckoutState, FrozenSet[CheckoutState]] = {
    CheckoutState.IDLE: frozenset({CheckoutState.VALIDATING}),
    CheckoutState.VALIDATING: frozenset({CheckoutState.COMMITTING, CheckoutState.REJECTED}),
    CheckoutState.COMMITTING: frozenset({CheckoutState.DONE, CheckoutState.REJECTED}),
    CheckoutState.DONE: frozenset(),
    CheckoutState.REJECTED: frozenset(),
}


class CheckoutAttempt:
    """State of a single checkout run."""

    def __init__(self) -> None:
        self.state = CheckoutState.IDLE
        self.history: List[CheckoutState] = [CheckoutState.IDLE]

    def advance(self, new_state: CheckoutState) -> None:
        if new_state not in TRANSITIONS[self.state]:
            raise IllegalTransition(f"Cannot go from {self.state.value} to {new_state.value}")
        logger.debug("Checkout %s -> %s", self.state.value, new_state.value)
        self.state = new_state
        self.history.append(new_state)


class _CommitConflict(Exception):
    def __init__(self, problem: Problem) -> None:
        super().__init__(problem.reason)
        self.problem = problem


class CheckoutEngine:
    def __init__(self, catalog: Catalog, currency: str = "USD") -> None:
        self._catalog = catalog
        self.currency = currency

    def checkout(self, cart: Cart) -> CheckoutResult:
        attempt = CheckoutAttempt()
        with cart.locked():
            lines = cart.lines()

            attempt.advance(CheckoutState.VALIDATING)
            problems = self._validate(lines)
            if problems:
                attempt.advance(CheckoutState.REJECTED)
                logger.info(
                    "Checkout rejected during validation: %s",
                    ", ".join(f"{p.book_id}={p.reason}" for p in problems),
                )
                return self._rejected(problems)

            attempt.advance(CheckoutState.COMMITTING)
            try:
                items = self._commit(lines)
            except _CommitConflict as conflict:
                attempt.advance(CheckoutState.REJECTED)
                logger.warning(
                    "Checkout conflict on %s (%s), rolled back",
                    conflict.problem.book_id,
                    conflict.problem.reason,
                )
                return self._rejected([conflict.problem])

            cart.clear()
            attempt.advance(CheckoutState.DONE)

        charged = sum((item.line_total for item in items), ZERO)
        logger.info("Checkout done: %d line(s), charged %s %s", len(items), charged, self.currency)
        return CheckoutResult(
            status="ok",
            state=attempt.state.value,
            charged=charged,
            currency=self.currency,
            items=items,
        )

    def _validate(self, lines: List[Tuple[str, int]]) -> List[Problem]:
        problems: List[Problem] = []
        for book_id, quantity in lines:
            try:
                book = self._catalog.get(book_id)
            except BookNotFound:
                problems.append(Problem(book_id=book_id, reason="NotFound", requested=quantity))
                continue
            if book.stock < quantity:
                problems.append(
                    Problem(
                        book_id=book_id,
                        reason="InsufficientStock",
                        requested=quantity,
                        available=book.stock,
                    )
                )
        return problems

    def _commit(self, lines: List[Tuple[str, int]]) -> List[ReceiptItem]:
        try:
            with self._catalog.hold(book_id for book_id, _ in lines):
                return self._apply(lines)
        except BookNotFound as exc:
            # Delisted between validation and locking.
            requested = dict(lines).get(exc.book_id, 0)
            raise _CommitConflict(
                Problem(book_id=exc.book_id, reason="NotFound", requested=requested)
            ) from exc

    def _apply(self, lines: List[Tuple[str, int]]) -> List[ReceiptItem]:
        # Caller holds the locks of every book in ``lines``.
        applied: List[Tuple[str, int]] = []
        items: List[ReceiptItem] = []
        try:
            for book_id, quantity in lines:
                book = self._catalog.get(book_id)
                stock_left = self._catalog.reserve_stock(book_id, quantity)
                applied.append((book_id, quantity))
                items.append(
                    ReceiptItem(
                        book_id=book_id,
                        title=book.title,
                        unit_price=book.price,
                        quantity=quantity,
                        line_total=book.price * quantity,
                        stock_left=stock_left,
                    )
                )
        except InsufficientStock as exc:
            self._rollback(applied)
            raise _CommitConflict(
                Problem(
                    book_id=exc.book_id,
                    reason="InsufficientStock",
                    requested=exc.requested,
                    available=exc.available,
                )
            ) from exc
        except BookNotFound:
            self._rollback(applied)
            raise
        return items

    def _rollback(self, applied: List[Tuple[str, int]]) -> None:
        for book_id, quantity in reversed(applied):
            self._catalog.restock(book_id, quantity)
        if applied:
            logger.warning("Rolled back %d reservation(s)", len(applied))

    def _rejected(self, problems: List[Problem]) -> CheckoutResult:
        return CheckoutResult(
            status="rejected",
            state=CheckoutState.REJECTED.value,
            currency=self.currency,
            problems=problems,
        )
