# bookstore/models.py
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field
from typing_extensions import Literal

from .catalog.schemas import Book, Category


class AddItemRequest(BaseModel):
    book_id: str
    quantity: int = 1


class SetQuantityRequest(BaseModel):
    quantity: int


class CartItem(BaseModel):
    """One cart line joined with the live catalogue record."""

    book: Book
    quantity: int
    line_total: Decimal


class CartView(BaseModel):
    session_id: str
    items: List[CartItem] = Field(default_factory=list)
    total: Decimal = Decimal("0.00")
    currency: str = "USD"


class ReceiptItem(BaseModel):
    book_id: str
    title: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    stock_left: int


class Problem(BaseModel):
    book_id: str
    reason: Literal["NotFound", "InsufficientStock"]
    requested: int
    available: Optional[int] = None


class CheckoutResult(BaseModel):
    status: Literal["ok", "rejected"]
    # Final state of the checkout state machine: DONE or REJECTED.
    state: str
    charged: Decimal = Decimal("0.00")
    currency: str = "USD"
    items: List[ReceiptItem] = Field(default_factory=list)
    problems: List[Problem] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class AskRequest(BaseModel):
    category: str
    question: str


class Answer(BaseModel):
    category: Optional[Category] = None
    answer: str
    confidence: float


class Recommendation(BaseModel):
    category: Category
    book: Optional[Book] = None
    message: str
