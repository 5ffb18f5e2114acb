# bookstore/main.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .assistant import ReadingAssistant
from .cart.router import router as cart_router
from .catalog.router import router as catalog_router
from .catalog.schemas import Category
from .config import Settings, settings as default_settings
from .deps import get_assistant
from .errors import BookstoreError, status_code_for
from .models import Answer, AskRequest, Recommendation
from .service import Bookstore

logger = logging.getLogger(__name__)

router = APIRouter()


# Health check
@router.get("/")
def health_check():
    return {"status": "ok", "message": "Bookstore API live"}


@router.get("/api/assistant/recommend", response_model=Recommendation)
def recommend_api(category: Category, assistant: ReadingAssistant = Depends(get_assistant)):
    book = assistant.recommend(category)
    if book is None:
        message = f"I don't have any recommendations for {category.value} books right now."
    else:
        message = f"I recommend: {book.describe()}"
    return Recommendation(category=category, book=book, message=message)


@router.post("/api/assistant/ask", response_model=Answer)
def ask_api(req: AskRequest, assistant: ReadingAssistant = Depends(get_assistant)):
    if not req.question.strip():
        raise HTTPException(status_code=400, detail="Empty question.")
    return assistant.answer(req.category, req.question)


async def bookstore_error_handler(request: Request, exc: BookstoreError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"detail": exc.message, "reason": exc.reason, "book_id": exc.book_id},
    )


def create_app(
    bookstore: Optional[Bookstore] = None,
    assistant: Optional[ReadingAssistant] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the API around an explicitly constructed bookstore.

    Without arguments the catalogue is loaded from the configured data
    file and the assistant uses the configured embedding model.
    """
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    if bookstore is None:
        bookstore = Bookstore.from_settings(settings)
    if assistant is None:
        assistant = ReadingAssistant(
            bookstore.catalog,
            model_name=settings.embedding_model,
            seed=settings.recommendation_seed,
        )

    app = FastAPI(
        title="Bookstore",
        description=(
            "Toy online bookstore: catalogue by category, per-session carts "
            "and all-or-nothing checkout against live stock."
        ),
        version="1.0.0",
    )
    app.state.bookstore = bookstore
    app.state.assistant = assistant
    app.add_exception_handler(BookstoreError, bookstore_error_handler)

    app.include_router(router)
    app.include_router(catalog_router)
    app.include_router(cart_router)

    logger.info("Bookstore API ready with %d books", len(bookstore.catalog))
    return app


app = create_app()
