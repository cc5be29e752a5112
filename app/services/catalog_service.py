# app/services/catalog_service.py
import logging
from typing import Optional
from sqlalchemy import update
from sqlmodel import Session
from app.errors import ValidationError
from app.models.book import Book

logger = logging.getLogger(__name__)


def get_book(session: Session, book_id: int) -> Optional[Book]:
    """Authoritative price/stock lookup. Never cache the result across transactions."""
    return session.get(Book, book_id)


def insufficient_stock(book: Book, requested: int) -> ValidationError:
    return ValidationError(
        f'Insufficient stock for book "{book.title}". '
        f"Available: {book.stock}, Requested: {requested}"
    )


def reserve_stock(session: Session, book_id: int, quantity: int) -> None:
    """
    Decrement stock only if enough is left.

    The check and the decrement are one conditional UPDATE, so a purchase that
    loses the race for the last units fails here instead of driving stock negative.
    """
    result = session.execute(
        update(Book)
        .where(Book.id == book_id, Book.stock >= quantity)
        .values(stock=Book.stock - quantity)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        book = session.get(Book, book_id, populate_existing=True)
        logger.warning(f"Stock reservation lost for book {book_id}, requested {quantity}")
        raise insufficient_stock(book, quantity)

    logger.info(f"Reserved {quantity} of book {book_id}")
