# app/services/review_service.py
import logging
from typing import Optional
from sqlmodel import Session, select

from app.constants.order_status import PURCHASED_STATUSES
from app.errors import NotFoundError, ValidationError
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.review import Review
from app.models.user import User
from app.services import catalog_service

logger = logging.getLogger(__name__)


def has_reviewed(session: Session, user: User, book_id: int) -> bool:
    return session.exec(
        select(Review).where(Review.book_id == book_id, Review.user_id == user.id)
    ).first() is not None


def has_verified_purchase(session: Session, user: User, book_id: int) -> bool:
    return session.exec(
        select(OrderItem.id)
        .join(Order, OrderItem.order_id == Order.id)
        .where(
            OrderItem.book_id == book_id,
            Order.user_id == user.id,
            Order.status.in_(PURCHASED_STATUSES),
        )
    ).first() is not None


def submit_review(
    session: Session,
    user: User,
    book_id: Optional[int],
    rating: Optional[int],
    title: Optional[str] = None,
    comment: Optional[str] = None,
) -> str:
    if not book_id or rating is None:
        raise ValidationError("Book ID and rating are required")

    if isinstance(rating, bool) or not isinstance(rating, int) or rating < 1 or rating > 5:
        raise ValidationError("Rating must be between 1 and 5")

    book = catalog_service.get_book(session, book_id)
    if not book:
        raise NotFoundError(f"Book with ID {book_id} not found")

    if has_reviewed(session, user, book_id):
        raise ValidationError("You have already reviewed this book")

    review = Review(
        book_id=book_id,
        user_id=user.id,
        rating=rating,
        title=title,
        comment=comment,
        is_verified_purchase=has_verified_purchase(session, user, book_id),
    )

    session.add(review)
    session.commit()

    logger.info(f"User {user.id} reviewed book {book_id} ({rating}/5)")
    return f'Review submitted successfully for "{book.title}"'


def can_review(session: Session, user: User, book_id: int) -> bool:
    if has_reviewed(session, user, book_id):
        return False

    return has_verified_purchase(session, user, book_id)
