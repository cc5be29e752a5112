# app/services/recommendation_service.py
from typing import List, Optional
from sqlmodel import Session, select

from app.config import settings
from app.models.book import Book
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.user import User


def _in_stock(limit: int, exclude: Optional[List[int]] = None, category_ids: Optional[List[int]] = None):
    query = select(Book).where(Book.stock > 0)

    if exclude:
        query = query.where(Book.id.not_in(exclude))

    if category_ids:
        query = query.where(Book.category_id.in_(category_ids))

    return query.order_by(Book.id).limit(limit)


def get_recommendations(session: Session, user: User, limit: Optional[int] = None) -> List[Book]:
    """
    In-stock books from the categories the user already bought from,
    minus what they already own. Without history, any in-stock books.
    """
    limit = limit or settings.recommendation_limit

    purchased_ids = list(set(session.exec(
        select(OrderItem.book_id)
        .join(Order, OrderItem.order_id == Order.id)
        .where(Order.user_id == user.id)
    ).all()))

    if not purchased_ids:
        return session.exec(_in_stock(limit)).all()

    category_ids = [
        c for c in set(session.exec(
            select(Book.category_id).where(Book.id.in_(purchased_ids))
        ).all())
        if c is not None
    ]

    if category_ids:
        books = session.exec(
            _in_stock(limit, exclude=purchased_ids, category_ids=category_ids)
        ).all()
        if books:
            return books

    # no category signal or nothing new in those categories
    return session.exec(_in_stock(limit, exclude=purchased_ids)).all()
