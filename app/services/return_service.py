# app/services/return_service.py
import logging
from datetime import datetime, timedelta
from typing import List, Optional
from sqlmodel import Session, select

from app.config import settings
from app.constants.order_status import OrderStatus, RETURN_TRANSITIONS, ReturnStatus
from app.errors import NotFoundError, ValidationError
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.return_request import ReturnRequest
from app.models.user import User
from app.services.order_service import generate_order_number
from app.utils.money import format_money, round_money

logger = logging.getLogger(__name__)


def get_owned_order_item(session: Session, user: User, order_id: int, book_id: int):
    """Order line for (order, book) on an order the user owns, with its order."""
    return session.exec(
        select(OrderItem, Order)
        .join(Order, OrderItem.order_id == Order.id)
        .where(
            OrderItem.order_id == order_id,
            OrderItem.book_id == book_id,
            Order.user_id == user.id,
        )
    ).first()


def request_return(
    session: Session,
    user: User,
    order_id: Optional[int],
    book_id: Optional[int],
    quantity: Optional[int],
    reason: Optional[str],
    now: Optional[datetime] = None,
) -> str:
    if not order_id or not book_id or not quantity or not reason:
        raise ValidationError("Order ID, Book ID, quantity, and reason are required")

    if quantity < 1:
        raise ValidationError("Quantity must be at least 1")

    row = get_owned_order_item(session, user, order_id, book_id)
    if not row:
        raise NotFoundError("Order item not found or does not belong to you")

    item, order = row

    if quantity > item.quantity:
        raise ValidationError(
            f"Cannot return more items than purchased. "
            f"Purchased: {item.quantity}, Requested: {quantity}"
        )

    if order.status != OrderStatus.DELIVERED:
        raise ValidationError("Order must be delivered before requesting a return")

    now = now or datetime.utcnow()
    if order.order_date < now - timedelta(days=settings.return_window_days):
        raise ValidationError(
            f"Return request must be made within {settings.return_window_days} days of order date"
        )

    refund_amount = round_money(item.unit_price * quantity)

    return_request = ReturnRequest(
        return_number=generate_order_number("RET"),
        order_id=order.id,
        book_id=book_id,
        user_id=user.id,
        quantity=quantity,
        reason=reason,
        status=ReturnStatus.REQUESTED,
        refund_amount=refund_amount,
        request_date=now,
    )

    session.add(return_request)
    session.commit()
    session.refresh(return_request)

    logger.info(
        f"Return {return_request.return_number} requested by user {user.id} "
        f"for order {order.order_number}"
    )

    return (
        f"Return request {return_request.return_number} submitted successfully. "
        f"Refund amount: {format_money(refund_amount)}"
    )


def list_returns(session: Session, user: User) -> List[ReturnRequest]:
    return session.exec(
        select(ReturnRequest)
        .where(ReturnRequest.user_id == user.id)
        .order_by(ReturnRequest.request_date.desc())
    ).all()


def update_return_status(
    session: Session,
    return_id: int,
    new_status: ReturnStatus,
    admin_notes: Optional[str] = None,
) -> ReturnRequest:
    """Admin transition: REQUESTED -> APPROVED/REJECTED, APPROVED -> PROCESSED."""
    return_request = session.get(ReturnRequest, return_id)
    if not return_request:
        raise NotFoundError("Return request not found")

    current = ReturnStatus(return_request.status)
    new_status = ReturnStatus(new_status)

    if new_status not in RETURN_TRANSITIONS[current]:
        raise ValidationError(
            f"Cannot change return status from {current.value} to {new_status.value}"
        )

    now = datetime.utcnow()
    return_request.status = new_status
    return_request.updated_at = now

    if return_request.processed_date is None:
        return_request.processed_date = now

    if admin_notes is not None:
        return_request.admin_notes = admin_notes

    session.add(return_request)
    session.commit()
    session.refresh(return_request)

    logger.info(f"Return {return_request.return_number} moved {current.value} -> {new_status.value}")
    return return_request
