# app/services/order_service.py
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence
from sqlalchemy import update
from sqlmodel import Session, select

from app.constants.order_status import ALLOWED_TRANSITIONS, CartStatus, OrderStatus
from app.database import transaction
from app.errors import NotFoundError, ValidationError
from app.models.book import Book
from app.models.cart import Cart, CartItem
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.user import User
from app.schemas.orders_schemas import OrderTotalResponse, PurchaseItem
from app.services import cart_service, catalog_service, discount_service
from app.utils.money import format_money, round_money

logger = logging.getLogger(__name__)


def generate_order_number(prefix: str = "ORD") -> str:
    """Unique, human readable id: <prefix>-<epoch millis>-<5 hex chars>."""
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:5].upper()}"


@dataclass
class PricedLine:
    book: Book
    quantity: int
    unit_price: Decimal
    total_price: Decimal


def _price_items(session: Session, items: Sequence[PurchaseItem]):
    lines: List[PricedLine] = []
    original_amount = Decimal("0")

    for item in items:
        if item.quantity is None or item.quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        book = catalog_service.get_book(session, item.book_id)
        if not book:
            raise NotFoundError(f"Book with ID {item.book_id} not found")

        if book.stock < item.quantity:
            raise catalog_service.insufficient_stock(book, item.quantity)

        line_total = book.price * item.quantity
        original_amount += line_total

        lines.append(PricedLine(
            book=book,
            quantity=item.quantity,
            unit_price=book.price,
            total_price=round_money(line_total),
        ))

    return lines, round_money(original_amount)


def _place_order(
    session: Session,
    user: User,
    items: Sequence[PurchaseItem],
    discount_code: Optional[str] = None,
    shipping_address: Optional[str] = None,
    billing_address: Optional[str] = None,
    customer_email: Optional[str] = None,
    customer_phone: Optional[str] = None,
):
    """Validate, price and write an order. The caller owns the transaction."""
    if not items:
        raise ValidationError("No items provided for purchase")

    lines, original_amount = _price_items(session, items)

    discount_amount = Decimal("0.00")
    final_amount = original_amount
    applied_discount = None
    discount_note = ""

    if discount_code:
        validation = discount_service.validate_discount_code(session, discount_code, original_amount)

        # an invalid code is ignored and the order goes through at full price
        if validation.is_valid:
            discount = discount_service.get_discount_by_code(session, discount_code)

            if discount_service.redeem_discount_code(session, discount):
                applied_discount = discount
                discount_amount = validation.discount_amount
                final_amount = validation.final_amount
                discount_note = (
                    f" with {discount_code} discount applied "
                    f"(saved {format_money(discount_amount)})"
                )

    order = Order(
        order_number=generate_order_number(),
        user_id=user.id,
        order_date=datetime.utcnow(),
        status=OrderStatus.PENDING,
        original_amount=original_amount,
        discount_amount=discount_amount,
        total_amount=final_amount,
        applied_discount_code_id=applied_discount.id if applied_discount else None,
        shipping_address=shipping_address,
        billing_address=billing_address,
        customer_email=customer_email,
        customer_phone=customer_phone,
    )
    session.add(order)
    session.flush()

    for line in lines:
        session.add(OrderItem(
            order_id=order.id,
            book_id=line.book.id,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.total_price,
        ))
        catalog_service.reserve_stock(session, line.book.id, line.quantity)

    logger.info(
        f"Order {order.order_number} placed by user {user.id}: "
        f"{len(lines)} lines, total {final_amount}"
    )

    message = (
        f"Order {order.order_number} created successfully with total amount "
        f"{format_money(final_amount)}{discount_note}"
    )
    return order, message


def purchase_books(
    session: Session,
    user: User,
    items: Sequence[PurchaseItem],
    discount_code: Optional[str] = None,
    shipping_address: Optional[str] = None,
    billing_address: Optional[str] = None,
    customer_email: Optional[str] = None,
    customer_phone: Optional[str] = None,
) -> str:
    """
    Turn a list of (book, quantity) lines into a PENDING order.

    Order header, order lines, stock decrements and the discount usage
    increment commit together; any failure leaves none of them behind.
    """
    with transaction(session):
        _, message = _place_order(
            session,
            user,
            items,
            discount_code=discount_code,
            shipping_address=shipping_address,
            billing_address=billing_address,
            customer_email=customer_email,
            customer_phone=customer_phone,
        )
    return message


def purchase_from_cart(
    session: Session,
    user: User,
    discount_code: Optional[str] = None,
    shipping_address: Optional[str] = None,
    billing_address: Optional[str] = None,
    customer_email: Optional[str] = None,
    customer_phone: Optional[str] = None,
) -> str:
    if not shipping_address or not billing_address or not customer_email or not customer_phone:
        raise ValidationError(
            "Shipping address, billing address, customer email, and customer phone are required"
        )

    cart = cart_service.get_active_cart(session, user)
    if not cart:
        raise NotFoundError("Active cart not found")

    cart_items = session.exec(
        select(CartItem).where(CartItem.cart_id == cart.id).order_by(CartItem.id)
    ).all()

    if not cart_items:
        raise ValidationError("Cart is empty")

    items = [PurchaseItem(book_id=c.book_id, quantity=c.quantity) for c in cart_items]

    with transaction(session):
        # claim the cart first so a second checkout of the same cart finds nothing
        claimed = session.execute(
            update(Cart)
            .where(Cart.id == cart.id, Cart.status == CartStatus.ACTIVE)
            .values(status=CartStatus.CONVERTED, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount == 0:
            raise NotFoundError("Active cart not found")

        _, message = _place_order(
            session,
            user,
            items,
            discount_code=discount_code,
            shipping_address=shipping_address,
            billing_address=billing_address,
            customer_email=customer_email,
            customer_phone=customer_phone,
        )
        cart_service.delete_items(session, cart)

    logger.info(f"Cart {cart.id} converted for user {user.id}")
    return message.replace("created successfully", "created successfully from cart")


def calculate_order_total(
    session: Session,
    items: Sequence[PurchaseItem],
    discount_code: Optional[str] = None,
) -> OrderTotalResponse:
    zero = Decimal("0.00")

    if not items:
        return OrderTotalResponse(
            original_amount=zero,
            discount_amount=zero,
            total_amount=zero,
            is_valid_discount=False,
        )

    original_amount = Decimal("0")
    for item in items:
        if item.quantity is None or item.quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        book = catalog_service.get_book(session, item.book_id)
        if not book:
            continue  # unknown books are left out of the quote
        original_amount += book.price * item.quantity

    original_amount = round_money(original_amount)

    if discount_code:
        validation = discount_service.validate_discount_code(session, discount_code, original_amount)
        if validation.is_valid:
            return OrderTotalResponse(
                original_amount=original_amount,
                discount_amount=validation.discount_amount,
                total_amount=validation.final_amount,
                is_valid_discount=True,
            )

    return OrderTotalResponse(
        original_amount=original_amount,
        discount_amount=zero,
        total_amount=original_amount,
        is_valid_discount=False,
    )


def get_order_history(session: Session, user: User) -> List[Order]:
    return session.exec(
        select(Order)
        .where(Order.user_id == user.id)
        .order_by(Order.order_date.desc(), Order.id.desc())
    ).all()


def get_order(session: Session, user: User, order_id: int) -> Order:
    order = session.get(Order, order_id)

    if not order or order.user_id != user.id:
        raise NotFoundError("Order not found")

    return order


def update_order_status(session: Session, order_id: int, new_status: OrderStatus) -> Order:
    """Admin-only status change along ALLOWED_TRANSITIONS."""
    order = session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")

    current = OrderStatus(order.status)
    new_status = OrderStatus(new_status)

    if new_status not in ALLOWED_TRANSITIONS[current]:
        raise ValidationError(
            f"Cannot change order status from {current.value} to {new_status.value}"
        )

    now = datetime.utcnow()
    order.status = new_status
    order.updated_at = now

    if new_status == OrderStatus.DELIVERED:
        order.delivered_date = now
    elif new_status == OrderStatus.CANCELLED:
        order.cancelled_date = now

    session.add(order)
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.order_number} moved {current.value} -> {new_status.value}")
    return order
