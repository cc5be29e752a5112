# app/services/cart_service.py
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.constants.order_status import CartStatus, MAX_CART_ITEM_QUANTITY
from app.errors import NotFoundError, ValidationError
from app.models.book import Book
from app.models.cart import Cart, CartItem
from app.models.user import User
from app.schemas.cart_schemas import CartActionResponse, CartLine, CartSummaryResponse
from app.services import catalog_service
from app.utils.money import format_money, round_money

logger = logging.getLogger(__name__)


@dataclass
class CartTotals:
    item_count: int
    total: Decimal


def get_active_cart(session: Session, user: User) -> Optional[Cart]:
    return session.exec(
        select(Cart).where(
            Cart.user_id == user.id,
            Cart.status == CartStatus.ACTIVE,
        )
    ).first()


def get_or_create_active_cart(session: Session, user: User) -> Cart:
    cart = get_active_cart(session, user)
    if cart:
        return cart

    # the partial unique index on (user_id) WHERE status = 'ACTIVE' decides
    # the winner when two requests create a cart at the same time
    try:
        with session.begin_nested():
            cart = Cart(user_id=user.id, status=CartStatus.ACTIVE)
            session.add(cart)
    except IntegrityError:
        logger.info(f"Active cart for user {user.id} created concurrently, reusing it")
        cart = get_active_cart(session, user)

    return cart


def _validate_quantity(quantity: Optional[int]):
    if quantity is None:
        raise ValidationError("Quantity is required")

    if quantity < 1 or quantity > MAX_CART_ITEM_QUANTITY:
        raise ValidationError(f"Quantity must be between 1 and {MAX_CART_ITEM_QUANTITY}")


def _get_owned_item(session: Session, user: User, item_id: int) -> CartItem:
    item = session.get(CartItem, item_id)
    if not item:
        raise NotFoundError("Cart item not found")

    cart = session.get(Cart, item.cart_id)
    # someone else's item looks exactly like a missing one
    if not cart or cart.user_id != user.id:
        raise NotFoundError("Cart item not found")

    return item


def compute_totals(session: Session, cart: Cart) -> CartTotals:
    """Totals from the live book prices, never from a cached value on the cart."""
    rows = session.exec(
        select(CartItem, Book)
        .join(Book, CartItem.book_id == Book.id)
        .where(CartItem.cart_id == cart.id)
    ).all()

    item_count = 0
    total = Decimal("0")

    for cart_item, book in rows:
        item_count += cart_item.quantity
        total += book.price * cart_item.quantity

    return CartTotals(item_count=item_count, total=round_money(total))


def _response(session: Session, cart: Cart, message: str) -> CartActionResponse:
    totals = compute_totals(session, cart)
    return CartActionResponse(
        success=True,
        message=message,
        cart_item_count=totals.item_count,
        cart_total=totals.total,
    )


def _find_item(session: Session, cart: Cart, book_id: int) -> Optional[CartItem]:
    return session.exec(
        select(CartItem).where(
            CartItem.cart_id == cart.id,
            CartItem.book_id == book_id
        )
    ).first()


def _merge_quantity(session: Session, item: CartItem, book: Book, quantity: int) -> str:
    new_quantity = item.quantity + quantity

    if new_quantity > book.stock:
        raise ValidationError(
            f"Cannot add {quantity} more. Total would exceed available stock of {book.stock}"
        )

    if new_quantity > MAX_CART_ITEM_QUANTITY:
        raise ValidationError(f"Maximum quantity per item is {MAX_CART_ITEM_QUANTITY}")

    item.quantity = new_quantity
    session.add(item)
    return f'Cart updated - "{book.title}" quantity increased to {new_quantity}'


def add_item(session: Session, user: User, book_id: Optional[int], quantity: Optional[int]) -> CartActionResponse:
    if not book_id or quantity is None:
        raise ValidationError("Book ID and quantity are required")

    _validate_quantity(quantity)

    book = catalog_service.get_book(session, book_id)
    if not book:
        raise NotFoundError(f"Book with ID {book_id} not found")

    if book.stock < quantity:
        raise catalog_service.insufficient_stock(book, quantity)

    cart = get_or_create_active_cart(session, user)

    existing_item = _find_item(session, cart, book.id)

    if not existing_item:
        # uq_cartitem_cart_book decides between two first adds of the same book
        try:
            with session.begin_nested():
                session.add(CartItem(cart_id=cart.id, book_id=book.id, quantity=quantity))
            message = "Book added to cart successfully"
        except IntegrityError:
            logger.info(f"Book {book.id} added to cart {cart.id} concurrently, merging")
            existing_item = _find_item(session, cart, book.id)

    if existing_item:
        message = _merge_quantity(session, existing_item, book, quantity)

    cart.updated_at = datetime.utcnow()
    session.add(cart)
    session.commit()

    logger.info(f"User {user.id} cart {cart.id}: +{quantity} of book {book.id}")
    return _response(session, cart, message)


def update_item(session: Session, user: User, item_id: int, quantity: Optional[int]) -> CartActionResponse:
    _validate_quantity(quantity)

    item = _get_owned_item(session, user, item_id)

    book = catalog_service.get_book(session, item.book_id)
    if not book:
        raise NotFoundError("Book not found")

    if book.stock < quantity:
        raise catalog_service.insufficient_stock(book, quantity)

    item.quantity = quantity
    session.add(item)
    session.commit()

    cart = session.get(Cart, item.cart_id)
    return _response(session, cart, "Cart item updated successfully")


def remove_item(session: Session, user: User, item_id: int) -> CartActionResponse:
    item = _get_owned_item(session, user, item_id)
    cart = session.get(Cart, item.cart_id)

    session.delete(item)
    session.commit()

    return _response(session, cart, "Item removed from cart successfully")


def delete_items(session: Session, cart: Cart) -> None:
    """Remove every line of the cart without committing."""
    session.execute(delete(CartItem).where(CartItem.cart_id == cart.id))


def clear(session: Session, user: User) -> CartActionResponse:
    cart = get_active_cart(session, user)

    # clearing an empty or missing cart is not an error
    if cart:
        delete_items(session, cart)
        session.commit()
        logger.info(f"Cleared cart {cart.id} for user {user.id}")

    return CartActionResponse(
        success=True,
        message="Cart cleared successfully",
        cart_item_count=0,
        cart_total=Decimal("0.00"),
    )


def get_cart_summary(session: Session, user: User) -> CartSummaryResponse:
    cart = get_active_cart(session, user)

    rows = []
    if cart:
        rows = session.exec(
            select(CartItem, Book)
            .join(Book, CartItem.book_id == Book.id)
            .where(CartItem.cart_id == cart.id)
            .order_by(CartItem.id)
        ).all()

    if not rows:
        return CartSummaryResponse(
            success=True,
            message="Your cart is empty.",
            cart_item_count=0,
            cart_total=Decimal("0.00"),
        )

    lines = []
    text = "Cart Summary:\n\n"

    for cart_item, book in rows:
        line_total = round_money(book.price * cart_item.quantity)
        lines.append(CartLine(
            item_id=cart_item.id,
            book_id=book.id,
            title=book.title,
            author=book.author,
            quantity=cart_item.quantity,
            unit_price=book.price,
            line_total=line_total,
        ))
        text += f"• {book.title} by {book.author}\n"
        text += f"  Quantity: {cart_item.quantity} × {format_money(book.price)} = {format_money(line_total)}\n\n"

    totals = compute_totals(session, cart)
    text += f"Total Items: {totals.item_count}\n"
    text += f"Total Amount: {format_money(totals.total)}"

    return CartSummaryResponse(
        success=True,
        message=f"Cart contains {totals.item_count} items with total amount {format_money(totals.total)}",
        cart_item_count=totals.item_count,
        cart_total=totals.total,
        summary=text,
        items=lines,
    )
