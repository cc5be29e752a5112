"""Tests for the shopping cart."""

from decimal import Decimal

import pytest
from sqlmodel import Session, select

from app.constants.order_status import CartStatus
from app.errors import NotFoundError, ValidationError
from app.models.cart import Cart, CartItem
from app.services import cart_service


def _items(session, cart):
    return session.exec(select(CartItem).where(CartItem.cart_id == cart.id)).all()


class TestActiveCart:
    def test_created_lazily(self, session, user):
        assert cart_service.get_active_cart(session, user) is None

        cart = cart_service.get_or_create_active_cart(session, user)
        session.commit()

        assert cart.id is not None
        assert cart.status == CartStatus.ACTIVE

    def test_reuses_existing_active_cart(self, session, user):
        first = cart_service.get_or_create_active_cart(session, user)
        session.commit()
        second = cart_service.get_or_create_active_cart(session, user)

        assert first.id == second.id
        carts = session.exec(select(Cart).where(Cart.user_id == user.id)).all()
        assert len(carts) == 1

    def test_converted_cart_is_not_reused(self, session, user):
        cart = cart_service.get_or_create_active_cart(session, user)
        cart.status = CartStatus.CONVERTED
        session.add(cart)
        session.commit()

        new_cart = cart_service.get_or_create_active_cart(session, user)
        session.commit()

        assert new_cart.id != cart.id


class TestAddItem:
    def test_add_new_book(self, session, user, make_book):
        book = make_book(price="19.99", stock=5)

        result = cart_service.add_item(session, user, book.id, 2)

        assert result.success is True
        assert result.message == "Book added to cart successfully"
        assert result.cart_item_count == 2
        assert result.cart_total == Decimal("39.98")

    def test_adding_same_book_merges_lines(self, session, user, make_book):
        book = make_book(title="Dune", stock=10)

        cart_service.add_item(session, user, book.id, 2)
        result = cart_service.add_item(session, user, book.id, 3)

        cart = cart_service.get_active_cart(session, user)
        items = _items(session, cart)
        assert len(items) == 1
        assert items[0].quantity == 5
        assert result.message == 'Cart updated - "Dune" quantity increased to 5'

    @pytest.mark.parametrize("quantity", [0, 100, -1])
    def test_quantity_out_of_range(self, session, user, make_book, quantity):
        book = make_book(stock=200)

        with pytest.raises(ValidationError, match="Quantity must be between 1 and 99"):
            cart_service.add_item(session, user, book.id, quantity)

    @pytest.mark.parametrize("quantity", [1, 99])
    def test_quantity_bounds_accepted(self, session, user, make_book, quantity):
        book = make_book(stock=200)

        result = cart_service.add_item(session, user, book.id, quantity)

        assert result.cart_item_count == quantity

    def test_missing_fields(self, session, user):
        with pytest.raises(ValidationError, match="Book ID and quantity are required"):
            cart_service.add_item(session, user, None, 1)

    def test_unknown_book(self, session, user):
        with pytest.raises(NotFoundError, match="Book with ID 404 not found"):
            cart_service.add_item(session, user, 404, 1)

    def test_more_than_stock(self, session, user, make_book):
        book = make_book(title="Dune", stock=2)

        with pytest.raises(ValidationError, match='Insufficient stock for book "Dune". Available: 2, Requested: 3'):
            cart_service.add_item(session, user, book.id, 3)

    def test_merge_exceeding_stock(self, session, user, make_book):
        book = make_book(stock=4)
        cart_service.add_item(session, user, book.id, 3)

        with pytest.raises(ValidationError, match="Total would exceed available stock of 4"):
            cart_service.add_item(session, user, book.id, 2)

    def test_merge_exceeding_item_ceiling(self, session, user, make_book):
        book = make_book(stock=500)
        cart_service.add_item(session, user, book.id, 60)

        with pytest.raises(ValidationError, match="Maximum quantity per item is 99"):
            cart_service.add_item(session, user, book.id, 40)

    def test_concurrent_first_add_merges(self, session, engine, user, make_book, monkeypatch):
        book = make_book(stock=10)
        cart = cart_service.get_or_create_active_cart(session, user)
        session.commit()
        cart_id, book_id = cart.id, book.id

        real_find_item = cart_service._find_item
        calls = []

        def find_after_competitor(current_session, current_cart, current_book_id):
            # the first lookup misses a line another request inserts right after it
            if not calls:
                calls.append(1)
                with Session(engine) as other:
                    other.add(CartItem(cart_id=cart_id, book_id=book_id, quantity=2))
                    other.commit()
                return None
            return real_find_item(current_session, current_cart, current_book_id)

        monkeypatch.setattr(cart_service, "_find_item", find_after_competitor)

        response = cart_service.add_item(session, user, book_id, 3)

        assert response.message == 'Cart updated - "Dune" quantity increased to 5'
        assert response.cart_item_count == 5
        items = _items(session, cart)
        assert len(items) == 1
        assert items[0].quantity == 5


class TestUpdateAndRemove:
    def test_update_quantity(self, session, user, make_book):
        book = make_book(price="10.00", stock=10)
        cart_service.add_item(session, user, book.id, 1)
        item = _items(session, cart_service.get_active_cart(session, user))[0]

        result = cart_service.update_item(session, user, item.id, 4)

        assert result.message == "Cart item updated successfully"
        assert result.cart_item_count == 4
        assert result.cart_total == Decimal("40.00")

    def test_update_checks_stock(self, session, user, make_book):
        book = make_book(stock=3)
        cart_service.add_item(session, user, book.id, 1)
        item = _items(session, cart_service.get_active_cart(session, user))[0]

        with pytest.raises(ValidationError, match="Insufficient stock"):
            cart_service.update_item(session, user, item.id, 5)

    def test_update_other_users_item_is_not_found(self, session, user, other_user, make_book):
        book = make_book()
        cart_service.add_item(session, user, book.id, 1)
        item = _items(session, cart_service.get_active_cart(session, user))[0]

        with pytest.raises(NotFoundError, match="Cart item not found"):
            cart_service.update_item(session, other_user, item.id, 2)

    def test_update_missing_item(self, session, user):
        with pytest.raises(NotFoundError, match="Cart item not found"):
            cart_service.update_item(session, user, 12345, 2)

    def test_remove_item(self, session, user, make_book):
        first = make_book(title="A", price="5.00")
        second = make_book(title="B", price="7.50")
        cart_service.add_item(session, user, first.id, 1)
        cart_service.add_item(session, user, second.id, 2)
        cart = cart_service.get_active_cart(session, user)
        item = next(i for i in _items(session, cart) if i.book_id == first.id)

        result = cart_service.remove_item(session, user, item.id)

        assert result.message == "Item removed from cart successfully"
        assert result.cart_item_count == 2
        assert result.cart_total == Decimal("15.00")

    def test_remove_other_users_item_is_not_found(self, session, user, other_user, make_book):
        book = make_book()
        cart_service.add_item(session, user, book.id, 1)
        item = _items(session, cart_service.get_active_cart(session, user))[0]

        with pytest.raises(NotFoundError, match="Cart item not found"):
            cart_service.remove_item(session, other_user, item.id)

        assert session.get(CartItem, item.id) is not None


class TestTotalsAndClear:
    def test_totals_follow_live_prices(self, session, user, make_book):
        book = make_book(price="10.00", stock=10)
        cart_service.add_item(session, user, book.id, 3)
        cart = cart_service.get_active_cart(session, user)

        book.price = Decimal("12.50")
        session.add(book)
        session.commit()

        totals = cart_service.compute_totals(session, cart)
        assert totals.item_count == 3
        assert totals.total == Decimal("37.50")

    def test_totals_round_to_cents(self, session, user, make_book):
        first = make_book(title="A", price="0.10", stock=10)
        second = make_book(title="B", price="0.20", stock=10)
        cart_service.add_item(session, user, first.id, 1)
        cart_service.add_item(session, user, second.id, 1)

        totals = cart_service.compute_totals(session, cart_service.get_active_cart(session, user))

        assert totals.total == Decimal("0.30")

    def test_clear_removes_all_items(self, session, user, make_book):
        cart_service.add_item(session, user, make_book(title="A").id, 1)
        cart_service.add_item(session, user, make_book(title="B").id, 2)

        result = cart_service.clear(session, user)

        assert result.message == "Cart cleared successfully"
        assert _items(session, cart_service.get_active_cart(session, user)) == []

    def test_clear_is_idempotent(self, session, user):
        assert cart_service.clear(session, user).success is True
        assert cart_service.clear(session, user).success is True


class TestCartSummary:
    def test_empty(self, session, user):
        result = cart_service.get_cart_summary(session, user)

        assert result.message == "Your cart is empty."
        assert result.cart_item_count == 0

    def test_lines_and_totals(self, session, user, make_book):
        book = make_book(title="Dune", author="Frank Herbert", price="19.99", stock=5)
        cart_service.add_item(session, user, book.id, 2)

        result = cart_service.get_cart_summary(session, user)

        assert result.message == "Cart contains 2 items with total amount $39.98"
        assert "• Dune by Frank Herbert" in result.summary
        assert "Quantity: 2 × $19.99 = $39.98" in result.summary
        assert result.items[0].line_total == Decimal("39.98")
