from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Index, UniqueConstraint, text
from typing import List, Optional
from datetime import datetime

from app.constants.order_status import CartStatus


class Cart(SQLModel, table=True):
    # at most one ACTIVE cart per user
    __table_args__ = (
        Index(
            "uq_cart_active_user",
            "user_id",
            unique=True,
            sqlite_where=text("status = 'ACTIVE'"),
            postgresql_where=text("status = 'ACTIVE'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    status: CartStatus = Field(default=CartStatus.ACTIVE)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    items: List["CartItem"] = Relationship(back_populates="cart")


class CartItem(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("cart_id", "book_id", name="uq_cartitem_cart_book"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    cart_id: int = Field(foreign_key="cart.id", index=True)
    book_id: int = Field(foreign_key="book.id")
    quantity: int = 1
    created_at: datetime = Field(default_factory=datetime.utcnow)

    cart: Optional[Cart] = Relationship(back_populates="items")
