from sqlmodel import SQLModel, Field ,Relationship
from sqlalchemy import CheckConstraint
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal


if TYPE_CHECKING:
    from .category import Category

class Book(SQLModel, table=True):
    __table_args__ = (CheckConstraint("stock >= 0", name="ck_book_stock_non_negative"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    author: str = Field(default="Unknown")

    #Shop Details
    price: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2, ge=0)
    stock: int = Field(default=0, ge=0)

    #timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    #category
    category_id:Optional[int] = Field(default=None ,foreign_key="category.id")
    category: Optional["Category"] = Relationship(back_populates="books")

    @property
    def in_stock(self) -> bool:
         return self.stock is not None and self.stock > 0
