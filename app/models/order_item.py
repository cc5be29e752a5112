from sqlmodel import SQLModel, Field , Relationship
from typing import Optional , TYPE_CHECKING
from decimal import Decimal

if TYPE_CHECKING:
    from app.models.order import Order

class OrderItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)
    book_id: int = Field(foreign_key="book.id")

    quantity: int
    unit_price: Decimal = Field(max_digits=10, decimal_places=2)  # snapshot at purchase time
    total_price: Decimal = Field(max_digits=10, decimal_places=2)

    order: Optional["Order"] = Relationship(back_populates="items")
