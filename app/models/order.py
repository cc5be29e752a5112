from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from app.constants.order_status import OrderStatus, PaymentStatus
from app.models.order_item import OrderItem

class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: str = Field(index=True, unique=True)
    user_id: int = Field(foreign_key="user.id", index=True)

    order_date: datetime = Field(default_factory=datetime.utcnow)
    status: OrderStatus = Field(default=OrderStatus.PENDING)
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING)

    original_amount: Decimal = Field(max_digits=10, decimal_places=2)
    discount_amount: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    total_amount: Decimal = Field(max_digits=10, decimal_places=2)
    applied_discount_code_id: Optional[int] = Field(default=None, foreign_key="discountcode.id")

    shipping_address: Optional[str] = None
    billing_address: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None

    delivered_date: Optional[datetime] = None
    cancelled_date: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    items: List["OrderItem"] = Relationship(back_populates="order")
