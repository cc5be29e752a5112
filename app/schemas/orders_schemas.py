from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from app.constants.order_status import OrderStatus, PaymentStatus


class PurchaseItem(BaseModel):
    book_id: int
    quantity: int


class PurchaseRequest(BaseModel):
    items: List[PurchaseItem] = []
    discount_code: Optional[str] = None
    shipping_address: Optional[str] = None
    billing_address: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None


class OrderTotalRequest(BaseModel):
    items: List[PurchaseItem] = []
    discount_code: Optional[str] = None


class OrderTotalResponse(BaseModel):
    original_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    is_valid_discount: bool


class MessageResponse(BaseModel):
    message: str


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemRead(BaseModel):
    book_id: int
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    class Config:
        from_attributes = True


class OrderRead(BaseModel):
    id: int
    order_number: str
    order_date: datetime
    status: OrderStatus
    payment_status: PaymentStatus
    original_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    applied_discount_code_id: Optional[int] = None
    shipping_address: Optional[str] = None
    billing_address: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    delivered_date: Optional[datetime] = None
    cancelled_date: Optional[datetime] = None
    items: List[OrderItemRead] = []

    class Config:
        from_attributes = True
