from sqlmodel import SQLModel
from typing import Optional, List
from decimal import Decimal

class CartAddRequest(SQLModel):
    book_id: Optional[int] = None
    quantity: Optional[int] = None

class CartUpdateRequest(SQLModel):
    quantity: Optional[int] = None

class CartPurchaseRequest(SQLModel):
    discount_code: Optional[str] = None
    shipping_address: Optional[str] = None
    billing_address: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None

class CartLine(SQLModel):
    item_id: int
    book_id: int
    title: str
    author: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal

class CartActionResponse(SQLModel):
    success: bool = True
    message: str
    cart_item_count: Optional[int] = None
    cart_total: Optional[Decimal] = None

class CartSummaryResponse(CartActionResponse):
    summary: Optional[str] = None
    items: List[CartLine] = []
