from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.constants.order_status import ReturnStatus

class ReturnRequestCreate(BaseModel):
    order_id: Optional[int] = None
    book_id: Optional[int] = None
    quantity: Optional[int] = None
    reason: Optional[str] = None

class ReturnStatusUpdate(BaseModel):
    status: ReturnStatus
    admin_notes: Optional[str] = None

class ReturnRead(BaseModel):
    id: int
    return_number: str
    order_id: int
    book_id: int
    quantity: int
    reason: str
    status: ReturnStatus
    refund_amount: Decimal
    request_date: datetime
    processed_date: Optional[datetime] = None
    admin_notes: Optional[str] = None

    class Config:
        from_attributes = True
