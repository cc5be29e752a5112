from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Optional
from decimal import Decimal

from app.constants.order_status import ReturnStatus

class ReturnRequest(SQLModel, table=True):

    id: Optional[int] = Field(default=None, primary_key=True)
    return_number: str = Field(index=True, unique=True)
    order_id: int = Field(foreign_key="order.id", index=True)
    book_id: int = Field(foreign_key="book.id")
    user_id: int = Field(foreign_key="user.id", index=True)

    # Request details
    quantity: int
    reason: str
    status: ReturnStatus = Field(default=ReturnStatus.REQUESTED)

    refund_amount: Decimal = Field(max_digits=10, decimal_places=2)
    admin_notes: Optional[str] = None

    # Timestamps
    request_date: datetime = Field(default_factory=datetime.utcnow)
    processed_date: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)
