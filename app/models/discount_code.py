from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.constants.order_status import DiscountType


class DiscountCode(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(index=True, unique=True)
    description: Optional[str] = None

    discount_type: DiscountType
    discount_value: Decimal = Field(max_digits=10, decimal_places=2)

    valid_from: datetime
    valid_to: datetime

    min_order_amount: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    max_discount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)  # PERCENTAGE only

    usage_limit: Optional[int] = None
    used_count: int = Field(default=0)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
