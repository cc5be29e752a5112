from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.constants.order_status import DiscountType


class DiscountValidateRequest(BaseModel):
    discount_code: Optional[str] = None
    order_total: Optional[Decimal] = None


class DiscountValidation(BaseModel):
    is_valid: bool
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = None
    discount_amount: Decimal
    final_amount: Decimal
    message: str


class DiscountCodeCreate(BaseModel):
    code: Optional[str] = None
    description: Optional[str] = None
    # kept as plain str so an unknown type gets our own 400 message
    discount_type: Optional[str] = None
    discount_value: Optional[Decimal] = None
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    min_order_amount: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    is_active: Optional[bool] = None


class DiscountCodeUpdate(BaseModel):
    code: Optional[str] = None
    description: Optional[str] = None
    discount_value: Optional[Decimal] = None
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    min_order_amount: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
