# app/services/discount_service.py
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from sqlalchemy import or_, update
from sqlmodel import Session, select

from app.constants.order_status import DiscountType
from app.errors import NotFoundError, ValidationError
from app.models.discount_code import DiscountCode
from app.schemas.discount_schemas import DiscountCodeCreate, DiscountCodeUpdate, DiscountValidation
from app.utils.money import format_money, round_money, to_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # columns hold naive UTC timestamps
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def get_discount_by_code(session: Session, code: str) -> Optional[DiscountCode]:
    # case-sensitive match
    return session.exec(
        select(DiscountCode).where(DiscountCode.code == code)
    ).first()


def _rejected(order_total: Decimal, message: str) -> DiscountValidation:
    return DiscountValidation(
        is_valid=False,
        discount_amount=ZERO,
        final_amount=order_total,
        message=message,
    )


def compute_discount_amount(discount: DiscountCode, order_total: Decimal) -> Decimal:
    if discount.discount_type == DiscountType.PERCENTAGE:
        amount = order_total * to_decimal(discount.discount_value) / 100
        if discount.max_discount is not None and amount > discount.max_discount:
            amount = to_decimal(discount.max_discount)
    else:
        amount = to_decimal(discount.discount_value)
        if amount > order_total:
            amount = order_total

    return round_money(amount)


def validate_discount_code(
    session: Session,
    code: Optional[str],
    order_total,
    now: Optional[datetime] = None,
) -> DiscountValidation:
    """
    Check a code against an order subtotal and price the discount.

    Read-only: redeeming the code (bumping used_count) is done separately by
    redeem_discount_code once an order is actually placed.
    """
    if not code or order_total is None:
        return _rejected(
            to_decimal(order_total or 0),
            "Discount code and order total are required",
        )

    order_total = to_decimal(order_total)
    if order_total < 0:
        return _rejected(order_total, "Order total cannot be negative")

    now = now or datetime.utcnow()

    discount = get_discount_by_code(session, code)
    if not discount:
        return _rejected(order_total, "Invalid discount code")

    if not discount.is_active:
        return _rejected(order_total, "Discount code is inactive")

    if now < discount.valid_from or now > discount.valid_to:
        return _rejected(order_total, "Discount code has expired")

    if order_total < discount.min_order_amount:
        return _rejected(
            order_total,
            f"Minimum order amount of {format_money(discount.min_order_amount)} "
            "required for this discount code",
        )

    if discount.usage_limit is not None and discount.used_count >= discount.usage_limit:
        return _rejected(order_total, "Discount code usage limit exceeded")

    discount_amount = compute_discount_amount(discount, order_total)

    return DiscountValidation(
        is_valid=True,
        discount_type=discount.discount_type,
        discount_value=discount.discount_value,
        discount_amount=discount_amount,
        final_amount=order_total - discount_amount,
        message="Discount code is valid",
    )


def redeem_discount_code(session: Session, discount: DiscountCode) -> bool:
    """
    Take one usage slot. Returns False when the limit was reached meanwhile.

    Must run inside the purchase transaction so the increment disappears
    with a failed order.
    """
    result = session.execute(
        update(DiscountCode)
        .where(
            DiscountCode.id == discount.id,
            or_(
                DiscountCode.usage_limit.is_(None),
                DiscountCode.used_count < DiscountCode.usage_limit,
            ),
        )
        .values(used_count=DiscountCode.used_count + 1)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        logger.warning(f"Usage limit reached for discount code {discount.code} during redemption")
        return False

    logger.info(f"Redeemed discount code {discount.code}")
    return True


# Admin management

def _check_value_and_range(
    discount_type: DiscountType,
    discount_value: Optional[Decimal],
    valid_from: datetime,
    valid_to: datetime,
):
    if discount_value is not None:
        if discount_value <= 0:
            raise ValidationError("Discount value must be greater than 0")
        if discount_type == DiscountType.PERCENTAGE and discount_value > 100:
            raise ValidationError("Percentage discount cannot exceed 100%")

    if valid_from >= valid_to:
        raise ValidationError("Valid from date must be before valid to date")


def _check_limits(
    min_order_amount: Optional[Decimal],
    max_discount: Optional[Decimal],
    usage_limit: Optional[int],
):
    if min_order_amount is not None and min_order_amount < 0:
        raise ValidationError("Minimum order amount cannot be negative")

    if max_discount is not None and max_discount <= 0:
        raise ValidationError("Maximum discount must be greater than 0")

    if usage_limit is not None and usage_limit < 0:
        raise ValidationError("Usage limit cannot be negative")


def create_discount_code(session: Session, data: DiscountCodeCreate) -> DiscountCode:
    if not data.code:
        raise ValidationError("Discount code is required")
    if not data.discount_type:
        raise ValidationError("Discount type is required")
    if data.discount_value is None:
        raise ValidationError("Discount value is required")
    if not data.valid_from:
        raise ValidationError("Valid from date is required")
    if not data.valid_to:
        raise ValidationError("Valid to date is required")

    valid_from = _naive_utc(data.valid_from)
    valid_to = _naive_utc(data.valid_to)

    try:
        discount_type = DiscountType(data.discount_type)
    except ValueError:
        raise ValidationError("Invalid discount type. Must be PERCENTAGE or FIXED_AMOUNT")

    _check_value_and_range(discount_type, data.discount_value, valid_from, valid_to)
    _check_limits(data.min_order_amount, data.max_discount, data.usage_limit)

    if get_discount_by_code(session, data.code):
        raise ValidationError(f"Discount code '{data.code}' already exists")

    discount = DiscountCode(
        code=data.code,
        description=data.description,
        discount_type=discount_type,
        discount_value=data.discount_value,
        valid_from=valid_from,
        valid_to=valid_to,
        min_order_amount=data.min_order_amount or ZERO,
        max_discount=data.max_discount,
        usage_limit=data.usage_limit,
        used_count=0,
        is_active=True if data.is_active is None else data.is_active,
    )

    session.add(discount)
    session.commit()
    session.refresh(discount)

    logger.info(f"Created discount code {discount.code}")
    return discount


def update_discount_code(session: Session, discount_id: int, data: DiscountCodeUpdate) -> DiscountCode:
    discount = session.get(DiscountCode, discount_id)
    if not discount:
        raise NotFoundError("Discount code not found")

    nullable = ("description", "max_discount", "usage_limit")
    updates = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field in nullable
    }
    for key in ("valid_from", "valid_to"):
        if key in updates:
            updates[key] = _naive_utc(updates[key])

    _check_value_and_range(
        discount.discount_type,
        updates.get("discount_value"),
        updates.get("valid_from") or discount.valid_from,
        updates.get("valid_to") or discount.valid_to,
    )
    _check_limits(
        updates.get("min_order_amount", discount.min_order_amount),
        updates.get("max_discount", discount.max_discount),
        updates.get("usage_limit", discount.usage_limit),
    )

    new_code = updates.get("code")
    if new_code and new_code != discount.code:
        existing = get_discount_by_code(session, new_code)
        if existing and existing.id != discount.id:
            raise ValidationError(f"Discount code '{new_code}' already exists")

    for field, value in updates.items():
        setattr(discount, field, value)
    discount.updated_at = datetime.utcnow()

    session.add(discount)
    session.commit()
    session.refresh(discount)
    return discount


def set_discount_active(session: Session, discount_id: int, active: bool) -> str:
    discount = session.get(DiscountCode, discount_id)
    if not discount:
        raise NotFoundError("Discount code not found")

    discount.is_active = active
    discount.updated_at = datetime.utcnow()
    session.add(discount)
    session.commit()

    verb = "activated" if active else "deactivated"
    logger.info(f"Discount code {discount.code} {verb}")
    return f"Discount code '{discount.code}' {verb} successfully"


def discount_codes_query():
    return select(DiscountCode).order_by(DiscountCode.id)
