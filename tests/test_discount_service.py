"""Tests for discount code validation and management."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.constants.order_status import DiscountType
from app.errors import NotFoundError, ValidationError
from app.models.discount_code import DiscountCode
from app.schemas.discount_schemas import DiscountCodeCreate, DiscountCodeUpdate
from app.services import discount_service


class TestValidateDiscountCode:
    def test_percentage_within_cap(self, session, make_discount):
        make_discount(code="SAVE10", value="10", min_order="25", max_discount="50")

        result = discount_service.validate_discount_code(session, "SAVE10", Decimal("30.00"))

        assert result.is_valid is True
        assert result.discount_type == DiscountType.PERCENTAGE
        assert result.discount_amount == Decimal("3.00")
        assert result.final_amount == Decimal("27.00")
        assert result.message == "Discount code is valid"

    def test_below_minimum_order(self, session, make_discount):
        make_discount(code="SAVE10", value="10", min_order="25", max_discount="50")

        result = discount_service.validate_discount_code(session, "SAVE10", Decimal("20.00"))

        assert result.is_valid is False
        assert result.discount_amount == Decimal("0")
        assert result.final_amount == Decimal("20.00")
        assert result.message == "Minimum order amount of $25.00 required for this discount code"

    def test_percentage_capped_at_max_discount(self, session, make_discount):
        make_discount(code="HALF", value="50", max_discount="20")

        result = discount_service.validate_discount_code(session, "HALF", Decimal("100.00"))

        assert result.discount_amount == Decimal("20.00")
        assert result.final_amount == Decimal("80.00")

    def test_percentage_rounds_half_up(self, session, make_discount):
        make_discount(code="P15", value="15")

        # 15% of 10.10 = 1.515
        result = discount_service.validate_discount_code(session, "P15", Decimal("10.10"))

        assert result.discount_amount == Decimal("1.52")
        assert result.final_amount == Decimal("8.58")

    def test_fixed_amount(self, session, make_discount):
        make_discount(code="FIVE", discount_type=DiscountType.FIXED_AMOUNT, value="5")

        result = discount_service.validate_discount_code(session, "FIVE", Decimal("30.00"))

        assert result.discount_amount == Decimal("5.00")
        assert result.final_amount == Decimal("25.00")

    def test_fixed_amount_capped_at_order_total(self, session, make_discount):
        make_discount(code="BIG", discount_type=DiscountType.FIXED_AMOUNT, value="50")

        result = discount_service.validate_discount_code(session, "BIG", Decimal("12.50"))

        assert result.is_valid is True
        assert result.discount_amount == Decimal("12.50")
        assert result.final_amount == Decimal("0.00")

    def test_missing_inputs(self, session):
        result = discount_service.validate_discount_code(session, None, Decimal("10"))
        assert result.is_valid is False
        assert result.message == "Discount code and order total are required"
        assert result.final_amount == Decimal("10")

        result = discount_service.validate_discount_code(session, "SAVE10", None)
        assert result.is_valid is False
        assert result.final_amount == Decimal("0")

    def test_negative_order_total(self, session, make_discount):
        make_discount(code="SAVE10")

        result = discount_service.validate_discount_code(session, "SAVE10", Decimal("-30.00"))

        assert result.is_valid is False
        assert result.discount_amount == Decimal("0")
        assert result.message == "Order total cannot be negative"

    def test_unknown_code(self, session):
        result = discount_service.validate_discount_code(session, "NOPE", Decimal("10"))
        assert result.is_valid is False
        assert result.message == "Invalid discount code"

    def test_code_lookup_is_case_sensitive(self, session, make_discount):
        make_discount(code="SAVE10")

        result = discount_service.validate_discount_code(session, "save10", Decimal("30"))

        assert result.message == "Invalid discount code"

    def test_inactive(self, session, make_discount):
        make_discount(code="OFF", is_active=False)

        result = discount_service.validate_discount_code(session, "OFF", Decimal("30"))

        assert result.message == "Discount code is inactive"

    def test_expired(self, session, make_discount):
        now = datetime.utcnow()
        make_discount(code="OLD", valid_from=now - timedelta(days=10), valid_to=now - timedelta(days=1))

        result = discount_service.validate_discount_code(session, "OLD", Decimal("30"))

        assert result.message == "Discount code has expired"

    def test_not_yet_valid_reports_expired(self, session, make_discount):
        now = datetime.utcnow()
        make_discount(code="SOON", valid_from=now + timedelta(days=1), valid_to=now + timedelta(days=5))

        result = discount_service.validate_discount_code(session, "SOON", Decimal("30"))

        assert result.message == "Discount code has expired"

    def test_usage_limit_exceeded(self, session, make_discount):
        make_discount(code="ONCE", usage_limit=1, used_count=1)

        result = discount_service.validate_discount_code(session, "ONCE", Decimal("30"))

        assert result.message == "Discount code usage limit exceeded"

    def test_inactive_checked_before_expiry(self, session, make_discount):
        now = datetime.utcnow()
        make_discount(
            code="BOTH",
            is_active=False,
            valid_from=now - timedelta(days=10),
            valid_to=now - timedelta(days=1),
        )

        result = discount_service.validate_discount_code(session, "BOTH", Decimal("30"))

        assert result.message == "Discount code is inactive"

    def test_validation_is_idempotent(self, session, make_discount):
        discount = make_discount(code="SAVE10", usage_limit=5)

        first = discount_service.validate_discount_code(session, "SAVE10", Decimal("30"))
        second = discount_service.validate_discount_code(session, "SAVE10", Decimal("30"))

        assert first == second
        session.refresh(discount)
        assert discount.used_count == 0


class TestRedeemDiscountCode:
    def test_increments_used_count(self, session, make_discount):
        discount = make_discount(code="SAVE10", usage_limit=2)

        assert discount_service.redeem_discount_code(session, discount) is True
        session.commit()
        session.refresh(discount)

        assert discount.used_count == 1

    def test_refuses_when_limit_reached(self, session, make_discount):
        discount = make_discount(code="ONCE", usage_limit=1, used_count=1)

        assert discount_service.redeem_discount_code(session, discount) is False
        session.commit()
        session.refresh(discount)

        assert discount.used_count == 1

    def test_unlimited_code(self, session, make_discount):
        discount = make_discount(code="FOREVER", usage_limit=None, used_count=1000)

        assert discount_service.redeem_discount_code(session, discount) is True


def _create_payload(**overrides):
    now = datetime.utcnow()
    data = {
        "code": "NEW20",
        "discount_type": "PERCENTAGE",
        "discount_value": Decimal("20"),
        "valid_from": now,
        "valid_to": now + timedelta(days=7),
    }
    data.update(overrides)
    return DiscountCodeCreate(**data)


class TestDiscountManagement:
    def test_create_sets_defaults(self, session):
        discount = discount_service.create_discount_code(session, _create_payload())

        assert discount.id is not None
        assert discount.is_active is True
        assert discount.used_count == 0
        assert discount.min_order_amount == Decimal("0")

    def test_create_rejects_duplicate(self, session, make_discount):
        make_discount(code="NEW20")

        with pytest.raises(ValidationError, match="Discount code 'NEW20' already exists"):
            discount_service.create_discount_code(session, _create_payload())

    def test_create_rejects_bad_type(self, session):
        with pytest.raises(ValidationError, match="Invalid discount type"):
            discount_service.create_discount_code(session, _create_payload(discount_type="BOGO"))

    def test_create_rejects_non_positive_value(self, session):
        with pytest.raises(ValidationError, match="greater than 0"):
            discount_service.create_discount_code(session, _create_payload(discount_value=Decimal("0")))

    def test_create_rejects_percentage_over_100(self, session):
        with pytest.raises(ValidationError, match="cannot exceed 100%"):
            discount_service.create_discount_code(session, _create_payload(discount_value=Decimal("101")))

    def test_fixed_amount_may_exceed_100(self, session):
        discount = discount_service.create_discount_code(
            session,
            _create_payload(discount_type="FIXED_AMOUNT", discount_value=Decimal("150")),
        )
        assert discount.discount_type == DiscountType.FIXED_AMOUNT

    def test_create_rejects_inverted_dates(self, session):
        now = datetime.utcnow()
        with pytest.raises(ValidationError, match="Valid from date must be before valid to date"):
            discount_service.create_discount_code(
                session, _create_payload(valid_from=now, valid_to=now - timedelta(days=1))
            )

    def test_create_requires_code(self, session):
        with pytest.raises(ValidationError, match="Discount code is required"):
            discount_service.create_discount_code(session, _create_payload(code=None))

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"min_order_amount": Decimal("-1")}, "Minimum order amount cannot be negative"),
            ({"max_discount": Decimal("-5")}, "Maximum discount must be greater than 0"),
            ({"max_discount": Decimal("0")}, "Maximum discount must be greater than 0"),
            ({"usage_limit": -1}, "Usage limit cannot be negative"),
        ],
    )
    def test_create_rejects_bad_limits(self, session, overrides, message):
        with pytest.raises(ValidationError, match=message):
            discount_service.create_discount_code(session, _create_payload(**overrides))

        assert discount_service.get_discount_by_code(session, "NEW20") is None

    def test_update_rejects_negative_cap(self, session, make_discount):
        discount = make_discount(code="SAVE10", max_discount="20")

        with pytest.raises(ValidationError, match="Maximum discount must be greater than 0"):
            discount_service.update_discount_code(
                session, discount.id, DiscountCodeUpdate(max_discount=Decimal("-5"))
            )

        session.refresh(discount)
        assert discount.max_discount == Decimal("20")
        result = discount_service.validate_discount_code(session, "SAVE10", Decimal("30.00"))
        assert result.discount_amount == Decimal("3.00")

    def test_update_keeps_stored_limits_when_unset(self, session, make_discount):
        discount = make_discount(code="SAVE10", min_order="25", usage_limit=3)

        updated = discount_service.update_discount_code(
            session, discount.id, DiscountCodeUpdate(description="Spring sale")
        )

        assert updated.min_order_amount == Decimal("25")
        assert updated.usage_limit == 3

    def test_update_checks_merged_dates(self, session, make_discount):
        discount = make_discount(code="SAVE10")

        with pytest.raises(ValidationError, match="Valid from date must be before valid to date"):
            discount_service.update_discount_code(
                session,
                discount.id,
                DiscountCodeUpdate(valid_from=discount.valid_to + timedelta(days=1)),
            )

    def test_update_rejects_taken_code(self, session, make_discount):
        make_discount(code="TAKEN")
        discount = make_discount(code="SAVE10")

        with pytest.raises(ValidationError, match="already exists"):
            discount_service.update_discount_code(session, discount.id, DiscountCodeUpdate(code="TAKEN"))

    def test_update_unknown(self, session):
        with pytest.raises(NotFoundError):
            discount_service.update_discount_code(session, 999, DiscountCodeUpdate(usage_limit=3))

    def test_activate_and_deactivate(self, session, make_discount):
        discount = make_discount(code="SAVE10")

        message = discount_service.set_discount_active(session, discount.id, False)
        assert message == "Discount code 'SAVE10' deactivated successfully"
        assert session.get(DiscountCode, discount.id).is_active is False

        message = discount_service.set_discount_active(session, discount.id, True)
        assert message == "Discount code 'SAVE10' activated successfully"
        assert session.get(DiscountCode, discount.id).is_active is True

    def test_toggle_unknown(self, session):
        with pytest.raises(NotFoundError, match="Discount code not found"):
            discount_service.set_discount_active(session, 42, True)
