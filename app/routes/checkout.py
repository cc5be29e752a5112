from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.database import get_session
from app.models.user import User
from app.schemas.discount_schemas import DiscountValidateRequest, DiscountValidation
from app.schemas.orders_schemas import (
    MessageResponse,
    OrderTotalRequest,
    OrderTotalResponse,
    PurchaseRequest,
)
from app.services import discount_service, order_service
from app.utils.token import get_current_user

router = APIRouter()


@router.post("/purchase", response_model=MessageResponse)
def purchase_books(
    data: PurchaseRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    message = order_service.purchase_books(
        session,
        current_user,
        data.items,
        discount_code=data.discount_code,
        shipping_address=data.shipping_address,
        billing_address=data.billing_address,
        customer_email=data.customer_email,
        customer_phone=data.customer_phone,
    )
    return {"message": message}


@router.post("/calculate-total", response_model=OrderTotalResponse)
def calculate_order_total(
    data: OrderTotalRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return order_service.calculate_order_total(session, data.items, data.discount_code)


# Preview only: never touches the usage counter
@router.post("/validate-discount", response_model=DiscountValidation)
def validate_discount_code(
    data: DiscountValidateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return discount_service.validate_discount_code(session, data.discount_code, data.order_total)
