from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.database import get_session
from app.models.user import User
from app.schemas.cart_schemas import (
    CartActionResponse,
    CartAddRequest,
    CartPurchaseRequest,
    CartSummaryResponse,
    CartUpdateRequest,
)
from app.services import cart_service, order_service
from app.utils.token import get_current_user  # JWT dependency


router = APIRouter()

# Add to Cart

@router.post("/add", response_model=CartActionResponse)
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return cart_service.add_item(session, current_user, data.book_id, data.quantity)


# View Cart

@router.get("/summary", response_model=CartSummaryResponse)
def get_cart_summary(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return cart_service.get_cart_summary(session, current_user)


# Update Cart

@router.put("/items/{item_id}", response_model=CartActionResponse)
def update_cart_item(
    item_id: int,
    data: CartUpdateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return cart_service.update_item(session, current_user, item_id, data.quantity)


# Remove from Cart

@router.delete("/items/{item_id}", response_model=CartActionResponse)
def remove_from_cart(
    item_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return cart_service.remove_item(session, current_user, item_id)


# Clear Cart

@router.delete("/clear", response_model=CartActionResponse)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return cart_service.clear(session, current_user)


# Checkout the whole cart

@router.post("/purchase", response_model=CartActionResponse)
def purchase_from_cart(
    data: CartPurchaseRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    message = order_service.purchase_from_cart(
        session,
        current_user,
        discount_code=data.discount_code,
        shipping_address=data.shipping_address,
        billing_address=data.billing_address,
        customer_email=data.customer_email,
        customer_phone=data.customer_phone,
    )
    return CartActionResponse(success=True, message=message, cart_item_count=0)
