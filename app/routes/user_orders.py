from typing import List
from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.database import get_session
from app.errors import ForbiddenError
from app.models.user import User
from app.schemas.orders_schemas import OrderRead
from app.services import order_service
from app.utils.token import get_current_user

router = APIRouter()


@router.get("/", response_model=List[OrderRead])
def get_order_history(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return order_service.get_order_history(session, current_user)


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return order_service.get_order(session, current_user, order_id)


# Orders only come from the purchase actions and only admins change them

@router.post("/")
def create_order(current_user: User = Depends(get_current_user)):
    raise ForbiddenError("Orders must be created through the purchaseBooks action")


@router.api_route("/{order_id}", methods=["PUT", "PATCH"])
def modify_order(order_id: int, current_user: User = Depends(get_current_user)):
    raise ForbiddenError("Orders cannot be modified by customers")


@router.delete("/{order_id}")
def delete_order(order_id: int, current_user: User = Depends(get_current_user)):
    raise ForbiddenError("Orders cannot be deleted by customers")
