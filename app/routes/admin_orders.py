from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.database import get_session
from app.models.user import User
from app.schemas.orders_schemas import OrderRead, OrderStatusUpdate
from app.schemas.return_schemas import ReturnRead, ReturnStatusUpdate
from app.services import order_service, return_service
from app.utils.token import get_current_admin

router = APIRouter()


@router.patch("/orders/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    return order_service.update_order_status(session, order_id, data.status)


@router.patch("/returns/{return_id}/status", response_model=ReturnRead)
def update_return_status(
    return_id: int,
    data: ReturnStatusUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    return return_service.update_return_status(
        session, return_id, data.status, admin_notes=data.admin_notes
    )
