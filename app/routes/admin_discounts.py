from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session
from app.database import get_session
from app.models.discount_code import DiscountCode
from app.models.user import User
from app.schemas.discount_schemas import DiscountCodeCreate, DiscountCodeUpdate
from app.schemas.orders_schemas import MessageResponse
from app.services import discount_service
from app.utils.pagination import paginate
from app.utils.token import get_current_admin

router = APIRouter()


@router.get("/")
def list_discount_codes(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    return paginate(
        session=session,
        query=discount_service.discount_codes_query(),
        page=page,
        limit=limit,
    )


@router.post("/", response_model=DiscountCode, status_code=status.HTTP_201_CREATED)
def create_discount_code(
    data: DiscountCodeCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    return discount_service.create_discount_code(session, data)


@router.patch("/{discount_id}", response_model=DiscountCode)
def update_discount_code(
    discount_id: int,
    data: DiscountCodeUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    return discount_service.update_discount_code(session, discount_id, data)


@router.post("/{discount_id}/activate", response_model=MessageResponse)
def activate_discount(
    discount_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    return {"message": discount_service.set_discount_active(session, discount_id, True)}


@router.post("/{discount_id}/deactivate", response_model=MessageResponse)
def deactivate_discount(
    discount_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    return {"message": discount_service.set_discount_active(session, discount_id, False)}
