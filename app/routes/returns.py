from typing import List
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from app.database import get_session
from app.errors import ForbiddenError
from app.models.user import User
from app.schemas.orders_schemas import MessageResponse
from app.schemas.return_schemas import ReturnRead, ReturnRequestCreate
from app.services import return_service
from app.utils.token import get_current_user

router = APIRouter()


@router.post("/request", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def request_return(
    data: ReturnRequestCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    """Customer asks to send back part of a delivered order"""
    message = return_service.request_return(
        session,
        current_user,
        data.order_id,
        data.book_id,
        data.quantity,
        data.reason,
    )
    return {"message": message}


@router.get("/", response_model=List[ReturnRead])
def list_my_returns(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return return_service.list_returns(session, current_user)


@router.post("/")
def create_return(current_user: User = Depends(get_current_user)):
    raise ForbiddenError("Returns must be created through the requestReturn action")


@router.api_route("/{return_id}", methods=["PUT", "PATCH"])
def modify_return(return_id: int, current_user: User = Depends(get_current_user)):
    raise ForbiddenError("Return requests cannot be modified after submission")


@router.delete("/{return_id}")
def delete_return(return_id: int, current_user: User = Depends(get_current_user)):
    raise ForbiddenError("Return requests cannot be deleted")
