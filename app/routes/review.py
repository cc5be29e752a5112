from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from app.database import get_session
from app.models.user import User
from app.schemas.orders_schemas import MessageResponse
from app.schemas.review_schemas import CanReviewResponse, ReviewCreate
from app.services import review_service
from app.utils.token import get_current_user


router = APIRouter()


# ---------------------------------------------------------
# CREATE A REVIEW
# ---------------------------------------------------------

@router.post("/", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def submit_review(
    data: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    message = review_service.submit_review(
        session,
        current_user,
        data.book_id,
        data.rating,
        title=data.title,
        comment=data.comment,
    )
    return {"message": message}


# ---------------------------------------------------------
# CAN THE USER REVIEW THIS BOOK
# ---------------------------------------------------------

@router.get("/can-review/{book_id}", response_model=CanReviewResponse)
def can_review(
    book_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return {
        "book_id": book_id,
        "can_review": review_service.can_review(session, current_user, book_id),
    }
