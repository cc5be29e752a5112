from typing import List
from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.database import get_session
from app.models.user import User
from app.schemas.book_schemas import BookSummary
from app.services import recommendation_service
from app.utils.token import get_current_user

router = APIRouter()


@router.get("/", response_model=List[BookSummary])
def get_recommendations(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return recommendation_service.get_recommendations(session, current_user)
