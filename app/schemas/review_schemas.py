from typing import Optional
from sqlmodel import SQLModel


class ReviewCreate(SQLModel):
    book_id: Optional[int] = None
    rating: Optional[int] = None
    title: Optional[str] = None
    comment: Optional[str] = None


class CanReviewResponse(SQLModel):
    book_id: int
    can_review: bool
