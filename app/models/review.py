from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from typing import Optional
from datetime import datetime

class Review(SQLModel, table=True):
    # one review per user and book
    __table_args__ = (UniqueConstraint("book_id", "user_id", name="uq_review_book_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    book_id: int = Field(foreign_key="book.id", index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None
    is_verified_purchase: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
