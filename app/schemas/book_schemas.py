from pydantic import BaseModel
from typing import Optional
from decimal import Decimal


class BookSummary(BaseModel):
    id: int
    title: str
    author: str
    price: Decimal
    stock: int
    category_id: Optional[int] = None

    class Config:
        from_attributes = True
