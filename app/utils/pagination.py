from typing import Any, List
from pydantic import BaseModel
from sqlalchemy import func
from sqlmodel import Session, select

MAX_PAGE_SIZE = 100


class Page(BaseModel):
    total_items: int
    total_pages: int
    current_page: int
    limit: int
    results: List[Any]


def paginate(*, session: Session, query, page: int = 1, limit: int = 10) -> Page:
    """Run `query` for one page; out-of-range page/limit values are clamped."""
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    total = session.exec(select(func.count()).select_from(query.subquery())).one()
    rows = session.exec(query.offset((page - 1) * limit).limit(limit)).all()

    return Page(
        total_items=total,
        total_pages=(total + limit - 1) // limit,
        current_page=page,
        limit=limit,
        results=list(rows),
    )
