from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    email: str
    role: str = Field(default="user")
    can_login: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
