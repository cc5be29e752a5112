"""Pytest fixtures for the bookstore tests."""

import os

# must be set before app.config is imported
os.environ.setdefault("SQLALCHEMY_DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import app.models  # noqa: F401
from app.constants.order_status import DiscountType
from app.database import get_session
from app.main import app as fastapi_app
from app.models.book import Book
from app.models.category import Category
from app.models.discount_code import DiscountCode
from app.models.user import User
from app.utils.token import create_access_token


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    """Test client sharing the test session with the app."""

    def get_session_override():
        return session

    fastapi_app.dependency_overrides[get_session] = get_session_override
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


def _make_user(session, username, role="user"):
    user = User(username=username, email=f"{username}@example.com", role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def user(session):
    return _make_user(session, "alice")


@pytest.fixture
def other_user(session):
    return _make_user(session, "bob")


@pytest.fixture
def admin(session):
    return _make_user(session, "admin", role="admin")


def auth_headers(user):
    token = create_access_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_category(session):
    def _make(name="Fiction"):
        category = Category(name=name)
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    return _make


@pytest.fixture
def make_book(session):
    def _make(title="Dune", price="19.99", stock=5, author="Frank Herbert", category=None):
        book = Book(
            title=title,
            author=author,
            price=Decimal(price),
            stock=stock,
            category_id=category.id if category else None,
        )
        session.add(book)
        session.commit()
        session.refresh(book)
        return book

    return _make


@pytest.fixture
def make_discount(session):
    def _make(
        code="SAVE10",
        discount_type=DiscountType.PERCENTAGE,
        value="10",
        min_order="0",
        max_discount=None,
        usage_limit=None,
        used_count=0,
        is_active=True,
        valid_from=None,
        valid_to=None,
    ):
        now = datetime.utcnow()
        discount = DiscountCode(
            code=code,
            discount_type=discount_type,
            discount_value=Decimal(value),
            valid_from=valid_from or now - timedelta(days=1),
            valid_to=valid_to or now + timedelta(days=30),
            min_order_amount=Decimal(min_order),
            max_discount=Decimal(max_discount) if max_discount is not None else None,
            usage_limit=usage_limit,
            used_count=used_count,
            is_active=is_active,
        )
        session.add(discount)
        session.commit()
        session.refresh(discount)
        return discount

    return _make
