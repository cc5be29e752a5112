from contextlib import contextmanager
from sqlmodel import SQLModel, create_engine, Session
from app.config import settings


engine = create_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,      # checks dead connections
    pool_recycle=1800        # refresh every 30 min
)


def create_db_and_tables():
  from app.models import user, category, book, cart, discount_code, order, order_item, return_request, review
  SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session


@contextmanager
def transaction(session: Session):
    """
    Unit of work: every write made inside the block commits together,
    or is rolled back together when the block raises.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
