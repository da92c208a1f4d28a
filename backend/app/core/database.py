import logging
from contextlib import contextmanager

from sqlalchemy import text
from sqlmodel import SQLModel, create_engine, Session
from app.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,  # Check connection liveliness
        pool_recycle=3600    # Recycle connections every hour
    )


engine = build_engine(settings.DATABASE_URL)


def create_db_and_tables(bind=None):
    # Table classes must be registered on the metadata first
    import app.models  # noqa: F401
    SQLModel.metadata.create_all(bind or engine)

def get_session():
    """FastAPI dependency for database sessions."""
    with Session(engine) as session:
        yield session

def is_connected(session: Session) -> bool:
    """Round-trip a trivial query to the primary store."""
    try:
        session.connection().execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database ping failed: {e}")
        return False

@contextmanager
def safe_session(bind=None):
    """
    Context manager for safe database transactions.
    Automatically commits on success, rollbacks on error.
    """
    with Session(bind or engine) as session:
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database transaction failed: {e}")
            raise e
        finally:
            session.close()
