"""
Database connection management for the plan store.

The engine itself never touches the database; only the SQLAlchemy
collaborators in services.training_plan.repository do, through sessions
from here.
"""
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker, Session
from core.config import settings
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def make_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    """
    Create an engine for `url`.

    SQLite connections get foreign keys switched on and may be shared
    across threads; other backends get a pre-ping on checkout.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)

    new_engine = create_engine(url, echo=echo, **kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(new_engine, "connect")
        def enable_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = make_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,  # Plan rows are read back after each week's commit
)


def get_db_sync() -> Session:
    """
    Session for scripts and background jobs.

    Does NOT auto-commit or auto-rollback; SqlPlanStore commits per week.
    """
    return SessionLocal()


@contextmanager
def session_scope(factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    """Session that rolls back on error and is always closed."""
    db = (factory or SessionLocal)()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database transaction error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Create all tables known to the ORM metadata."""
    import models  # noqa: F401  (registers tables on Base.metadata)
    Base.metadata.create_all(bind=bind or engine)


def check_db_connection(bind: Optional[Engine] = None) -> bool:
    """True when a trivial query succeeds."""
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
