"""
Pytest configuration and fixtures

Database tests run against a private in-memory SQLite engine, created
fresh for each test. Nothing touches the configured DATABASE_URL.
"""
import pytest
import sys
import os
from uuid import uuid4
from datetime import date

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import Base, make_engine
from tests.plan_scenario_helpers import build_weekly_history


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh in-memory database per test.

    StaticPool keeps the single connection alive so every session sees
    the same in-memory database.
    """
    import models  # noqa: F401  (registers tables on Base.metadata)

    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_athlete(db_session):
    from models import Athlete

    athlete = Athlete(display_name="Test Athlete")
    db_session.add(athlete)
    db_session.commit()
    db_session.refresh(athlete)
    return athlete


@pytest.fixture
def athlete_id():
    return uuid4()


@pytest.fixture
def as_of():
    """Reference date for history builders (a Monday)."""
    return date(2026, 3, 2)


@pytest.fixture
def steady_history(as_of):
    """12 weeks averaging 30 km/week, no hard efforts."""
    return build_weekly_history(as_of)
