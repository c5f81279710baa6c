"""Shared test fixtures and helpers."""

from datetime import date, datetime
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agenda.database import enable_sqlite_fk, get_db
from agenda.main import app
from agenda.models import Base, Bookings, Locations, Services
from agenda.redis_client import get_redis
from agenda.schemas.schedule import LocationSchedule, parse_location_schedule
from agenda.services.booking_store import BookingStore
from agenda.services.slots import BookingConfig
from agenda.services.slots.intervals import BookingSnapshot

# 2030-01-07 is a Monday
MONDAY = date(2030, 1, 7)
BEFORE_MONDAY = datetime(2030, 1, 6, 12, 0)

WEEKDAYS_8_TO_18 = {
    "weekly": {
        key: {"active": True, "ranges": [{"start": "08:00", "end": "18:00"}]}
        for key in ("mon", "tue", "wed", "thu", "fri")
    },
    "exceptions": [],
}

EVERY_DAY_8_TO_18 = {
    "weekly": {
        key: {"active": True, "ranges": [{"start": "08:00", "end": "18:00"}]}
        for key in ("sun", "mon", "tue", "wed", "thu", "fri", "sat")
    },
    "exceptions": [],
}


@pytest.fixture
def config():
    return BookingConfig()


@pytest.fixture
def weekday_schedule() -> LocationSchedule:
    return parse_location_schedule(WEEKDAYS_8_TO_18)


def make_booking(
    time: str,
    duration: Optional[int] = 30,
    status: str = "approved",
    booking_id: Optional[int] = None,
    location_id: int = 1,
    booking_date: date = MONDAY,
    version: int = 0,
) -> BookingSnapshot:
    """Helper to create a BookingSnapshot."""
    return BookingSnapshot(
        id=booking_id,
        location_id=location_id,
        date=booking_date.isoformat(),
        time=time,
        duration_minutes=duration,
        status=status,
        version=version,
    )


# ── Database ─────────────────────────────────────────────────────────────


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_fk)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return BookingStore(db)


def add_location(db, schedule=None, **fields) -> Locations:
    obj = Locations(
        name=fields.pop("name", "Centro"),
        schedule=parse_location_schedule(schedule or WEEKDAYS_8_TO_18).to_json(),
        **fields,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def add_service(db, duration: int = 30, allowed: str = "[]", **fields) -> Services:
    obj = Services(
        name=fields.pop("name", "Consulta"),
        duration_minutes=duration,
        allowed_location_ids=allowed,
        **fields,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def add_booking(
    db,
    location_id: int,
    time: str,
    status: str = "pending_approval",
    booking_date: date = MONDAY,
    duration: int = 30,
    **fields,
) -> Bookings:
    obj = Bookings(
        location_id=location_id,
        client_name=fields.pop("client_name", "Maria"),
        date=booking_date.isoformat(),
        time=time,
        duration_minutes=duration,
        status=status,
        **fields,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


# ── API ──────────────────────────────────────────────────────────────────


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()
