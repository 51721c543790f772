import os

# app.core.config requires DATABASE_URL at import time; tests swap in their own engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.db.session import Base, get_db
from app.main import app
from app.models.audit_log import AuditLog  # noqa: F401
from app.models.booking import Booking  # noqa: F401
from app.models.booking_seat import BookingSeat  # noqa: F401
from app.services.booking_service import create_booking
from app.services.broadcast_service import SeatBroadcaster, get_broadcaster


class RecordingBroadcaster(SeatBroadcaster):
    """Keeps every notify() call for assertions."""

    def __init__(self):
        self.calls = []

    def notify(self, showtime_id, updates):
        self.calls.append((showtime_id, [u.to_dict() for u in updates]))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def client(session_factory, broadcaster, upload_dir):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_broadcaster] = lambda: broadcaster
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_booking(db):
    def _make(seats=("A1", "A2"), showtime_id=5, movie_title="Dune", customer_name="Budi",
              customer_email="budi@example.com", total_amount=50000):
        return create_booking(
            db,
            showtime_id=showtime_id,
            movie_title=movie_title,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone="08123456789",
            seat_numbers=list(seats),
            total_amount=total_amount,
        )

    return _make
