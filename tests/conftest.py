"""Test configuration and fixtures"""

import itertools
import os
from datetime import date, timedelta
from decimal import Decimal

# Settings are read at import time; point the app at SQLite before importing it
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from tourism.main import app
from tourism.database import Base, get_db
from tourism.models import (
    Category,
    Place,
    PlaceStatus,
    Reservation,
    ReservationStatus,
    User,
    UserRole,
)
from tourism.api.auth import create_access_token, get_password_hash


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite://"

_codes = itertools.count(1)


class FakeNotifier:
    """Records deliveries instead of sending mail"""

    def __init__(self, fail_for=(), raise_for=()):
        self.fail_for = set(fail_for)
        self.raise_for = set(raise_for)
        self.sent = []

    async def send(self, recipient, subject, body_html):
        if recipient in self.raise_for:
            raise ConnectionError("SMTP server unreachable")
        if recipient in self.fail_for:
            return False
        self.sent.append((recipient, subject, body_html))
        return True


@pytest.fixture
async def session_factory():
    """Fresh in-memory database shared by every session of one test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_db(session_factory):
    """Session used by fixtures and service-level tests"""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def admin_user(test_db):
    user = User(
        email="admin@example.com",
        hashed_password=get_password_hash("adminpass123"),
        full_name="Admin User",
        role=UserRole.ADMINISTRATOR,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
async def client_user(test_db):
    user = User(
        email="ana@example.com",
        hashed_password=get_password_hash("clientpass123"),
        full_name="Ana Client",
        phone="+15551234567",
        role=UserRole.CLIENT,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
async def other_client_user(test_db):
    user = User(
        email="bruno@example.com",
        hashed_password=get_password_hash("clientpass456"),
        full_name="Bruno Client",
        role=UserRole.CLIENT,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
async def category(test_db):
    category = Category(name="Hotels", description="Rooms and lodging", is_active=True)
    test_db.add(category)
    await test_db.commit()
    return category


async def _add_place(db, category, code, capacity, price):
    place = Place(
        code=code,
        name=f"Place {code}",
        category_id=category.id,
        price=Decimal(price),
        capacity=capacity,
        location="Main Street",
        status=PlaceStatus.AVAILABLE,
    )
    db.add(place)
    await db.commit()
    return place


@pytest.fixture
async def place(test_db, category):
    """Capacity 10, 100.00 per person per night"""
    return await _add_place(test_db, category, "HTL001", 10, "100.00")


@pytest.fixture
async def small_place(test_db, category):
    """Capacity 2"""
    return await _add_place(test_db, category, "EXP002", 2, "50.00")


@pytest.fixture
async def unlimited_place(test_db, category):
    """No capacity ceiling"""
    return await _add_place(test_db, category, "RST003", None, "25.00")


@pytest.fixture
def reservation_factory(test_db):
    """Insert reservations directly in a given state"""

    async def make(
        place,
        *,
        status=ReservationStatus.PENDING,
        start_date=None,
        end_date=None,
        party_size=1,
        client_email="guest@example.com",
        client_name="Guest",
        **extra,
    ):
        start_date = start_date or date.today() + timedelta(days=7)
        extra.setdefault("reservation_code", f"TST{next(_codes):08d}")
        reservation = Reservation(
            place_id=place.id,
            client_name=client_name,
            client_email=client_email,
            start_date=start_date,
            end_date=end_date,
            party_size=party_size,
            place_price=place.price,
            total_amount=place.price * party_size,
            status=status,
            alert_sent=False,
            **extra,
        )
        test_db.add(reservation)
        await test_db.commit()
        return reservation

    return make


@pytest.fixture
def notifier_factory():
    return FakeNotifier


@pytest.fixture
async def client(session_factory):
    """Test client; every request gets its own session like in production"""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {create_access_token(admin_user)}"}


@pytest.fixture
def client_headers(client_user):
    return {"Authorization": f"Bearer {create_access_token(client_user)}"}


@pytest.fixture
def other_client_headers(other_client_user):
    return {"Authorization": f"Bearer {create_access_token(other_client_user)}"}
