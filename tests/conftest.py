"""
Pytest configuration and fixtures
"""
import os

# Configure before the app reads its settings
os.environ["JWT_SECRET"] = "solennia-test-secret-key-0123456789abcdef"
os.environ["OPENAI_API_KEY"] = ""
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["LOG_JSON"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timedelta
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.database import Base, get_db
from app.main import app
from app.models import (
    Booking, BookingStatus, Credential, EventServiceProvider, ROLE_ADMIN, ROLE_CLIENT, ROLE_VENDOR, VenueListing,
)
from app.models.vendor import APPLICATION_APPROVED
from app.models.venue import VENUE_ACTIVE
from app.services.auth_service import create_access_token, hash_password
from app.services.rate_limiter import get_ai_rate_limiter

# Use in-memory database for testing
TEST_DATABASE_URL = "sqlite://"
TEST_PASSWORD = "password123"


@pytest.fixture(scope="session")
def test_engine():
    """Create test database engine"""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_engine):
    """Create test database session"""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()

    # Create tables for this test
    Base.metadata.create_all(bind=test_engine)

    yield session

    # Cleanup
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(test_db_session):
    """Test client sharing the test session with the app"""

    def override_get_db():
        yield test_db_session

    app.dependency_overrides[get_db] = override_get_db
    get_ai_rate_limiter().reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def password_hash():
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def make_user(test_db_session, password_hash):
    """Factory creating Credential rows"""
    counter = {"n": 0}

    def _make(role=ROLE_CLIENT, first_name="Test", last_name="User", **fields):
        counter["n"] += 1
        n = counter["n"]
        user = Credential(
            first_name=first_name,
            last_name=last_name,
            email=fields.pop("email", f"user{n}@example.com"),
            username=fields.pop("username", f"user{n}"),
            password=password_hash,
            role=role,
            **fields,
        )
        test_db_session.add(user)
        test_db_session.commit()
        test_db_session.refresh(user)
        return user

    return _make


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def headers_for():
    """Bearer headers for a user"""
    return auth_headers


@pytest.fixture
def client_user(make_user):
    return make_user(first_name="Maria", last_name="Santos", email="maria@example.com", username="maria")


@pytest.fixture
def vendor_user(make_user):
    return make_user(role=ROLE_VENDOR, first_name="Paolo", last_name="Reyes", email="paolo@example.com", username="paolo")


@pytest.fixture
def provider(test_db_session, vendor_user):
    """Approved supplier profile for vendor_user"""
    esp = EventServiceProvider(
        user_id=vendor_user.id,
        business_name="Lens & Light Studio",
        category="Photography & Videography",
        pricing="PHP 25,000 per event",
        business_address="Makati City",
        application_status=APPLICATION_APPROVED,
    )
    test_db_session.add(esp)
    test_db_session.commit()
    test_db_session.refresh(esp)
    return esp


@pytest.fixture
def venue_owner(make_user):
    return make_user(role=ROLE_VENDOR, first_name="Ana", last_name="Cruz", email="ana@example.com", username="ana")


@pytest.fixture
def venue(test_db_session, venue_owner):
    listing = VenueListing(
        user_id=venue_owner.id,
        venue_name="Garden Pavilion",
        venue_subcategory="Garden",
        venue_capacity=150,
        address="Tagaytay City",
        pricing="80000",
        status=VENUE_ACTIVE,
    )
    test_db_session.add(listing)
    test_db_session.commit()
    test_db_session.refresh(listing)
    return listing


@pytest.fixture
def admin_user(make_user):
    return make_user(role=ROLE_ADMIN, first_name="Site", last_name="Admin", email="admin@example.com", username="admin")


@pytest.fixture
def future_event():
    """Two o'clock in the afternoon, thirty days from now"""
    return (datetime.now() + timedelta(days=30)).replace(hour=14, minute=0, second=0, microsecond=0)


@pytest.fixture
def make_booking(test_db_session):
    """Insert a booking row directly, bypassing validation"""

    def _make(client, provider=None, venue=None, event_date=None, status=BookingStatus.PENDING, **fields):
        event_date = event_date or datetime.now() + timedelta(days=30)
        booking = Booking(
            user_id=client.id,
            event_service_provider_id=provider.id if provider is not None else None,
            venue_id=venue.id if venue is not None else None,
            service_name=fields.pop("service_name", venue.venue_name if venue is not None else "Photo coverage"),
            event_date=event_date,
            event_location=fields.pop("event_location", "Quezon City"),
            status=status,
            created_by=client.id,
            **fields,
        )
        test_db_session.add(booking)
        test_db_session.commit()
        test_db_session.refresh(booking)
        return booking

    return _make


# Test markers
def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
