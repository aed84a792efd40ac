import os
from datetime import date, timedelta

import pytest

# Set testing environment before the app reads its settings
os.environ["TESTING"] = "1"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///./test.db")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.main import app
from app.core.database import Base, get_db, redis_client
from app.core.security import UserRole, create_token
from app.models.provider import VerificationStatus
from app.schemas.availability import AvailabilityRequest
from app.schemas.provider import ProviderRegistrationRequest
from app.services.provider_service import ProviderService

SQLALCHEMY_DATABASE_URL = os.environ["TEST_DATABASE_URL"]
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

FUTURE_DATE = date.today() + timedelta(days=30)
PASSWORD = "Secure@123"

@pytest.fixture(scope="function")
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        redis_client.flushall()

@pytest.fixture
def client(db_session):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

def provider_payload(index: int = 1, **overrides) -> dict:
    data = {
        "first_name": "Gregory",
        "last_name": f"House{chr(64 + index)}",
        "email": f"provider{index}@example.com",
        "phone_number": f"+1555000{index:04d}",
        "password": PASSWORD,
        "confirm_password": PASSWORD,
        "specialization": "Cardiology",
        "license_number": f"MD{index:06d}",
        "years_of_experience": 10,
        "clinic_address": {
            "street": "1 Main Street",
            "city": "Princeton",
            "state": "NJ",
            "zip": "08540",
        },
    }
    data.update(overrides)
    return data

def availability_payload(**overrides) -> dict:
    data = {
        "date": FUTURE_DATE.isoformat(),
        "start_time": "09:00",
        "end_time": "17:00",
        "timezone": "America/New_York",
        "slot_duration": 30,
        "break_duration": 15,
        "appointment_type": "CONSULTATION",
        "location": {
            "type": "CLINIC",
            "address": "1 Main Street, Princeton",
            "room_number": "101",
        },
        "pricing": {
            "base_fee": "150.00",
            "insurance_accepted": True,
            "currency": "USD",
        },
        "notes": "Bring previous reports",
        "special_requirements": ["fasting"],
    }
    data.update(overrides)
    return data

def availability_request(**overrides) -> AvailabilityRequest:
    return AvailabilityRequest.model_validate(availability_payload(**overrides))

@pytest.fixture
def make_provider(db_session):
    """Create a provider directly through the service (verified unless told otherwise)."""
    def _make(index: int = 1, verified: bool = True, **overrides):
        service = ProviderService(db_session)
        provider = service.register_provider(
            ProviderRegistrationRequest.model_validate(provider_payload(index, **overrides))
        )
        if verified:
            provider = service.set_verification_status(provider.id, VerificationStatus.VERIFIED)
        return provider
    return _make

@pytest.fixture
def provider(make_provider):
    return make_provider(1)

def auth_headers(provider) -> dict:
    token = create_token(
        provider.id, provider.email, UserRole.PROVIDER,
        specialization=provider.specialization
    )
    return {"Authorization": f"Bearer {token.access_token}"}

@pytest.fixture
def provider_headers(provider):
    return auth_headers(provider)
