import os

# Must be set before the application modules are imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from medbook.main import app
from medbook.core.database import get_db, get_redis, Base
from medbook.services.notifications import Notifier, get_notifier

# Create test database
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

class FakeRedis:
    """Dict-backed stand-in for the few redis commands the rate limiter uses."""

    def __init__(self):
        self.data = {}

    def setex(self, key, time, value):
        self.data[key] = str(value)
        return True

    def get(self, key):
        return self.data.get(key)

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])

class RecordingNotifier(Notifier):
    def __init__(self):
        self.events = []

    def notify(self, event, appointment):
        self.events.append((event, appointment.id, appointment.status))

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_redis] = lambda: FakeRedis()

@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(test_db):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def notifier():
    recorder = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: recorder
    yield recorder
    app.dependency_overrides.pop(get_notifier, None)

@pytest.fixture
def client(test_db, notifier):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

def register_and_login(client, name, email, role="patient", **extra):
    """Register an account and return its id with bearer headers."""
    payload = {
        "name": name,
        "email": email,
        "password": "TestPassword123",
        "role": role,
        "phone": "555-0100",
    }
    if role == "doctor":
        payload.setdefault("specialization", "Cardiology")
        payload.setdefault("experience", 10)
    payload.update(extra)

    response = client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 201, response.text

    login = client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": "TestPassword123"}
    )
    assert login.status_code == 200, login.text

    return {
        "id": response.json()["id"],
        "headers": {"Authorization": f"Bearer {login.json()['access_token']}"},
    }

@pytest.fixture
def patient(client):
    return register_and_login(client, "Pat Patient", "patient@example.com")

@pytest.fixture
def other_patient(client):
    return register_and_login(client, "Olive Other", "other.patient@example.com")

@pytest.fixture
def doctor(client):
    return register_and_login(client, "Dana Doctor", "doctor@example.com", role="doctor")

@pytest.fixture
def other_doctor(client):
    return register_and_login(
        client, "Drew Doctor", "other.doctor@example.com",
        role="doctor", specialization="Dermatology"
    )

@pytest.fixture
def book(client, patient, doctor):
    """Book an appointment as ``patient`` with ``doctor`` unless overridden."""
    def _book(**overrides):
        headers = overrides.pop("headers", patient["headers"])
        payload = {
            "doctor": doctor["id"],
            "date": "2025-06-01",
            "time": "09:00",
            "reason": "checkup",
        }
        payload.update(overrides)
        return client.post("/api/v1/appointments", json=payload, headers=headers)
    return _book
