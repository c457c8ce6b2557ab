"""
Shared test fixtures — SQLite test database, test client, auth helpers,
catalog builders.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set JWT_SECRET before importing app modules
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from quoting import models
from quoting.auth import hash_password
from quoting.database import Base, get_db
from quoting.main import app


TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def _create_user(username: str, password: str, role: str) -> None:
    session = TestingSessionLocal()
    try:
        session.add(models.User(username=username, password_hash=hash_password(password), role=role))
        session.commit()
    finally:
        session.close()


def _login(client, username: str, password: str) -> dict:
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def staff_headers(client):
    """Staff user auth headers."""
    _create_user("staff", "staffpass123", "Staff")
    return _login(client, "staff", "staffpass123")


@pytest.fixture
def admin_headers(client):
    """Admin user auth headers."""
    _create_user("admin", "adminpass123", "Admin")
    return _login(client, "admin", "adminpass123")


@pytest.fixture
def customer(db):
    row = models.Customer(name="Nguyen Van A", phone="0901234567", email="a@example.com", address="12 Le Loi, Q1")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def material(db):
    """MDF at 500,000 per m²."""
    row = models.Material(name="MDF 17mm", unit="m2", unit_price=500000)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
