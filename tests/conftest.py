"""
Test configuration and fixtures
"""

import os

# Set test environment variables BEFORE importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta  # noqa: E402
from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from order_service.app import app  # noqa: E402
from order_service.database import get_db  # noqa: E402
from order_service.models import Base, ProductModel, UserModel  # noqa: E402

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    # Mock init_db to prevent creating tables on the application engine
    with patch("order_service.app.init_db"):
        app.dependency_overrides[get_db] = override_get_db
        with TestClient(app) as test_client:
            yield test_client
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Insert a user row and return it."""
    counter = {"n": 0}

    def _make_user(user_id=None, email=None, created_at=None, **fields):
        counter["n"] += 1
        n = counter["n"]
        row = UserModel(
            id=user_id or f"u{n}",
            email=email or f"user{n}@example.com",
            first_name=fields.get("first_name", "Jane"),
            last_name=fields.get("last_name", "Doe"),
            address=fields.get("address", "1 Main Street"),
            created_at=created_at or datetime(2024, 1, 1) + timedelta(minutes=n),
        )
        db_session.add(row)
        db_session.commit()
        return row

    return _make_user


@pytest.fixture
def make_product(db_session):
    """Insert a product row and return it."""
    counter = {"n": 0}

    def _make_product(product_id=None, stock=10, price=10.0, created_at=None, **fields):
        counter["n"] += 1
        n = counter["n"]
        row = ProductModel(
            id=product_id or f"p{n}",
            name=fields.get("name", f"Product {n}"),
            description=fields.get("description", "A product"),
            category=fields.get("category", "ELECTRONICS"),
            price=price,
            stock=stock,
            created_at=created_at or datetime(2024, 1, 1) + timedelta(minutes=n),
        )
        db_session.add(row)
        db_session.commit()
        return row

    return _make_product


@pytest.fixture
def sample_user_data():
    """Sample user payload for testing"""
    return {
        "email": "jane@example.com",
        "firstName": "Jane",
        "lastName": "Doe",
        "address": "1 Main Street, Springfield",
    }


@pytest.fixture
def sample_product_data():
    """Sample product payload for testing"""
    return {
        "name": "Noise Cancelling Headphones",
        "description": "Over-ear, 30h battery",
        "category": "ELECTRONICS",
        "price": 199.0,
        "stock": 25,
    }
