"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client
- Users, freelancer profiles, gigs and orders
- Auth headers and a fake storage backend
"""

import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.core.storage import StorageBackend
from app.models import (
    FreelancerProfile, Gig, GigStatus, Job, Order, OrderStatus, OrderStatusHistory, User, UserRole
)
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


class FakeStorage(StorageBackend):
    """Records uploads in memory instead of writing them anywhere"""

    def __init__(self):
        self.uploads = {}
        self.deleted = []

    def upload_file(self, file, key, content_type=None):
        self.uploads[key] = (file.read(), content_type)
        return f"https://cdn.test/{key}"

    def delete_file(self, key):
        self.deleted.append(key)
        return True

    def describe(self):
        return "fake"


@pytest.fixture
def fake_storage(monkeypatch):
    storage = FakeStorage()
    monkeypatch.setattr("app.api.endpoints.jobs.storage", storage)
    return storage


def _make_user(db, email, role, firstname="Test", lastname="User", is_active=True):
    user = User(firstname=firstname, lastname=lastname, email=email, role=role, is_active=is_active)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def client_user(db_session):
    return _make_user(db_session, "client@example.com", UserRole.CLIENT, "Carla", "Client")


@pytest.fixture
def other_client(db_session):
    return _make_user(db_session, "other@example.com", UserRole.CLIENT, "Oscar", "Other")


@pytest.fixture
def freelancer_user(db_session):
    """Freelancer with a profile"""
    user = _make_user(db_session, "freelancer@example.com", UserRole.FREELANCER, "Fiona", "Freelancer")
    db_session.add(FreelancerProfile(user_id=user.id, title="Python developer"))
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def freelancer_without_profile(db_session):
    return _make_user(db_session, "noprofile@example.com", UserRole.FREELANCER, "Nora", "Noprofile")


@pytest.fixture
def make_user(db_session):
    def factory(email, role=UserRole.CLIENT, **kwargs):
        return _make_user(db_session, email, role, **kwargs)
    return factory


def token_for(user):
    return create_access_token({"sub": str(user.id), "role": user.role.value})


@pytest.fixture
def auth_token():
    return token_for


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user"""
    def factory(user):
        return {"Authorization": f"Bearer {token_for(user)}"}
    return factory


@pytest.fixture
def gig(db_session, freelancer_user):
    """Active gig with basic/standard packages and a 3 day delivery time"""
    gig = Gig(
        freelancer_id=freelancer_user.freelancer_profile.id,
        title="I will build your REST API",
        pricing={"basic": 100, "standard": 250},
        delivery_time=3,
        status=GigStatus.ACTIVE,
    )
    db_session.add(gig)
    db_session.commit()
    db_session.refresh(gig)
    return gig


@pytest.fixture
def make_order(db_session, gig, client_user):
    """Insert an order directly in a given status, with one history entry"""
    counter = {"n": 0}

    def factory(status=OrderStatus.PENDING, deadline=None, client=None):
        counter["n"] += 1
        owner = client or client_user
        order = Order(
            order_number=f"ORD-20261019-T{counter['n']:03d}",
            gig_id=gig.id,
            client_id=owner.id,
            freelancer_id=gig.freelancer_id,
            package="basic",
            total_price=100,
            is_urgent=False,
            status=status,
            delivery_deadline=deadline or datetime.now(timezone.utc) + timedelta(days=3),
        )
        order.status_history.append(OrderStatusHistory(status=status, changed_by=owner.id))
        db_session.add(order)
        db_session.commit()
        db_session.refresh(order)
        return order

    return factory


@pytest.fixture
def make_job(db_session, client_user):
    """Insert a job directly"""
    def factory(owner=None, **overrides):
        fields = {
            "title": "Build a marketplace backend",
            "description": "FastAPI service with PostgreSQL and a job board",
            "budget_min": 500,
            "budget_max": 1500,
            "scope": "Medium",
            "is_verified": True,
        }
        fields.update(overrides)
        categories = fields.pop("category", ["development"])
        job = Job(posted_by_id=(owner or client_user).id, **fields)
        job.category = categories
        db_session.add(job)
        db_session.commit()
        db_session.refresh(job)
        return job
    return factory


@pytest.fixture
def sample_job_form():
    """Form fields for posting a job"""
    return {
        "title": "Senior Python Developer",
        "description": "We need a FastAPI expert to build an order workflow service.",
        "category": ["development", "backend"],
        "budgetMin": "1000",
        "budgetMax": "3000",
        "deadline": (datetime.now(timezone.utc) + timedelta(days=30)).isoformat(),
        "jobDifficulty": "Expert",
        "projectLength": "1-3 months",
        "requiredSkills": ["Python", "FastAPI"],
        "tools": "Docker",
        "scope": "Large",
        "email": "hiring@example.com",
    }
