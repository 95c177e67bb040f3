"""Test configuration and fixtures."""

import os

# Point settings at an in-memory database before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.constants import Difficulty, UserRole
from app.core.security import create_access_token, get_password_hash
from app.db.base import get_db
from app.main import app
from app.models import Base, Problem, Topic, User, UserStats

TEST_PASSWORD = "Passw0rd"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """TestClient whose requests share the test database."""

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# Factories


@pytest.fixture
def make_user(db):
    """Create a user with an empty stats row."""

    def _make_user(username="alice", role=UserRole.STUDENT, is_active=True):
        user = User(
            email=f"{username}@example.com",
            username=username,
            full_name=username.title(),
            hashed_password=get_password_hash(TEST_PASSWORD),
            role=role.value,
            is_active=is_active,
        )
        user.stats = UserStats()
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_topic(db):
    def _make_topic(title="Arrays", order=1):
        topic = Topic(
            title=title,
            slug=title.lower().replace(" ", "-"),
            description=f"All about {title.lower()} and their patterns",
            order=order,
            difficulty="Beginner",
            tags=[],
            resources=[],
        )
        db.add(topic)
        db.commit()
        db.refresh(topic)
        return topic

    return _make_topic


@pytest.fixture
def make_problem(db):
    def _make_problem(topic, title="Two Sum", difficulty=Difficulty.EASY, order=1, **extra):
        problem = Problem(
            topic_id=topic.id,
            title=title,
            description=f"Solve {title}",
            difficulty=difficulty.value,
            order=order,
            **extra,
        )
        db.add(problem)
        db.commit()
        db.refresh(problem)
        return problem

    return _make_problem


@pytest.fixture
def auth_headers():
    """Build a bearer header for a user."""

    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(subject=user.id)}"}

    return _auth_headers


@pytest.fixture
def password():
    """Plain-text password of every factory-made user."""
    return TEST_PASSWORD


@pytest.fixture
def student(make_user):
    return make_user("alice")


@pytest.fixture
def admin(make_user):
    return make_user("root", role=UserRole.ADMIN)
