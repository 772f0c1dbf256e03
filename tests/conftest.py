"""Pytest fixtures and configuration for taskdeck tests."""

import os

# Point the app's module-level engine at an in-memory database before taskdeck is imported.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

import pytest
import uuid
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from taskdeck.database.database import Base
from taskdeck.database.repository import TaskRepository
from taskdeck.database.recurring_template_repository import RecurringTemplateRepository
from taskdeck.models.task import Task, TaskStatus, TaskPriority


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session(test_user_id):
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    Also creates a test user in the database.
    """
    from sqlalchemy import event
    from taskdeck.database.models import UserDB

    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Enable SQLite foreign keys (template deletion relies on ON DELETE SET NULL)
    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    # Create test user (required for foreign key constraints)
    now = datetime.utcnow()
    test_user_db = UserDB(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    )
    session.add(test_user_db)
    session.commit()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


@pytest.fixture
def task_repo(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def template_repo(db_session: Session):
    """Create a RecurringTemplateRepository instance for testing."""
    return RecurringTemplateRepository(db_session)


@pytest.fixture
def sample_task_base(test_user_id):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    now = datetime.utcnow()
    return {
        "id": str(uuid.uuid4()),
        "user_id": test_user_id,
        "title": "Test Task",
        "description": "Test description",
        "category": None,
        "client_id": None,
        "priority": TaskPriority.NORMAL,
        "status": TaskStatus.INBOX,
        "due_date": None,
        "parent_task_id": None,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def sample_task(sample_task_base):
    """Create a sample Task object for testing."""
    return Task(**sample_task_base)


@pytest.fixture
def make_template(template_repo, test_user_id):
    """Persist a recurring template; keyword overrides are passed to the factory."""
    from taskdeck.models.task_factory import create_template_base

    def _make(recurrence_rule: str = "daily", **overrides):
        fields = {"title": "Recurring Task", **overrides}
        return template_repo.create(
            create_template_base(user_id=test_user_id, recurrence_rule=recurrence_rule, **fields)
        )

    return _make


@pytest.fixture
def test_user(test_user_id):
    """Create a test user object."""
    from taskdeck.models.user import User
    now = datetime.utcnow()
    return User(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def auth_headers(test_user_id):
    """Bearer header carrying a valid token for the test user."""
    from taskdeck.auth.jwt import create_access_token
    return {"Authorization": f"Bearer {create_access_token(test_user_id)}"}


@pytest.fixture
def test_client(db_session: Session, test_user):
    """Create a FastAPI test client with overridden database dependency and authentication."""
    from taskdeck.api.app import app
    from taskdeck.database.database import get_db
    from taskdeck.auth.dependencies import get_current_user

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    # Override authentication to return test user
    def override_get_current_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
