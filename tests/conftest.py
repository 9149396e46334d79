"""Pytest configuration and fixtures"""
import os

# Settings are read at import time; point them at the test setup first
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["METRICS_ENABLED"] = "false"
os.environ.pop("WEBHOOK_URL", None)

from types import SimpleNamespace
from typing import Callable, Generator, List, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from gatepass.database import Base, create_db_engine, get_db
from gatepass.main import app
from gatepass.models.user import Role, StudentMentor, User
from gatepass.utils.jwt_utils import create_access_token

TEST_DATABASE_URL = os.environ["DATABASE_URL"]

engine = create_db_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create test client with database session override"""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def seed_directory(db: Session) -> SimpleNamespace:
    """Users for every role; student S1 is assigned to mentor M1, S2 has no mentor"""
    users = SimpleNamespace(
        student=User(email="s1@campus.edu", name="Student One", role=Role.STUDENT),
        unassigned_student=User(email="s2@campus.edu", name="Student Two", role=Role.STUDENT),
        mentor=User(email="m1@campus.edu", name="Mentor One", role=Role.APPROVER),
        other_mentor=User(email="m2@campus.edu", name="Mentor Two", role=Role.APPROVER),
        checkpoint=User(email="gate@campus.edu", name="Main Gate", role=Role.CHECKPOINT),
    )
    db.add_all(vars(users).values())
    db.flush()
    db.add(StudentMentor(student_id=users.student.id, mentor_id=users.mentor.id))
    db.commit()
    return users


@pytest.fixture
def users(db: Session) -> SimpleNamespace:
    """Seeded directory users"""
    return seed_directory(db)


def bearer(user_id: str, role: Role) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, role.value)}"}


@pytest.fixture
def headers(users: SimpleNamespace) -> SimpleNamespace:
    """Authorization headers for each seeded user"""
    return SimpleNamespace(
        student=bearer(users.student.id, Role.STUDENT),
        unassigned_student=bearer(users.unassigned_student.id, Role.STUDENT),
        mentor=bearer(users.mentor.id, Role.APPROVER),
        other_mentor=bearer(users.other_mentor.id, Role.APPROVER),
        checkpoint=bearer(users.checkpoint.id, Role.CHECKPOINT),
    )


@pytest.fixture
def admin_headers() -> dict:
    """Admin authentication headers"""
    return {"X-Admin-Key": os.getenv("ADMIN_API_KEY", "admin-secret-key-change-in-production")}


@pytest.fixture
def notifications() -> List[Tuple[str, dict]]:
    """Collects (event_type, payload) pairs sent to the notification hook"""
    return []


@pytest.fixture
def notifier(notifications: List[Tuple[str, dict]]) -> Callable[[str, dict], None]:
    def _notify(event_type: str, payload: dict) -> None:
        notifications.append((event_type, payload))
    return _notify
