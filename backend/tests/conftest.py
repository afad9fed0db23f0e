"""
Pytest configuration and shared fixtures for testing.
"""
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable, Dict, List, Optional

# Required settings must exist before app modules are imported
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.security import create_access_token, hash_password  # noqa: E402
from app.main import app  # noqa: E402
from app.models import (  # noqa: E402
    Database,
    Department,
    Question,
    Test,
    User,
    UserRole,
    get_db,
    get_session_factory,
)


@asynccontextmanager
async def _test_lifespan(app):
    """No-op lifespan for tests.

    Skips Sentry and the application database; tests bind their own.
    """
    yield


# Neutralize the production lifespan on the singleton app.
app.router.lifespan_context = _test_lifespan


# SQLite file next to this conftest so it lands inside tests/ regardless of
# the working directory.
_TEST_DB = Path(__file__).parent / "test.db"


@pytest.fixture(autouse=True)
def propagate_app_logs():
    """
    Let caplog see application log records.

    setup_logging() stops propagation at the "app" logger, while caplog
    listens on the root logger.
    """
    app_logger = logging.getLogger("app")
    app_logger.propagate = True
    yield
    app_logger.propagate = False


@pytest.fixture(scope="function")
def test_database():
    """
    Connected Database with a fresh schema for each test.
    """
    database = Database(f"sqlite:///{_TEST_DB}")
    database.connect()
    database.create_all()
    try:
        yield database
    finally:
        database.drop_all()
        database.dispose()


@pytest.fixture(scope="function")
def db_session(test_database):
    """
    Session for arranging data and asserting on it.
    """
    db = test_database.session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(test_database, db_session):
    """
    Test client whose database dependencies point at the test database.
    """

    def override_get_db():
        with test_database.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: test_database.session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_user(
    db_session,
    name: str,
    email: str,
    role: UserRole,
    department: Optional[Department] = None,
) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=hash_password("testpassword123"),
        role=role.value,
        department_id=department.id if department else None,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def engineering(db_session) -> Department:
    department = Department(department_name="Engineering", description="Builders")
    db_session.add(department)
    db_session.commit()
    db_session.refresh(department)
    return department


@pytest.fixture
def marketing(db_session) -> Department:
    department = Department(department_name="Marketing")
    db_session.add(department)
    db_session.commit()
    db_session.refresh(department)
    return department


@pytest.fixture
def admin_user(db_session) -> User:
    return create_user(db_session, "Ada Admin", "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def employer_user(db_session, engineering) -> User:
    return create_user(
        db_session, "Eve Employer", "employer@example.com", UserRole.EMPLOYER, engineering
    )


@pytest.fixture
def other_employer(db_session) -> User:
    return create_user(
        db_session, "Otto Other", "other@example.com", UserRole.EMPLOYER
    )


@pytest.fixture
def candidate_user(db_session, engineering) -> User:
    return create_user(
        db_session, "Cara Candidate", "candidate@example.com", UserRole.CANDIDATE, engineering
    )


@pytest.fixture
def outsider_candidate(db_session, marketing) -> User:
    return create_user(
        db_session, "Max Marketing", "max@example.com", UserRole.CANDIDATE, marketing
    )


@pytest.fixture
def make_headers() -> Callable[[User], Dict[str, str]]:
    """Build bearer headers for any user."""

    def _make(user: User) -> Dict[str, str]:
        token = create_access_token({"user_id": user.id})
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def admin_headers(admin_user, make_headers):
    return make_headers(admin_user)


@pytest.fixture
def employer_headers(employer_user, make_headers):
    return make_headers(employer_user)


@pytest.fixture
def candidate_headers(candidate_user, make_headers):
    return make_headers(candidate_user)


def create_test_with_questions(
    db_session,
    owner: User,
    department: Optional[Department],
    questions: List[Dict],
    title: str = "Python Basics",
    target_role: str = UserRole.CANDIDATE.value,
    time_limit: int = 30,
) -> Test:
    """Insert a test and its questions directly, bypassing the API."""
    test = Test(
        title=title,
        description="A short test",
        time_limit=time_limit,
        created_by=owner.id,
        target_role=target_role,
        department_id=department.id if department else None,
    )
    db_session.add(test)
    db_session.flush()
    for spec in questions:
        db_session.add(Question(test_id=test.id, **spec))
    db_session.commit()
    db_session.refresh(test)
    return test


@pytest.fixture
def two_question_test(db_session, employer_user, engineering) -> Test:
    """Two multiple choice questions with keys A and B."""
    return create_test_with_questions(
        db_session,
        employer_user,
        engineering,
        [
            {
                "question_text": "Which keyword defines a function?",
                "question_type": "multiple_choice",
                "options": '["A", "B", "C", "D"]',
                "correct_answer": "A",
                "explanation": "def defines a function.",
            },
            {
                "question_text": "Which type is immutable?",
                "question_type": "multiple_choice",
                "options": "A, B, C",
                "correct_answer": "B",
                "explanation": "Tuples are immutable.",
            },
        ],
    )


@pytest.fixture
def mixed_question_test(db_session, employer_user, engineering) -> Test:
    """One multiple choice, one true/false and one free text question."""
    return create_test_with_questions(
        db_session,
        employer_user,
        engineering,
        [
            {
                "question_text": "2 + 2?",
                "question_type": "multiple_choice",
                "options": '{"B": "5", "A": "4"}',
                "correct_answer": "4",
            },
            {
                "question_text": "Python is dynamically typed.",
                "question_type": "true_false",
                "options": "True, False",
                "correct_answer": "True",
            },
            {
                "question_text": "Explain list comprehensions.",
                "question_type": "free_text",
                "options": None,
                "correct_answer": None,
            },
        ],
        title="Mixed Test",
    )
