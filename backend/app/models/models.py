"""
Database models for the SuiteTest application.
"""
from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
    Enum,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum

from .base import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    """User role enumeration."""

    ADMIN = "admin"
    EMPLOYER = "employer"
    CANDIDATE = "candidate"


class TestType(str, enum.Enum):
    """How a test's content is delivered."""

    STANDARD = "standard"
    PDF_BASED = "pdf_based"


class QuestionKind(str, enum.Enum):
    """Known question types. Only some are graded automatically."""

    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    FREE_TEXT = "free_text"


class AttemptStatus(str, enum.Enum):
    """Candidate attempt status enumeration."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class InvitationStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Department(Base):
    """Organizational unit that scopes candidates and candidate tests."""

    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    department_name = Column(String(100), unique=True, nullable=False)
    description = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)

    users = relationship("User", back_populates="department")
    tests = relationship("Test", back_populates="department")


class User(Base):
    """User model for authentication and role checks."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.CANDIDATE.value)
    department_id = Column(
        Integer, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)

    department = relationship("Department", back_populates="users")


class Test(Base):
    """A test authored by an admin or employer."""

    __tablename__ = "tests"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    time_limit = Column(Integer, nullable=False, default=30)  # minutes
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    target_role = Column(String(20), nullable=False, default=UserRole.CANDIDATE.value)
    department_id = Column(
        Integer, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True
    )
    test_type = Column(String(20), nullable=False, default=TestType.STANDARD.value)
    pdf_url = Column(String(1000))
    google_drive_id = Column(String(255))
    thumbnail_url = Column(String(1000))

    # Proctoring settings are stored for clients; nothing here enforces them.
    enable_proctoring = Column(Boolean, default=True, nullable=False)
    max_tab_switches = Column(Integer, default=3, nullable=False)
    allow_copy_paste = Column(Boolean, default=False, nullable=False)
    require_fullscreen = Column(Boolean, default=True, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)

    creator = relationship("User")
    department = relationship("Department", back_populates="tests")
    questions = relationship(
        "Question", back_populates="test", order_by="Question.id"
    )


class Question(Base):
    """A question belonging to exactly one test."""

    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    test_id = Column(Integer, ForeignKey("tests.id"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    question_type = Column(
        String(50), nullable=False, default=QuestionKind.MULTIPLE_CHOICE.value
    )
    # JSON array text or a comma-delimited list; normalized by parse_options()
    options = Column(Text)
    correct_answer = Column(String(500))
    explanation = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)

    test = relationship("Test", back_populates="questions")


class CandidateTestState(Base):
    """Per-candidate attempt state for a test.

    One row per (candidate, test). ``start_time`` is written once and is the
    origin for elapsed-time checks and the result's ``taken_at``.
    """

    __tablename__ = "candidates_tests"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    test_id = Column(Integer, ForeignKey("tests.id"), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False, default=_utc_now)
    end_time = Column(DateTime(timezone=True))
    time_remaining = Column(Integer)  # seconds
    saved_answers = Column(JSON(none_as_null=True))
    status = Column(
        Enum(AttemptStatus), nullable=False, default=AttemptStatus.IN_PROGRESS
    )
    score = Column(Integer)

    __table_args__ = (
        UniqueConstraint(
            "candidate_id", "test_id", name="uq_candidates_tests_candidate_test"
        ),
        Index("ix_candidates_tests_candidate_status", "candidate_id", "status"),
    )


class Answer(Base):
    """A candidate's recorded answer to one question, written at submission."""

    __tablename__ = "answers"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False)
    answer = Column(Text)
    is_correct = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "candidate_id", "question_id", name="uq_answers_candidate_question"
        ),
    )


class Result(Base):
    """Final graded result. Its existence means the test was submitted."""

    __tablename__ = "results"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    test_id = Column(Integer, ForeignKey("tests.id"), nullable=False, index=True)
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    score = Column(Integer, nullable=False)
    remarks = Column(String(50), nullable=False)
    taken_at = Column(DateTime(timezone=True), nullable=False)
    finished_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now)

    candidate = relationship("User")

    __table_args__ = (
        # Backs the app-level "already submitted" check against concurrent submits
        UniqueConstraint("candidate_id", "test_id", name="uq_results_candidate_test"),
    )


class TestInvitation(Base):
    """Email invitation to take a test."""

    __tablename__ = "test_invitations"

    id = Column(Integer, primary_key=True, index=True)
    test_id = Column(Integer, ForeignKey("tests.id"), nullable=False, index=True)
    candidate_email = Column(String(255), nullable=False, index=True)
    status = Column(
        Enum(InvitationStatus), nullable=False, default=InvitationStatus.PENDING
    )
    invited_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)
    completed_at = Column(DateTime(timezone=True))


class ProctoringEvent(Base):
    """Client-reported proctoring event. Stored only."""

    __tablename__ = "proctoring_events"

    id = Column(Integer, primary_key=True, index=True)
    test_id = Column(Integer, ForeignKey("tests.id"), nullable=False, index=True)
    candidate_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    event_type = Column(String(50), nullable=False)
    details = Column(JSON(none_as_null=True))
    created_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)
