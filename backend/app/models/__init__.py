"""
Models package for the SuiteTest backend.
"""
from .base import Base, Database, database, get_db, get_session_factory
from .models import (
    Answer,
    AttemptStatus,
    CandidateTestState,
    Department,
    InvitationStatus,
    ProctoringEvent,
    Question,
    QuestionKind,
    Result,
    Test,
    TestInvitation,
    TestType,
    User,
    UserRole,
)

__all__ = [
    "Base",
    "Database",
    "database",
    "get_db",
    "get_session_factory",
    "Answer",
    "AttemptStatus",
    "CandidateTestState",
    "Department",
    "InvitationStatus",
    "ProctoringEvent",
    "Question",
    "QuestionKind",
    "Result",
    "Test",
    "TestInvitation",
    "TestType",
    "User",
    "UserRole",
]
