"""
Test authoring: create, update, delete, fetch and list tests and questions.

Tests and their question sets are always written together inside one
transaction, so a test is never visible with a partial question set.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db_error_handling import transaction
from app.core.error_responses import (
    ErrorMessages,
    raise_bad_request,
    raise_forbidden,
    raise_not_found,
)
from app.core.question_utils import question_to_dict, serialize_options
from app.models import (
    Answer,
    AttemptStatus,
    CandidateTestState,
    Department,
    ProctoringEvent,
    Question,
    Result,
    Test,
    TestInvitation,
    TestType,
    User,
    UserRole,
)
from app.schemas.tests import QuestionCreate, TestCreateRequest

logger = logging.getLogger(__name__)

QUESTION_BANK_SOURCE = "question-bank"


def serialize_test(test: Test) -> Dict[str, Any]:
    """Column values of a Test row as a plain mapping."""
    return {column.name: getattr(test, column.name) for column in Test.__table__.columns}


def get_test_or_404(db: Session, test_id: int) -> Test:
    test = db.query(Test).filter(Test.id == test_id).first()
    if test is None:
        raise_not_found(ErrorMessages.TEST_NOT_FOUND)
    return test


def can_manage(test: Test, user: User) -> bool:
    """Owners manage their own tests; admins manage every test."""
    return user.role == UserRole.ADMIN.value or test.created_by == user.id


def ensure_can_manage(test: Test, user: User) -> None:
    if not can_manage(test, user):
        logger.warning(
            "User %s denied management access to test %s", user.id, test.id
        )
        raise_forbidden(ErrorMessages.UNAUTHORIZED)


def _validate_metadata(db: Session, data: TestCreateRequest) -> None:
    test_type = data.test_type or TestType.STANDARD.value
    if test_type == TestType.PDF_BASED.value and not data.pdf_url:
        raise_bad_request(ErrorMessages.PDF_URL_REQUIRED)

    target_role = data.target_role or UserRole.CANDIDATE.value
    if target_role == UserRole.CANDIDATE.value:
        if data.department_id is None:
            raise_bad_request(ErrorMessages.DEPARTMENT_REQUIRED)
        exists = (
            db.query(Department.id)
            .filter(Department.id == data.department_id)
            .first()
        )
        if exists is None:
            raise_not_found(ErrorMessages.DEPARTMENT_NOT_FOUND)


def _apply_metadata(test: Test, data: TestCreateRequest) -> None:
    """Copy request fields onto ``test``, filling in defaults for omitted ones."""
    target_role = data.target_role or UserRole.CANDIDATE.value

    test.title = data.title.strip()
    test.description = data.description
    test.time_limit = data.time_limit or settings.DEFAULT_TIME_LIMIT_MINUTES
    test.target_role = target_role
    # Department scoping only applies to candidate tests
    test.department_id = (
        data.department_id if target_role == UserRole.CANDIDATE.value else None
    )
    test.test_type = data.test_type or TestType.STANDARD.value
    test.pdf_url = data.pdf_url
    test.google_drive_id = data.google_drive_id
    test.thumbnail_url = data.thumbnail_url
    test.enable_proctoring = (
        True if data.enable_proctoring is None else data.enable_proctoring
    )
    test.max_tab_switches = (
        3 if data.max_tab_switches is None else data.max_tab_switches
    )
    test.allow_copy_paste = bool(data.allow_copy_paste)
    test.require_fullscreen = (
        True if data.require_fullscreen is None else data.require_fullscreen
    )


def _build_questions(test_id: int, questions: List[QuestionCreate]) -> List[Question]:
    return [
        Question(
            test_id=test_id,
            question_text=q.question_text,
            question_type=q.question_type,
            options=serialize_options(q.options),
            correct_answer=q.correct_answer,
            explanation=q.explanation,
        )
        for q in questions
    ]


def create_test(db: Session, data: TestCreateRequest, owner: User) -> int:
    """
    Create a test and its questions atomically.

    Returns:
        The new test id

    Raises:
        BadRequestError: missing title or questions, pdf test without pdf_url,
            candidate test without department
        NotFoundError: the department does not exist
    """
    if not (data.title and data.title.strip()) or not data.questions:
        raise_bad_request(ErrorMessages.TITLE_AND_QUESTIONS_REQUIRED)
    _validate_metadata(db, data)

    with transaction(db, "create test"):
        test = Test(created_by=owner.id, is_active=True)
        _apply_metadata(test, data)
        db.add(test)
        db.flush()
        db.add_all(_build_questions(test.id, data.questions))

    logger.info(
        "Test %s created by user %s with %d questions",
        test.id,
        owner.id,
        len(data.questions),
    )
    return test.id


def update_test(
    db: Session, test_id: int, data: TestCreateRequest, caller: User
) -> None:
    """
    Replace a test's metadata and, when questions are supplied, its question set.

    Question replacement is destructive: every existing question is deleted
    together with the answers recorded against it. Results are kept.
    """
    test = get_test_or_404(db, test_id)
    ensure_can_manage(test, caller)

    if not (data.title and data.title.strip()):
        raise_bad_request(ErrorMessages.TITLE_REQUIRED)
    _validate_metadata(db, data)

    with transaction(db, "update test"):
        _apply_metadata(test, data)

        if data.questions:
            old_ids = [
                qid
                for (qid,) in db.query(Question.id)
                .filter(Question.test_id == test_id)
                .all()
            ]
            removed_answers = 0
            if old_ids:
                removed_answers = (
                    db.query(Answer)
                    .filter(Answer.question_id.in_(old_ids))
                    .delete(synchronize_session=False)
                )
                db.query(Question).filter(Question.test_id == test_id).delete(
                    synchronize_session=False
                )
            if removed_answers:
                logger.warning(
                    "Replacing questions of test %s discarded %d recorded answers",
                    test_id,
                    removed_answers,
                )
            db.add_all(_build_questions(test_id, data.questions))

    db.expire(test, ["questions"])
    logger.info("Test %s updated by user %s", test_id, caller.id)


def delete_test(db: Session, test_id: int, caller: User) -> None:
    """
    Delete a test and every row that references it.

    Rows are removed in dependency order (answers, proctoring events,
    invitations, attempt states, results, questions, then the test) within
    one transaction.

    Raises:
        NotFoundError: the test does not exist, or vanished between the
            authorization check and the delete
    """
    test = get_test_or_404(db, test_id)
    ensure_can_manage(test, caller)

    with transaction(db, "delete test"):
        question_ids = select(Question.id).where(Question.test_id == test_id)
        db.query(Answer).filter(Answer.question_id.in_(question_ids)).delete(
            synchronize_session=False
        )
        for model in (ProctoringEvent, TestInvitation, CandidateTestState, Result):
            db.query(model).filter(model.test_id == test_id).delete(
                synchronize_session=False
            )
        db.query(Question).filter(Question.test_id == test_id).delete(
            synchronize_session=False
        )
        deleted = (
            db.query(Test)
            .filter(Test.id == test_id)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            logger.warning("Test %s disappeared during delete", test_id)
            raise_not_found(ErrorMessages.TEST_ALREADY_DELETED)

    db.expunge(test)
    logger.info("Test %s deleted by user %s", test_id, caller.id)


def get_test(db: Session, test_id: int, caller: User) -> Dict[str, Any]:
    """Full test with questions and answer keys, for owners and admins."""
    test = get_test_or_404(db, test_id)
    ensure_can_manage(test, caller)

    data = serialize_test(test)
    data["questions"] = [question_to_dict(q) for q in test.questions]
    return data


def _question_counts(db: Session, test_ids: List[int]) -> Dict[int, int]:
    if not test_ids:
        return {}
    rows = (
        db.query(Question.test_id, func.count(Question.id))
        .filter(Question.test_id.in_(test_ids))
        .group_by(Question.test_id)
        .all()
    )
    return {test_id: count for test_id, count in rows}


def _list_item(test: Test, question_count: int) -> Dict[str, Any]:
    item = serialize_test(test)
    item["question_count"] = question_count
    item["department_name"] = (
        test.department.department_name if test.department else None
    )
    item["created_by_name"] = test.creator.name if test.creator else None
    return item


def list_my_tests(db: Session, caller: User) -> List[Dict[str, Any]]:
    """Tests created by ``caller``, newest first."""
    tests = (
        db.query(Test)
        .filter(Test.created_by == caller.id)
        .order_by(Test.created_at.desc(), Test.id.desc())
        .all()
    )
    counts = _question_counts(db, [t.id for t in tests])
    return [_list_item(t, counts.get(t.id, 0)) for t in tests]


def list_available_tests(db: Session, caller: User) -> List[Dict[str, Any]]:
    """
    Active tests targeted at the caller's role.

    Candidates only see tests of their own department; a candidate without a
    department sees nothing. Each entry carries the caller's completion and
    in-progress flags.
    """
    query = db.query(Test).filter(
        Test.is_active.is_(True), Test.target_role == caller.role
    )
    if caller.role == UserRole.CANDIDATE.value:
        if caller.department_id is None:
            return []
        query = query.filter(Test.department_id == caller.department_id)

    tests = query.order_by(Test.created_at.desc(), Test.id.desc()).all()
    test_ids = [t.id for t in tests]
    if not test_ids:
        return []

    counts = _question_counts(db, test_ids)
    completed = {
        tid
        for (tid,) in db.query(Result.test_id)
        .filter(Result.candidate_id == caller.id, Result.test_id.in_(test_ids))
        .all()
    }
    in_progress = {
        tid
        for (tid,) in db.query(CandidateTestState.test_id)
        .filter(
            CandidateTestState.candidate_id == caller.id,
            CandidateTestState.test_id.in_(test_ids),
            CandidateTestState.status == AttemptStatus.IN_PROGRESS,
        )
        .all()
    }

    items = []
    for test in tests:
        item = _list_item(test, counts.get(test.id, 0))
        item["is_completed"] = test.id in completed
        item["is_in_progress"] = test.id in in_progress and test.id not in completed
        items.append(item)
    return items


def list_questions(
    db: Session, caller: User, source: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Questions visible to the caller, newest first.

    ``source="question-bank"`` lists questions of active tests in the shared
    Question Bank department. Otherwise the listing is scoped by role:

    - admin: every active test
    - employer: tests they created, plus tests of their department
    - candidate: candidate tests of their department

    Answer keys are never returned to candidates.
    """
    query = db.query(Question, Test).join(Test, Question.test_id == Test.id)

    if source == QUESTION_BANK_SOURCE:
        query = query.join(Department, Test.department_id == Department.id).filter(
            Test.is_active.is_(True),
            func.lower(Department.department_name)
            == settings.QUESTION_BANK_DEPARTMENT.lower(),
        )
    elif caller.role == UserRole.ADMIN.value:
        query = query.filter(Test.is_active.is_(True))
    elif caller.role == UserRole.EMPLOYER.value:
        scope = [Test.created_by == caller.id]
        if caller.department_id is not None:
            scope.append(Test.department_id == caller.department_id)
        query = query.filter(or_(*scope))
    else:
        if caller.department_id is None:
            return []
        query = query.filter(
            Test.is_active.is_(True),
            Test.target_role == UserRole.CANDIDATE.value,
            Test.department_id == caller.department_id,
        )

    include_key = caller.role != UserRole.CANDIDATE.value
    rows = query.order_by(Question.created_at.desc(), Question.id.desc()).all()

    items = []
    for question, test in rows:
        item = question_to_dict(question, include_answer_key=include_key)
        item["test_title"] = test.title
        items.append(item)
    return items
