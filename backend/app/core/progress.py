"""
Candidate progress tracking.

One ``CandidateTestState`` row exists per (candidate, test). It is created by
the first "take" or "save progress" call, updated by later saves, and closed
by submission. ``start_time`` is set once and never rewritten.
"""

import logging
import math
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.authoring import get_test_or_404, serialize_test
from app.core.config import settings
from app.core.datetime_utils import seconds_since, utc_now
from app.core.db_error_handling import transaction
from app.core.error_responses import (
    ErrorMessages,
    raise_bad_request,
    raise_forbidden,
)
from app.core.question_utils import question_to_dict
from app.models import AttemptStatus, CandidateTestState, Result, Test, User, UserRole

logger = logging.getLogger(__name__)


def get_state(db: Session, candidate_id: int, test_id: int) -> Optional[CandidateTestState]:
    return (
        db.query(CandidateTestState)
        .filter(
            CandidateTestState.candidate_id == candidate_id,
            CandidateTestState.test_id == test_id,
        )
        .first()
    )


def get_result(db: Session, candidate_id: int, test_id: int) -> Optional[Result]:
    return (
        db.query(Result)
        .filter(Result.candidate_id == candidate_id, Result.test_id == test_id)
        .first()
    )


def _insert_state(db: Session, state: CandidateTestState) -> Optional[CandidateTestState]:
    """
    Insert a new attempt row.

    Returns None when a concurrent request inserted the row first; the
    unique constraint on (candidate_id, test_id) detects that race.
    """
    db.add(state)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(
            "Attempt row for candidate %s on test %s was created concurrently",
            state.candidate_id,
            state.test_id,
        )
        return None
    return state


def _ensure_eligible(test: Test, candidate: User) -> None:
    if test.target_role != candidate.role:
        raise_forbidden(ErrorMessages.role_mismatch(test.target_role))
    if (
        candidate.role == UserRole.CANDIDATE.value
        and test.department_id is not None
        and candidate.department_id != test.department_id
    ):
        raise_forbidden(ErrorMessages.DEPARTMENT_MISMATCH)


def begin_or_resume_test(
    db: Session, candidate: User, test_id: int
) -> Tuple[Dict[str, Any], CandidateTestState]:
    """
    Start a test, or resume an attempt that already exists.

    A fresh attempt gets ``start_time = now`` and the full time limit. An
    existing attempt is returned untouched.

    Returns:
        (test with questions minus answer keys, attempt state)

    Raises:
        ForbiddenError: already submitted, wrong role or wrong department
        NotFoundError: the test does not exist
    """
    if get_result(db, candidate.id, test_id) is not None:
        raise_forbidden(ErrorMessages.TEST_ALREADY_COMPLETED)

    test = get_test_or_404(db, test_id)
    _ensure_eligible(test, candidate)

    state = get_state(db, candidate.id, test_id)
    if state is None:
        state = _insert_state(
            db,
            CandidateTestState(
                candidate_id=candidate.id,
                test_id=test_id,
                start_time=utc_now(),
                status=AttemptStatus.IN_PROGRESS,
                time_remaining=test.time_limit * 60,
            ),
        ) or get_state(db, candidate.id, test_id)
        logger.info("Candidate %s started test %s", candidate.id, test_id)

    data = serialize_test(test)
    data["questions"] = [
        question_to_dict(q, include_answer_key=False) for q in test.questions
    ]
    return data, state


def _validate_time_remaining(value: Any) -> int:
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
        or value < 0
    ):
        raise_bad_request(ErrorMessages.INVALID_TIME_REMAINING)
    return int(value)


def save_progress(
    db: Session,
    candidate: User,
    test_id: int,
    answers: Any,
    time_remaining: Any,
) -> CandidateTestState:
    """
    Persist a snapshot of in-progress answers and the remaining time.

    The first save creates the attempt (``start_time = now``); later saves
    only touch ``saved_answers`` and ``time_remaining``. Last writer wins.

    Raises:
        BadRequestError: time_remaining is not a non-negative number
        NotFoundError: the test does not exist
        ForbiddenError: the test was already submitted
    """
    seconds_left = _validate_time_remaining(time_remaining)
    get_test_or_404(db, test_id)
    if get_result(db, candidate.id, test_id) is not None:
        raise_forbidden(ErrorMessages.TEST_ALREADY_COMPLETED)

    state = get_state(db, candidate.id, test_id)
    if state is None:
        inserted = _insert_state(
            db,
            CandidateTestState(
                candidate_id=candidate.id,
                test_id=test_id,
                start_time=utc_now(),
                status=AttemptStatus.IN_PROGRESS,
                time_remaining=seconds_left,
                saved_answers=answers,
            ),
        )
        if inserted is not None:
            return inserted
        state = get_state(db, candidate.id, test_id)

    with transaction(db, "save progress"):
        state.saved_answers = answers
        state.time_remaining = seconds_left
        state.status = AttemptStatus.IN_PROGRESS
    return state


def _is_engaged(state: CandidateTestState) -> bool:
    """An attempt counts as active once it has answers or enough time has passed."""
    if state.saved_answers:
        return True
    return seconds_since(state.start_time) > settings.ACTIVE_TEST_MIN_ELAPSED_SECONDS


def get_active_test(db: Session, candidate: User) -> Optional[Dict[str, Any]]:
    """
    The candidate's most recent attempt that shows real engagement.

    Attempts opened and immediately abandoned (no saved answers, started
    only seconds ago) are ignored. If the chosen attempt turns out to have
    a result already, the stale state row is marked completed and no active
    test is reported.
    """
    rows = (
        db.query(CandidateTestState, Test)
        .join(Test, CandidateTestState.test_id == Test.id)
        .filter(
            CandidateTestState.candidate_id == candidate.id,
            CandidateTestState.status == AttemptStatus.IN_PROGRESS,
        )
        .order_by(CandidateTestState.start_time.desc(), CandidateTestState.id.desc())
        .all()
    )

    for state, test in rows:
        if not _is_engaged(state):
            continue

        result = get_result(db, candidate.id, test.id)
        if result is not None:
            with transaction(db, "close stale attempt"):
                state.status = AttemptStatus.COMPLETED
                state.end_time = result.finished_at
                state.score = result.score
                state.saved_answers = None
                state.time_remaining = None
            logger.warning(
                "Closed stale in-progress attempt for candidate %s on test %s",
                candidate.id,
                test.id,
            )
            return None

        return {
            "test_id": test.id,
            "title": test.title,
            "time_limit": test.time_limit,
            "start_time": state.start_time,
            "time_remaining": state.time_remaining,
            "saved_answers": state.saved_answers or {},
            "test_type": test.test_type,
        }

    return None


def get_test_status(db: Session, candidate: User, test_id: int) -> Dict[str, Any]:
    """Completed beats in-progress beats not started."""
    result = get_result(db, candidate.id, test_id)
    if result is not None:
        return {"status": AttemptStatus.COMPLETED.value, "result": result}

    state = get_state(db, candidate.id, test_id)
    if state is not None and state.status == AttemptStatus.IN_PROGRESS:
        return {
            "status": AttemptStatus.IN_PROGRESS.value,
            "start_time": state.start_time,
            "time_remaining": state.time_remaining,
            "saved_answers": state.saved_answers or {},
        }

    return {"status": "not_started"}
