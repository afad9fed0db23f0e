"""
Test submission and grading.

Submission is the one transition into the terminal ``completed`` state. The
whole operation (duplicate check, grading, answer rows, result row and
attempt finalization) runs in a single transaction, so a rejected or failed
submission leaves nothing behind.

Race condition prevention
-------------------------
Two layers stop a double submission:
1. An application-level check for an existing Result inside the transaction
2. The ``uq_results_candidate_test`` unique constraint, which makes the
   losing insert of two concurrent submissions fail with IntegrityError
Both surface as 403 "already submitted".
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.authoring import get_test_or_404
from app.core.datetime_utils import utc_now
from app.core.db_error_handling import transaction
from app.core.error_responses import (
    ErrorMessages,
    raise_bad_request,
    raise_forbidden,
)
from app.core.progress import get_result, get_state
from app.core.scoring import GradeSummary, is_answer_correct, is_auto_graded, summarize
from app.models import Answer, AttemptStatus, CandidateTestState, Question, Result, User

logger = logging.getLogger(__name__)


@dataclass
class SubmissionOutcome:
    """Grade summary plus what the post-commit notification needs."""

    grade: GradeSummary
    test_id: int
    test_title: str


def _submitted_value(answers: Dict[Any, Any], question_id: int) -> Any:
    # JSON object keys arrive as strings
    if str(question_id) in answers:
        return answers[str(question_id)]
    return answers.get(question_id)


def _stored_answer(value: Any) -> Optional[str]:
    """Answer text as persisted. Missing or empty answers are stored as null."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value)


def submit_test(
    db: Session, candidate: User, test_id: int, answers: Any
) -> SubmissionOutcome:
    """
    Grade and record a candidate's final answers.

    Args:
        db: Database session
        candidate: The submitting user
        test_id: Test being submitted
        answers: Mapping of question id to submitted value

    Returns:
        SubmissionOutcome with score, totals and remarks

    Raises:
        BadRequestError: answers missing or not a mapping, or the test has no
            questions
        ForbiddenError: the test was already submitted
        NotFoundError: the test does not exist
    """
    if not isinstance(answers, dict):
        raise_bad_request(ErrorMessages.ANSWERS_REQUIRED)

    # A failed flush expires loaded objects, so the id is read up front
    candidate_id = candidate.id

    with transaction(db, "submit test"):
        if get_result(db, candidate_id, test_id) is not None:
            raise_forbidden(ErrorMessages.TEST_ALREADY_SUBMITTED)

        test = get_test_or_404(db, test_id)
        questions = (
            db.query(Question)
            .filter(Question.test_id == test_id)
            .order_by(Question.id)
            .all()
        )
        if not questions:
            raise_bad_request(ErrorMessages.NO_QUESTIONS)

        state = get_state(db, candidate_id, test_id)
        now = utc_now()
        start_time = state.start_time if state is not None else now

        total = 0
        correct = 0
        answer_rows = []
        for question in questions:
            value = _submitted_value(answers, question.id)
            is_correct = False
            if is_auto_graded(question.question_type):
                total += 1
                is_correct = is_answer_correct(value, question.correct_answer)
                if is_correct:
                    correct += 1
            answer_rows.append(
                Answer(
                    candidate_id=candidate_id,
                    question_id=question.id,
                    answer=_stored_answer(value),
                    is_correct=is_correct,
                )
            )

        grade = summarize(correct, total)

        db.add(
            Result(
                candidate_id=candidate_id,
                test_id=test_id,
                total_questions=grade.total_questions,
                correct_answers=grade.correct_answers,
                score=grade.score,
                remarks=grade.remarks,
                taken_at=start_time,
                finished_at=now,
            )
        )
        try:
            db.flush()
        except IntegrityError:
            logger.warning(
                "Concurrent submission detected for candidate %s on test %s",
                candidate_id,
                test_id,
            )
            raise_forbidden(ErrorMessages.TEST_ALREADY_SUBMITTED)

        db.add_all(answer_rows)

        if state is not None:
            state.status = AttemptStatus.COMPLETED
            state.end_time = now
            state.score = grade.score
            state.saved_answers = None
            state.time_remaining = None
        else:
            db.add(
                CandidateTestState(
                    candidate_id=candidate_id,
                    test_id=test_id,
                    start_time=now,
                    end_time=now,
                    status=AttemptStatus.COMPLETED,
                    score=grade.score,
                )
            )

    logger.info(
        "Candidate %s submitted test %s: score=%s (%s/%s)",
        candidate_id,
        test_id,
        grade.score,
        grade.correct_answers,
        grade.total_questions,
    )
    return SubmissionOutcome(grade=grade, test_id=test_id, test_title=test.title)
