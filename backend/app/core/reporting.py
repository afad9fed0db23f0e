"""
Read-only result reporting and answer review.
"""

from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.core.authoring import ensure_can_manage, get_test_or_404
from app.core.error_responses import ErrorMessages, raise_forbidden, raise_not_found
from app.core.question_utils import parse_options
from app.models import Answer, Question, Result, User, UserRole


def _result_to_dict(result: Result, candidate: User) -> Dict[str, Any]:
    return {
        "id": result.id,
        "candidate_id": result.candidate_id,
        "candidate_name": candidate.name if candidate else None,
        "candidate_email": candidate.email if candidate else None,
        "test_id": result.test_id,
        "total_questions": result.total_questions,
        "correct_answers": result.correct_answers,
        "score": result.score,
        "remarks": result.remarks,
        "taken_at": result.taken_at,
        "finished_at": result.finished_at,
    }


def get_test_results(db: Session, test_id: int, caller: User) -> List[Dict[str, Any]]:
    """All results for a test, newest first. Owner or admin only."""
    test = get_test_or_404(db, test_id)
    ensure_can_manage(test, caller)

    rows = (
        db.query(Result, User)
        .outerjoin(User, Result.candidate_id == User.id)
        .filter(Result.test_id == test_id)
        .order_by(Result.taken_at.desc(), Result.id.desc())
        .all()
    )
    return [_result_to_dict(result, candidate) for result, candidate in rows]


def get_answer_review(
    db: Session, test_id: int, candidate_id: int, caller: User
) -> Dict[str, Any]:
    """
    Question-by-question review of one candidate's submission.

    Visible to admins, the test owner, and the candidate themself.

    Raises:
        NotFoundError: no such test, or the candidate has no result for it
        ForbiddenError: the caller may not see this candidate's answers
    """
    test = get_test_or_404(db, test_id)
    allowed = (
        caller.role == UserRole.ADMIN.value
        or test.created_by == caller.id
        or caller.id == candidate_id
    )
    if not allowed:
        raise_forbidden(ErrorMessages.REVIEW_ACCESS_DENIED)

    row = (
        db.query(Result, User)
        .outerjoin(User, Result.candidate_id == User.id)
        .filter(Result.test_id == test_id, Result.candidate_id == candidate_id)
        .first()
    )
    if row is None:
        raise_not_found(ErrorMessages.RESULT_NOT_FOUND)
    result, candidate = row

    pairs = (
        db.query(Question, Answer)
        .outerjoin(
            Answer,
            (Answer.question_id == Question.id)
            & (Answer.candidate_id == candidate_id),
        )
        .filter(Question.test_id == test_id)
        .order_by(Question.id)
        .all()
    )

    return {
        "test": {"id": test.id, "title": test.title, "description": test.description},
        "result": _result_to_dict(result, candidate),
        "questions": [
            {
                "id": question.id,
                "question_text": question.question_text,
                "question_type": question.question_type,
                "options": parse_options(question.options),
                "correct_answer": question.correct_answer,
                "explanation": question.explanation,
                "user_answer": answer.answer if answer else None,
                "is_correct": bool(answer.is_correct) if answer else False,
            }
            for question, answer in pairs
        ],
    }
