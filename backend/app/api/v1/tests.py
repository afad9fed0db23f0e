"""
Test endpoints: authoring, taking, submitting and reviewing tests.

Static paths (``/my-tests``, ``/available``, ...) are declared before the
``/{test_id}`` routes so they are never captured as ids.
"""
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session, sessionmaker

from app.core import authoring, progress, reporting
from app.core.auth import get_current_user, require_roles
from app.core.background_tasks import safe_background_task
from app.core.submission import submit_test as grade_submission
from app.models import get_db, get_session_factory, User, UserRole
from app.schemas.common import EnvelopeResponse
from app.schemas.progress import (
    ActiveTestResponse,
    AttemptState,
    SaveProgressRequest,
    Submission,
    SubmitTestRequest,
    SubmitTestResponse,
    TakeTestResponse,
    TestStatusResponse,
)
from app.schemas.results import AnswerReviewResponse, TestResultsResponse
from app.schemas.tests import (
    QuestionListResponse,
    TestCreatedResponse,
    TestCreateRequest,
    TestDetailResponse,
    TestListResponse,
    TestUpdateRequest,
)
from app.services.notifications import notify_test_completion

logger = logging.getLogger(__name__)

router = APIRouter()

require_author = require_roles(UserRole.ADMIN, UserRole.EMPLOYER)


# =============================================================================
# Listings
# =============================================================================


@router.get("/my-tests", response_model=TestListResponse)
def get_my_tests(
    current_user: User = Depends(require_author),
    db: Session = Depends(get_db),
):
    """Tests created by the caller, newest first."""
    return TestListResponse(tests=authoring.list_my_tests(db, current_user))


@router.get("/available", response_model=TestListResponse)
def get_available_tests(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Tests the caller may take, with completion and in-progress flags."""
    return TestListResponse(tests=authoring.list_available_tests(db, current_user))


@router.get("/active-test", response_model=ActiveTestResponse)
def get_active_test(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The caller's in-progress attempt to resume, if any."""
    return ActiveTestResponse(
        active_test=progress.get_active_test(db, current_user)
    )


@router.get("/questions/all", response_model=QuestionListResponse)
def get_all_questions(
    source: Optional[str] = Query(
        None, description="Use 'question-bank' for the shared question bank"
    ),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return QuestionListResponse(
        questions=authoring.list_questions(db, current_user, source)
    )


# =============================================================================
# Authoring
# =============================================================================


@router.post(
    "/create",
    response_model=TestCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_test(
    data: TestCreateRequest,
    current_user: User = Depends(require_author),
    db: Session = Depends(get_db),
):
    """
    Create a test together with its questions.

    Raises:
        BadRequestError: 400 if title or questions are missing, or the test
            type / target role is missing required settings
    """
    test_id = authoring.create_test(db, data, current_user)
    return TestCreatedResponse(message="Test created successfully", test_id=test_id)


@router.get("/{test_id}", response_model=TestDetailResponse)
def get_test(
    test_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Full test with answer keys. Owner or admin only."""
    return TestDetailResponse(test=authoring.get_test(db, test_id, current_user))


@router.put("/{test_id}", response_model=EnvelopeResponse)
def update_test(
    test_id: int,
    data: TestUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Replace test settings; a non-empty question list replaces all questions."""
    authoring.update_test(db, test_id, data, current_user)
    return EnvelopeResponse(message="Test updated successfully")


@router.delete("/{test_id}", response_model=EnvelopeResponse)
def delete_test(
    test_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    authoring.delete_test(db, test_id, current_user)
    return EnvelopeResponse(
        message="Test and all associated data deleted successfully"
    )


# =============================================================================
# Taking and submitting
# =============================================================================


@router.get("/{test_id}/take", response_model=TakeTestResponse)
def take_test(
    test_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Start or resume a test. Answer keys are never included."""
    test, state = progress.begin_or_resume_test(db, current_user, test_id)
    return TakeTestResponse(test=test, attempt=AttemptState.model_validate(state))


@router.post("/{test_id}/save-progress", response_model=EnvelopeResponse)
def save_progress(
    test_id: int,
    data: SaveProgressRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    progress.save_progress(
        db, current_user, test_id, data.answers, data.time_remaining
    )
    return EnvelopeResponse(message="Progress saved")


@router.get("/{test_id}/status", response_model=TestStatusResponse)
def get_test_status(
    test_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return TestStatusResponse(**progress.get_test_status(db, current_user, test_id))


@router.post(
    "/{test_id}/submit",
    response_model=SubmitTestResponse,
    status_code=status.HTTP_201_CREATED,
)
def submit_test(
    test_id: int,
    data: SubmitTestRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Grade and record the caller's answers. Allowed exactly once per test.

    The completion email and invitation update run after the response is
    sent and never affect it.

    Raises:
        BadRequestError: 400 if answers are missing or the test has no questions
        ForbiddenError: 403 if the test was already submitted
        NotFoundError: 404 if the test does not exist
    """
    outcome = grade_submission(db, current_user, test_id, data.answers)

    background_tasks.add_task(
        safe_background_task,
        notify_test_completion,
        session_factory,
        candidate_id=current_user.id,
        test_id=outcome.test_id,
        test_title=outcome.test_title,
        grade=outcome.grade,
    )

    grade = outcome.grade
    return SubmitTestResponse(
        message="Test submitted successfully",
        submission=Submission(
            score=grade.score,
            total_questions=grade.total_questions,
            correct_answers=grade.correct_answers,
            remarks=grade.remarks,
        ),
    )


# =============================================================================
# Results and review
# =============================================================================


@router.get("/{test_id}/results", response_model=TestResultsResponse)
def get_test_results(
    test_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """All results for a test. Owner or admin only."""
    return TestResultsResponse(
        results=reporting.get_test_results(db, test_id, current_user)
    )


@router.get("/{test_id}/review", response_model=AnswerReviewResponse)
def review_own_answers(
    test_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The caller's own answer review."""
    return AnswerReviewResponse(
        **reporting.get_answer_review(db, test_id, current_user.id, current_user)
    )


@router.get("/{test_id}/review/{candidate_id}", response_model=AnswerReviewResponse)
def review_candidate_answers(
    test_id: int,
    candidate_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """A candidate's answer review, for admins, the test owner or the candidate."""
    return AnswerReviewResponse(
        **reporting.get_answer_review(db, test_id, candidate_id, current_user)
    )
