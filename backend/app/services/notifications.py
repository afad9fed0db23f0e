"""
Post-submission notifications.

Runs after the submission transaction has committed, as a FastAPI background
task. Nothing here can affect the submission: each step is wrapped in
graceful_failure and logs instead of raising.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from app.core.datetime_utils import utc_now
from app.core.graceful_failure import graceful_failure
from app.core.scoring import GradeSummary
from app.models import InvitationStatus, TestInvitation, User
from app.services.email_service import send_completion_notification

logger = logging.getLogger(__name__)


def mark_invitations_completed(db: Session, email: str, test_id: int) -> int:
    """Close open invitations for ``email`` on ``test_id``; returns rows updated."""
    updated = (
        db.query(TestInvitation)
        .filter(
            TestInvitation.test_id == test_id,
            TestInvitation.candidate_email == email,
            TestInvitation.status != InvitationStatus.COMPLETED,
        )
        .update(
            {
                TestInvitation.status: InvitationStatus.COMPLETED,
                TestInvitation.completed_at: utc_now(),
            },
            synchronize_session=False,
        )
    )
    db.commit()
    return updated


def _load_recipient(
    session_factory: sessionmaker[Session], candidate_id: int
) -> Optional[Tuple[str, str]]:
    with session_factory() as db:
        candidate = db.query(User).filter(User.id == candidate_id).first()
        if candidate is None:
            return None
        return candidate.email, candidate.name


def _close_invitations(
    session_factory: sessionmaker[Session], email: str, test_id: int
) -> int:
    with session_factory() as db:
        try:
            return mark_invitations_completed(db, email, test_id)
        except Exception:
            db.rollback()
            raise


async def notify_test_completion(
    session_factory: sessionmaker[Session],
    candidate_id: int,
    test_id: int,
    test_title: str,
    grade: GradeSummary,
) -> None:
    """
    Email the candidate and mark their invitation for the test as completed.

    Opens its own sessions because the request session is closed by the time
    background tasks run. Database work is sync, so it runs in the threadpool
    and never holds up the event loop.
    """
    context = {"candidate_id": candidate_id, "test_id": test_id}

    recipient = await run_in_threadpool(_load_recipient, session_factory, candidate_id)
    if recipient is None:
        logger.warning("Skipping completion notification: %s", context)
        return
    email, name = recipient

    with graceful_failure("send completion email", logger, context=context):
        sent = await send_completion_notification(email, name, test_title, grade)
        if not sent:
            logger.warning("Completion email not delivered (%s)", context)

    with graceful_failure(
        "update invitation status", logger, exc_info=True, context=context
    ):
        updated = await run_in_threadpool(
            _close_invitations, session_factory, email, test_id
        )
        if updated:
            logger.info("Marked %d invitation(s) completed (%s)", updated, context)
