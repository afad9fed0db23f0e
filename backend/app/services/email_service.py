"""
Email service for test completion notifications.

This module sends email using SMTP configuration from settings. In
development/testing environments without SMTP configured, it logs the
message summary instead of sending.
"""
import logging
import smtplib
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr
from html import escape

from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.scoring import GradeSummary

# SMTP connection timeout in seconds
SMTP_TIMEOUT_SECONDS = 10

logger = logging.getLogger(__name__)

COMPLETION_HTML_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Test Completed</title>
</head>
<body style="font-family: Helvetica, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="margin-top: 0;">Test Completed</h1>
    <p>Hi {name},</p>
    <p>Thank you for completing <strong>{test_title}</strong>. Your submission has been recorded.</p>
    <table style="border-collapse: collapse; margin: 20px 0;">
        <tr><td style="padding: 4px 12px 4px 0;">Score</td><td><strong>{score}%</strong></td></tr>
        <tr><td style="padding: 4px 12px 4px 0;">Correct answers</td><td>{correct_answers} of {total_questions}</td></tr>
        <tr><td style="padding: 4px 12px 4px 0;">Remarks</td><td>{remarks}</td></tr>
    </table>
    <p style="font-size: 12px; color: #999;">This is an automated email from {app_name}. Please do not reply. &copy; {year}</p>
</body>
</html>
"""

COMPLETION_TEXT_TEMPLATE = """
Test Completed

Hi {name},

Thank you for completing {test_title}. Your submission has been recorded.

Score: {score}%
Correct answers: {correct_answers} of {total_questions}
Remarks: {remarks}

---
This is an automated email from {app_name}. Please do not reply.
"""


def _is_smtp_configured() -> bool:
    """
    Check if SMTP is properly configured.

    Returns:
        True if all required SMTP settings are configured, False otherwise.
    """
    return bool(
        settings.SMTP_HOST
        and settings.SMTP_PORT
        and settings.SMTP_USERNAME
        and settings.SMTP_PASSWORD
        and settings.SMTP_FROM_EMAIL
    )


def _deliver(msg: MIMEMultipart) -> None:
    """Blocking SMTP exchange; callers run it off the event loop."""
    with smtplib.SMTP(
        settings.SMTP_HOST, settings.SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS
    ) as server:
        server.starttls()
        server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)


async def send_completion_notification(
    email: str,
    name: str,
    test_title: str,
    grade: GradeSummary,
) -> bool:
    """
    Email a candidate their test completion summary.

    Without SMTP configured, the summary is logged instead.

    Args:
        email: Recipient email address
        name: Candidate display name
        test_title: Title of the completed test
        grade: Score, totals and remarks of the submission

    Returns:
        True if the email was sent or logged, False on delivery error
    """
    if not _is_smtp_configured():
        logger.info(
            "SMTP not configured. Completion email for %s on '%s': score=%s%%",
            email,
            test_title,
            grade.score,
        )
        return True

    fields = {
        "name": name,
        "test_title": test_title,
        "score": grade.score,
        "correct_answers": grade.correct_answers,
        "total_questions": grade.total_questions,
        "remarks": grade.remarks,
        "app_name": settings.APP_NAME,
        "year": datetime.now().year,
    }

    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = f"Test completed: {test_title}"
        msg["From"] = formataddr((settings.SMTP_FROM_NAME, settings.SMTP_FROM_EMAIL))
        # formataddr prevents header injection through the address
        msg["To"] = formataddr(("", email))

        msg.attach(MIMEText(COMPLETION_TEXT_TEMPLATE.format(**fields), "plain"))
        html_fields = {
            key: escape(value) if isinstance(value, str) else value
            for key, value in fields.items()
        }
        msg.attach(MIMEText(COMPLETION_HTML_TEMPLATE.format(**html_fields), "html"))

        await run_in_threadpool(_deliver, msg)

        logger.info("Completion email sent to %s", email)
        return True

    except smtplib.SMTPException as e:
        logger.error("SMTP error sending completion email to %s: %s", email, e)
        return False
    except OSError as e:
        logger.error(
            "Connection error sending completion email to %s: %s",
            email,
            e,
            exc_info=True,
        )
        return False
