"""
Typed API errors, user-facing messages and error builders.

Every failure that reaches a client is one of the ``ApiError`` subclasses
below. The exception handlers in ``app.main`` turn them into the standard
response envelope::

    {"success": false, "message": "Test not found"}

Error Message Guidelines:
- Messages are shown to end users verbatim; never include SQL or stack details
- Keep log detail (ids, exception text) in the logger call, not the message

Usage:
    from app.core.error_responses import ErrorMessages, raise_not_found

    if test is None:
        raise_not_found(ErrorMessages.TEST_NOT_FOUND)
"""

from typing import NoReturn

from fastapi import status


class ApiError(Exception):
    """Base class for errors that map directly to an HTTP response.

    Attributes:
        status_code: HTTP status returned to the client
        message: User-facing error message
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BadRequestError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ErrorMessages:
    """Centralized error message constants and templates.

    Naming Convention:
    - Constants: SCREAMING_SNAKE_CASE for static messages
    - Methods: snake_case for templates that accept parameters
    """

    # ==========================================================================
    # Authentication Errors (401)
    # ==========================================================================
    INVALID_CREDENTIALS = "Invalid email or password"
    INVALID_TOKEN = "Invalid authentication token"
    USER_NOT_FOUND_AUTH = "User not found"

    # ==========================================================================
    # Authorization Errors (403)
    # ==========================================================================
    UNAUTHORIZED = "Unauthorized"
    ADMIN_REQUIRED = "Admin access required"
    TEST_ALREADY_COMPLETED = "You have already completed this test."
    TEST_ALREADY_SUBMITTED = "You have already submitted this test."
    DEPARTMENT_MISMATCH = "This test is not available for your department"
    REVIEW_ACCESS_DENIED = "Not authorized to review these answers"

    # ==========================================================================
    # Not Found Errors (404)
    # ==========================================================================
    TEST_NOT_FOUND = "Test not found"
    TEST_ALREADY_DELETED = "Test not found or already deleted"
    RESULT_NOT_FOUND = "No results found for this test"
    DEPARTMENT_NOT_FOUND = "Department not found"

    # ==========================================================================
    # Bad Request Errors (400)
    # ==========================================================================
    INVALID_REQUEST = "Invalid request"
    ANSWERS_REQUIRED = "Answers are required"
    INVALID_TIME_REMAINING = "Invalid time_remaining value"
    NO_QUESTIONS = "No questions found for this test"
    TITLE_AND_QUESTIONS_REQUIRED = "Title and at least one question are required"
    TITLE_REQUIRED = "Title is required"
    PDF_URL_REQUIRED = "PDF URL is required for PDF-based tests"
    DEPARTMENT_REQUIRED = "Department is required for candidate tests"
    DEPARTMENT_NAME_REQUIRED = "Department name is required"
    DEPARTMENT_NAME_TAKEN = "A department with this name already exists"
    QUESTION_BANK_PROTECTED = "Cannot delete the Question Bank department"

    # ==========================================================================
    # Server Errors (500)
    # ==========================================================================
    UNEXPECTED_ERROR = "An unexpected error occurred"

    @staticmethod
    def role_mismatch(role: str) -> str:
        """Message when a test targets a different role than the caller's."""
        return f"This test is only available for {role}s"

    @staticmethod
    def database_operation_failed(operation: str) -> str:
        """Generic message for database operation failures."""
        return f"Failed to {operation}. Please try again later."


# ==============================================================================
# Builder Functions
# ==============================================================================


def raise_bad_request(message: str) -> NoReturn:
    """Raise a 400 Bad Request error for malformed or invalid input."""
    raise BadRequestError(message)


def raise_unauthorized(message: str) -> NoReturn:
    """Raise a 401 Unauthorized error for missing or invalid credentials."""
    raise UnauthorizedError(message)


def raise_forbidden(message: str) -> NoReturn:
    """Raise a 403 Forbidden error.

    Use when the caller is authenticated but may not perform the action,
    including attempts to act on a test that is already in a terminal state.
    """
    raise ForbiddenError(message)


def raise_not_found(message: str) -> NoReturn:
    """Raise a 404 Not Found error when a requested resource doesn't exist."""
    raise NotFoundError(message)


def raise_server_error(message: str = ErrorMessages.UNEXPECTED_ERROR) -> NoReturn:
    """Raise a 500 error with a generic, user-friendly message.

    Technical details belong in the log entry, never in ``message``.
    """
    raise InternalError(message)
