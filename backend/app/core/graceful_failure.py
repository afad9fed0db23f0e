"""
Graceful failure handling for side-channel operations.

Some work must never fail the request that triggered it: completion emails
and invitation bookkeeping run after a submission has already been committed.
``graceful_failure`` wraps such a step, logs any exception with context, and
lets execution continue.

This is the counterpart of ``db_error_handling.transaction``, which rolls back
and raises.

Usage:
    from app.core.graceful_failure import graceful_failure

    with graceful_failure("send completion email", logger, context={"test_id": 7}):
        await send_completion_notification(...)
"""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional


@contextmanager
def graceful_failure(
    operation_name: str,
    logger: logging.Logger,
    *,
    log_level: int = logging.WARNING,
    exc_info: bool = False,
    context: Optional[dict[str, Any]] = None,
) -> Generator[None, None, None]:
    """Run the wrapped block, logging and absorbing any exception.

    Args:
        operation_name: Human-readable name of the operation for logging
            (e.g., "send completion email").
        logger: The logger instance to use for logging errors.
        log_level: Logging level for error messages. Defaults to WARNING.
        exc_info: Whether to include the traceback in the log entry.
        context: Optional key/value pairs appended to the log message
            (e.g., {"candidate_id": 3, "test_id": 9}).
    """
    try:
        yield
    except Exception as e:
        if context:
            context_str = ", ".join(f"{k}={v}" for k, v in context.items())
            message = f"Failed to {operation_name} ({context_str}): {e}"
        else:
            message = f"Failed to {operation_name}: {e}"

        logger.log(log_level, message, exc_info=exc_info)
