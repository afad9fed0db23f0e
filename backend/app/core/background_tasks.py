"""
Safe background task wrapper for consistent exception handling.

Starlette BackgroundTask exceptions propagate differently depending on the
middleware stack: with middleware present they are silently caught, but without
middleware (e.g., in TestClient) they crash the ASGI lifecycle. This wrapper
catches and logs every background task exception so behavior is identical in
both environments.

Usage with FastAPI BackgroundTasks::

    from app.core.background_tasks import safe_background_task

    background_tasks.add_task(
        safe_background_task,
        notify_test_completion,
        session_factory,
        candidate_id=candidate.id,
        test_id=test.id,
    )
"""

import logging
from typing import Any, Awaitable, Callable

import sentry_sdk

logger = logging.getLogger(__name__)


async def safe_background_task(
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    **kwargs: Any,
) -> None:
    """Execute an async function, catching and logging any exception.

    Pass this directly to ``BackgroundTasks.add_task`` with the target
    coroutine function as the first positional argument. Remaining arguments
    are forwarded to *func*.

    No retries are attempted; background tasks are fire-and-forget.
    """
    name = getattr(func, "__name__", repr(func))
    try:
        await func(*args, **kwargs)
    except Exception as e:
        logger.exception("Background task '%s' failed", name)
        sentry_sdk.capture_exception(e)
