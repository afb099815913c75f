"""Outbound notification queue.

Mails and pushes are submitted here instead of being sent inline. The queue
is backed by FastAPI's BackgroundTasks, so sends run after the response has
been delivered, and a failing send is logged and dropped.
"""
from typing import Any, Callable

from fastapi import BackgroundTasks

from apollusia.core.logging_config import get_logger

logger = get_logger(__name__)


def run_safely(func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    """Run a send, logging instead of raising on failure."""
    try:
        func(*args, **kwargs)
    except Exception as e:
        logger.error(
            "notification_failed",
            task=getattr(func, "__qualname__", repr(func)),
            error=str(e),
            error_type=type(e).__name__,
        )


class NotificationQueue:
    """Collects fire-and-forget sends for the current request."""

    def __init__(self, background_tasks: BackgroundTasks):
        self.background_tasks = background_tasks

    def submit(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self.background_tasks.add_task(run_safely, func, *args, **kwargs)

    def __len__(self) -> int:
        return len(self.background_tasks.tasks)


def get_notification_queue(background_tasks: BackgroundTasks) -> NotificationQueue:
    """Dependency providing a queue bound to the request's background tasks."""
    return NotificationQueue(background_tasks)
