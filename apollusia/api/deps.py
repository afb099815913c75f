"""Shared API dependencies."""
from apollusia.db import get_db
from apollusia.core.security import (
    get_admin_token,
    get_participant_token,
    require_admin_token,
    require_poll_admin,
)
from apollusia.services.notifications import get_notification_queue

__all__ = [
    "get_db",
    "get_admin_token",
    "get_participant_token",
    "require_admin_token",
    "require_poll_admin",
    "get_notification_queue",
]
