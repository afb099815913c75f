"""Pydantic schemas for request/response validation."""
from apollusia.schemas.poll import (
    PollSettings,
    PollCreate,
    PollUpdate,
    PollRead,
    PollAdminRead,
    PollCreated,
    PollStats,
    AdminCheck,
)
from apollusia.schemas.event import PollEventIn, PollEventRead
from apollusia.schemas.participant import (
    ParticipantCreate,
    ParticipantUpdate,
    ParticipantRead,
    ParticipantFull,
    MailUpdate,
)
from apollusia.schemas.booking import BookRequest
from apollusia.schemas.common import SuccessResponse

__all__ = [
    "PollSettings",
    "PollCreate",
    "PollUpdate",
    "PollRead",
    "PollAdminRead",
    "PollCreated",
    "PollStats",
    "AdminCheck",
    "PollEventIn",
    "PollEventRead",
    "ParticipantCreate",
    "ParticipantUpdate",
    "ParticipantRead",
    "ParticipantFull",
    "MailUpdate",
    "BookRequest",
    "SuccessResponse",
]
