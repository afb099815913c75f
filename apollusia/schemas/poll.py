"""Poll schemas."""
from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, EmailStr, Field, field_validator

from apollusia.core.sanitization import (
    MAX_DESCRIPTION_LENGTH,
    MAX_LOCATION_LENGTH,
    sanitize_multiline,
    sanitize_text,
    sanitize_title,
    validate_token_format,
)


class PollSettings(BaseModel):
    deadline: Optional[datetime] = None
    allow_maybe: bool = True
    allow_edit: bool = True
    anonymous: bool = False


class PollUpdate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=MAX_DESCRIPTION_LENGTH)
    location: str = Field("", max_length=MAX_LOCATION_LENGTH)
    time_zone: Optional[str] = Field(None, max_length=64)
    admin_mail: Optional[EmailStr] = None
    admin_push: Optional[Dict[str, Any]] = None
    settings: PollSettings = Field(default_factory=PollSettings)

    @field_validator('title')
    @classmethod
    def sanitize_title_field(cls, v: str) -> str:
        return sanitize_title(v)

    @field_validator('description')
    @classmethod
    def sanitize_description_field(cls, v: str) -> str:
        return sanitize_multiline(v, max_length=MAX_DESCRIPTION_LENGTH)

    @field_validator('location')
    @classmethod
    def sanitize_location_field(cls, v: str) -> str:
        return sanitize_text(v, max_length=MAX_LOCATION_LENGTH)

    @field_validator('time_zone')
    @classmethod
    def validate_time_zone(cls, v: Optional[str]) -> Optional[str]:
        """Only accept IANA time zone names."""
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown time zone: {v}")
        return v

    @field_validator('admin_push')
    @classmethod
    def validate_push_subscription(cls, v: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """A Web Push subscription needs an endpoint and its p256dh/auth keys."""
        if v is None:
            return v
        keys = v.get("keys")
        if not isinstance(v.get("endpoint"), str) or not isinstance(keys, dict):
            raise ValueError("Push subscription requires 'endpoint' and 'keys'")
        if "p256dh" not in keys or "auth" not in keys:
            raise ValueError("Push subscription keys require 'p256dh' and 'auth'")
        return v


class PollCreate(PollUpdate):
    # Lets one browser reuse its token as admin of many polls
    admin_token: Optional[str] = Field(None, max_length=100)

    @field_validator('admin_token')
    @classmethod
    def validate_admin_token(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return validate_token_format(v)
        return v


class PollRead(BaseModel):
    id: int
    title: str
    description: str
    location: str
    time_zone: Optional[str] = None
    settings: PollSettings
    booked_events: List[int]
    created_at: datetime


class PollAdminRead(PollRead):
    admin_mail: Optional[str] = None
    admin_push: Optional[Dict[str, Any]] = None


class PollCreated(PollAdminRead):
    """Returned once to the creator; the only response carrying the admin token."""
    admin_token: str


class PollStats(PollRead):
    events: int
    participants: int


class AdminCheck(BaseModel):
    admin: bool
