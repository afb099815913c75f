"""Poll event schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from apollusia.core.sanitization import MAX_NOTE_LENGTH, sanitize_multiline
from apollusia.core.utils import to_utc


class PollEventIn(BaseModel):
    id: Optional[int] = None  # Omitted for new events
    start: datetime
    end: datetime
    note: Optional[str] = Field(None, max_length=MAX_NOTE_LENGTH)

    @field_validator('note')
    @classmethod
    def sanitize_note_field(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return sanitize_multiline(v, max_length=MAX_NOTE_LENGTH) or None

    @model_validator(mode='after')
    def check_order(self):
        # Naive timestamps are taken as UTC
        if to_utc(self.end) < to_utc(self.start):
            raise ValueError("Event end must not be before its start")
        return self


class PollEventRead(BaseModel):
    id: int
    poll_id: int
    start: datetime
    end: datetime
    note: Optional[str] = None
