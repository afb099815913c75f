"""Participant schemas."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from apollusia.core.sanitization import sanitize_participant_name, validate_token_format


class ParticipantUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    mail: Optional[EmailStr] = None
    participation: List[int] = Field(default_factory=list)
    indeterminate_participation: List[int] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: str) -> str:
        return sanitize_participant_name(v)

    @model_validator(mode='after')
    def check_selections(self):
        """An event is either yes or maybe, and listed once."""
        yes = set(self.participation)
        maybe = set(self.indeterminate_participation)
        if len(yes) != len(self.participation) or len(maybe) != len(self.indeterminate_participation):
            raise ValueError("Events may only be listed once")
        if yes & maybe:
            raise ValueError("An event cannot be marked both yes and maybe")
        return self


class ParticipantCreate(ParticipantUpdate):
    # Generated when omitted; returned so the client can recognize itself later
    token: Optional[str] = Field(None, max_length=100)

    @field_validator('token')
    @classmethod
    def validate_token_field(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return validate_token_format(v)
        return v


class ParticipantRead(BaseModel):
    id: int
    poll_id: int
    name: str
    participation: List[int]
    indeterminate_participation: List[int]
    created_at: datetime


class ParticipantFull(ParticipantRead):
    """A participant as seen by itself."""
    mail: Optional[str] = None
    token: str


class MailUpdate(BaseModel):
    token: str = Field(..., min_length=1, max_length=100)
    mail: EmailStr

    @field_validator('token')
    @classmethod
    def validate_token_field(cls, v: str) -> str:
        return validate_token_format(v)
