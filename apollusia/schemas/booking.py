"""Booking schemas."""
from typing import List

from pydantic import BaseModel, field_validator


class BookRequest(BaseModel):
    events: List[int]

    @field_validator('events')
    @classmethod
    def unique_events(cls, v: List[int]) -> List[int]:
        if len(set(v)) != len(v):
            raise ValueError("Events may only be booked once")
        return v
