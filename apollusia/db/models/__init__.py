"""Database models."""
from apollusia.db.models.poll import Poll
from apollusia.db.models.poll_event import PollEvent
from apollusia.db.models.participant import Participant
from apollusia.db.models.selection import Selection

__all__ = ["Poll", "PollEvent", "Participant", "Selection"]
