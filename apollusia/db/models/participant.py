"""Participant model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from apollusia.core.constants import CHOICE_MAYBE, CHOICE_YES
from apollusia.db.base import Base


class Participant(Base):
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    poll_id = Column(Integer, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    mail = Column(String(320), nullable=True)
    token = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    poll = relationship("Poll", back_populates="participants")
    selections = relationship("Selection", back_populates="participant", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_participants_poll", "poll_id"),
        Index("idx_participants_token", "token"),
    )

    def event_ids(self, choice: str) -> list[int]:
        return sorted(s.event_id for s in self.selections if s.choice == choice)

    @property
    def participation(self) -> list[int]:
        return self.event_ids(CHOICE_YES)

    @property
    def indeterminate_participation(self) -> list[int]:
        return self.event_ids(CHOICE_MAYBE)
