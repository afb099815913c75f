"""PollEvent model."""
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from apollusia.db.base import Base


class PollEvent(Base):
    __tablename__ = "poll_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    poll_id = Column(Integer, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    start = Column(DateTime(timezone=True), nullable=False)
    end = Column(DateTime(timezone=True), nullable=False)
    note = Column(String(500), nullable=True)

    # Relationships
    poll = relationship("Poll", back_populates="events")

    __table_args__ = (Index("idx_poll_events_poll", "poll_id"),)
