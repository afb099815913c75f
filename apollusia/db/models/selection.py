"""Selection model: one participant's yes/maybe mark on one event."""
from sqlalchemy import Column, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from apollusia.db.base import Base


class Selection(Base):
    __tablename__ = "selections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    event_id = Column(Integer, ForeignKey("poll_events.id", ondelete="CASCADE"), nullable=False)
    choice = Column(String(5), nullable=False)  # "yes" or "maybe"

    # Relationships
    participant = relationship("Participant", back_populates="selections")

    __table_args__ = (
        Index("idx_selections_event", "event_id"),
        UniqueConstraint("participant_id", "event_id", name="uq_participant_event"),
    )
