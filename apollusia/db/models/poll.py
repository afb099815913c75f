"""Poll model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Boolean, Column, DateTime, Index, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from apollusia.db.base import Base


class Poll(Base):
    __tablename__ = "polls"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String(200), nullable=False, default="")
    time_zone = Column(String(64), nullable=True)

    # Write-bearer credential, never exposed in read responses
    admin_token = Column(String(100), nullable=False)
    admin_mail = Column(String(320), nullable=True)
    admin_push = Column(JSON, nullable=True)  # Web Push subscription object

    # Settings
    deadline = Column(DateTime(timezone=True), nullable=True)
    allow_maybe = Column(Boolean, nullable=False, default=True)
    allow_edit = Column(Boolean, nullable=False, default=True)
    anonymous = Column(Boolean, nullable=False, default=False)

    # Ordered list of PollEvent ids chosen by the admin
    booked_events = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    events = relationship("PollEvent", back_populates="poll", order_by="PollEvent.start")
    participants = relationship("Participant", back_populates="poll", order_by="Participant.id")

    __table_args__ = (
        Index("idx_polls_admin_token", "admin_token"),
        Index("idx_polls_created_at", "created_at"),
    )
