"""Booking: the admin's final choice of events."""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from apollusia.core.constants import BOOKED_SELECTED_SUFFIX
from apollusia.core.logging_config import get_logger
from apollusia.core.utils import render_event
from apollusia.db.models import Participant, Poll, PollEvent
from apollusia.services.mail import mail_service
from apollusia.services.notifications import NotificationQueue
from apollusia.services.poll import poll_context, poll_link, serialize_poll

logger = get_logger(__name__)


def render_appointments(events: List[PollEvent], participant: Participant, time_zone: Optional[str]) -> List[str]:
    """One line per booked event, marked when the participant selected it."""
    selected = set(participant.participation) | set(participant.indeterminate_participation)
    lines = []
    for event in events:
        line = render_event(event.start, event.end, time_zone)
        if event.id in selected:
            line += BOOKED_SELECTED_SUFFIX
        lines.append(line)
    return lines


def book_events(
    db: Session,
    poll_id: int,
    event_ids: List[int],
    notifications: NotificationQueue,
) -> Optional[Dict[str, Any]]:
    """Set a poll's booked events and queue the schedule mail for every participant.

    Args:
        db: SQLAlchemy session
        poll_id: Poll to book
        event_ids: Ordered ids of the chosen events; empty clears the booking
        notifications: Queue receiving one mail per participant with an address

    Returns:
        The owner's view of the poll, or None if the poll does not exist

    Raises:
        ValueError if any id is not an event of the poll
    """
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if not poll:
        return None

    events_by_id = {
        event.id: event
        for event in db.query(PollEvent).filter(PollEvent.poll_id == poll_id).all()
    }
    unknown = [event_id for event_id in event_ids if event_id not in events_by_id]
    if unknown:
        raise ValueError(f"Unknown events for this poll: {unknown}")

    poll.booked_events = list(event_ids)
    try:
        db.commit()
        db.refresh(poll)
    except Exception:
        db.rollback()
        raise

    logger.info("poll_booked", poll_id=poll_id, events=len(event_ids))

    booked = [events_by_id[event_id] for event_id in event_ids]
    participants = (
        db.query(Participant)
        .options(selectinload(Participant.selections))
        .filter(Participant.poll_id == poll_id)
        .order_by(Participant.id)
        .all()
    )
    for participant in participants:
        if not participant.mail:
            continue
        notifications.submit(
            mail_service.send_mail,
            participant.name,
            participant.mail,
            "Poll booked",
            "book",
            {
                "appointments": render_appointments(booked, participant, poll.time_zone),
                "poll": poll_context(poll),
                "participant": {"name": participant.name},
                "link": poll_link(poll_id),
            },
        )

    return serialize_poll(poll, include_admin=True)
