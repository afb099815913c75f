"""Poll event business logic."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from apollusia.core.logging_config import get_logger
from apollusia.core.utils import to_utc
from apollusia.db.models import Participant, Poll, PollEvent, Selection

logger = get_logger(__name__)


@dataclass
class EventDiff:
    """Partition of an incoming event list against the stored one."""
    inserted: List[Any] = field(default_factory=list)
    updated: List[Any] = field(default_factory=list)
    deleted: List[Any] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.inserted or self.updated or self.deleted)


def _same_slot(stored, incoming) -> bool:
    return (
        to_utc(stored.start) == to_utc(incoming.start)
        and to_utc(stored.end) == to_utc(incoming.end)
        and (stored.note or None) == (incoming.note or None)
    )


def diff_events(stored: Sequence[Any], incoming: Sequence[Any]) -> EventDiff:
    """Compare incoming events with the stored ones, keyed by id.

    Both sides only need ``id``, ``start``, ``end`` and ``note`` attributes.
    Incoming entries without an id, or with an id that is not stored, are
    inserted; entries whose slot or note changed are updated; stored entries
    missing from incoming are deleted. Unchanged entries appear nowhere.
    """
    stored_by_id = {event.id: event for event in stored}
    incoming_ids = {event.id for event in incoming if event.id is not None}

    diff = EventDiff()
    for event in incoming:
        old = stored_by_id.get(event.id) if event.id is not None else None
        if old is None:
            diff.inserted.append(event)
        elif not _same_slot(old, event):
            diff.updated.append(event)

    diff.deleted = [event for event in stored if event.id not in incoming_ids]
    return diff


def serialize_event(event: PollEvent) -> Dict[str, Any]:
    return {
        "id": event.id,
        "poll_id": event.poll_id,
        "start": to_utc(event.start),
        "end": to_utc(event.end),
        "note": event.note,
    }


def get_events(db: Session, poll_id: int) -> Optional[List[Dict[str, Any]]]:
    """Events of a poll ordered by start, or None if the poll does not exist."""
    if not db.query(Poll.id).filter(Poll.id == poll_id).first():
        return None

    events = (
        db.query(PollEvent)
        .filter(PollEvent.poll_id == poll_id)
        .order_by(PollEvent.start, PollEvent.id)
        .all()
    )
    return [serialize_event(event) for event in events]


def prune_event_references(db: Session, poll: Poll, event_ids: List[int]) -> None:
    """Remove event ids from every participant's selections and from the bookings.

    Does not commit.
    """
    if not event_ids:
        return

    participant_ids = select(Participant.id).where(Participant.poll_id == poll.id)
    db.query(Selection).filter(
        Selection.participant_id.in_(participant_ids),
        Selection.event_id.in_(event_ids),
    ).delete(synchronize_session=False)

    removed = set(event_ids)
    booked = list(poll.booked_events or [])
    if any(event_id in removed for event_id in booked):
        poll.booked_events = [event_id for event_id in booked if event_id not in removed]


def post_events(db: Session, poll_id: int, incoming: Sequence[Any]) -> Optional[List[Dict[str, Any]]]:
    """Replace a poll's event set with ``incoming``.

    Args:
        db: SQLAlchemy session
        poll_id: Poll whose events are replaced
        incoming: The complete new event list (PollEventIn-like objects)

    Returns:
        The stored events after reconciliation, or None if the poll does not exist
    """
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if not poll:
        return None

    stored = db.query(PollEvent).filter(PollEvent.poll_id == poll_id).all()
    diff = diff_events(stored, incoming)

    if diff.changed:
        stored_by_id = {event.id: event for event in stored}
        try:
            for event in diff.inserted:
                db.add(PollEvent(
                    poll_id=poll_id,
                    start=to_utc(event.start),
                    end=to_utc(event.end),
                    note=event.note,
                ))

            for event in diff.updated:
                target = stored_by_id[event.id]
                target.start = to_utc(event.start)
                target.end = to_utc(event.end)
                target.note = event.note

            deleted_ids = [event.id for event in diff.deleted]
            if deleted_ids:
                prune_event_references(db, poll, deleted_ids)
                db.query(PollEvent).filter(PollEvent.id.in_(deleted_ids)).delete(synchronize_session=False)

            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(
            "events_reconciled",
            poll_id=poll_id,
            inserted=len(diff.inserted),
            updated=len(diff.updated),
            deleted=len(diff.deleted),
        )

    return get_events(db, poll_id)
