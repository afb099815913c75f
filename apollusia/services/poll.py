"""Poll business logic."""
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from apollusia.core import config
from apollusia.core.constants import CLONE_TITLE_SUFFIX
from apollusia.core.logging_config import get_logger
from apollusia.core.security import AdminToken, is_poll_admin
from apollusia.core.utils import to_utc, utcnow
from apollusia.db.models import Participant, Poll, PollEvent, Selection

logger = get_logger(__name__)

# Fields copied verbatim by update and clone
POLL_FIELDS = ("title", "description", "location", "time_zone", "admin_mail", "admin_push")
SETTINGS_FIELDS = ("deadline", "allow_maybe", "allow_edit", "anonymous")


def poll_link(poll_id: int) -> str:
    """Public participation URL of a poll."""
    return f"{config.settings.ORIGIN}/poll/{poll_id}/participate"


def poll_context(poll: Poll) -> Dict[str, Any]:
    """Plain, session-independent poll data for mail templates."""
    return {
        "id": poll.id,
        "title": poll.title,
        "description": poll.description,
        "location": poll.location,
        "time_zone": poll.time_zone,
    }


def serialize_poll(poll: Poll, include_admin: bool = False) -> Dict[str, Any]:
    """Build the read model of a poll.

    The admin token is never part of it. ``include_admin`` adds the owner's
    notification targets.
    """
    data = {
        "id": poll.id,
        "title": poll.title,
        "description": poll.description or "",
        "location": poll.location or "",
        "time_zone": poll.time_zone,
        "settings": {
            "deadline": to_utc(poll.deadline) if poll.deadline else None,
            "allow_maybe": poll.allow_maybe,
            "allow_edit": poll.allow_edit,
            "anonymous": poll.anonymous,
        },
        "booked_events": list(poll.booked_events or []),
        "created_at": to_utc(poll.created_at),
    }
    if include_admin:
        data["admin_mail"] = poll.admin_mail
        data["admin_push"] = poll.admin_push
    return data


def _apply_fields(poll: Poll, data: Dict[str, Any]) -> None:
    for field in POLL_FIELDS:
        if field in data:
            setattr(poll, field, data[field])

    settings = data.get("settings") or {}
    for field in SETTINGS_FIELDS:
        if field in settings:
            setattr(poll, field, settings[field])
    if poll.deadline is not None:
        poll.deadline = to_utc(poll.deadline)


def _active_filter(active: Optional[bool]):
    """Filter polls by deadline state; ``None`` keeps all."""
    if active is None:
        return None

    now = utcnow()
    if active:
        return or_(Poll.deadline.is_(None), Poll.deadline > now)
    return and_(Poll.deadline.isnot(None), Poll.deadline <= now)


def get_counts_bulk(db: Session, poll_ids: List[int]) -> Dict[int, Dict[str, int]]:
    """
    Count events and participants for several polls at once.

    Returns:
        Dict mapping poll_id -> {"events": n, "participants": m}
    """
    counts = {poll_id: {"events": 0, "participants": 0} for poll_id in poll_ids}
    if not poll_ids:
        return counts

    event_counts = (
        db.query(PollEvent.poll_id, func.count(PollEvent.id))
        .filter(PollEvent.poll_id.in_(poll_ids))
        .group_by(PollEvent.poll_id)
        .all()
    )
    for poll_id, count in event_counts:
        counts[poll_id]["events"] = count

    participant_counts = (
        db.query(Participant.poll_id, func.count(Participant.id))
        .filter(Participant.poll_id.in_(poll_ids))
        .group_by(Participant.poll_id)
        .all()
    )
    for poll_id, count in participant_counts:
        counts[poll_id]["participants"] = count

    return counts


def _read_polls(db: Session, *criteria) -> List[Dict[str, Any]]:
    query = db.query(Poll)
    for criterion in criteria:
        if criterion is not None:
            query = query.filter(criterion)
    polls = query.order_by(Poll.created_at.desc(), Poll.id.desc()).all()

    counts = get_counts_bulk(db, [poll.id for poll in polls])
    return [{**serialize_poll(poll), **counts[poll.id]} for poll in polls]


def get_polls(db: Session, admin_token: AdminToken, active: Optional[bool] = None) -> List[Dict[str, Any]]:
    """List the polls owned by an admin token, newest first, with counts."""
    return _read_polls(db, Poll.admin_token == admin_token.reveal(), _active_filter(active))


def get_participated_polls(db: Session, participant_token: str) -> List[Dict[str, Any]]:
    """List the polls a participant token has answered, newest first, with counts."""
    poll_ids = (
        select(Participant.poll_id)
        .where(Participant.token == participant_token)
        .distinct()
    )
    return _read_polls(db, Poll.id.in_(poll_ids))


def get_poll(db: Session, poll_id: int, admin_token: Optional[AdminToken] = None) -> Optional[Dict[str, Any]]:
    """Fetch one poll; owners additionally see the admin notification targets."""
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if not poll:
        return None
    return serialize_poll(poll, include_admin=is_poll_admin(poll, admin_token))


def is_admin(db: Session, poll_id: int, admin_token: Optional[AdminToken]) -> Optional[bool]:
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if not poll:
        return None
    return is_poll_admin(poll, admin_token)


def create_poll(db: Session, data: Dict[str, Any]) -> Dict[str, Any]:
    """Create a new poll.

    Args:
        db: SQLAlchemy session
        data: Validated PollCreate fields. A missing ``admin_token`` is generated.

    Returns:
        The owner's view of the poll plus its ``admin_token``
    """
    token = AdminToken(data["admin_token"]) if data.get("admin_token") else AdminToken.generate()

    poll = Poll(admin_token=token.reveal(), booked_events=[])
    _apply_fields(poll, data)

    try:
        db.add(poll)
        db.commit()
        db.refresh(poll)
    except Exception:
        db.rollback()
        raise

    logger.info("poll_created", poll_id=poll.id)
    return {**serialize_poll(poll, include_admin=True), "admin_token": token.reveal()}


def update_poll(db: Session, poll_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Replace a poll's editable fields. Returns None if the poll does not exist."""
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if not poll:
        return None

    _apply_fields(poll, data)
    try:
        db.commit()
        db.refresh(poll)
    except Exception:
        db.rollback()
        raise

    logger.info("poll_updated", poll_id=poll_id)
    return serialize_poll(poll, include_admin=True)


def clone_poll(db: Session, poll_id: int) -> Optional[Dict[str, Any]]:
    """Copy a poll and its events under a fresh admin token.

    Participants and bookings are not copied.
    """
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if not poll:
        return None

    token = AdminToken.generate()
    clone = Poll(admin_token=token.reveal(), booked_events=[])
    for field in POLL_FIELDS + SETTINGS_FIELDS:
        setattr(clone, field, getattr(poll, field))
    clone.title = f"{poll.title}{CLONE_TITLE_SUFFIX}"

    try:
        db.add(clone)
        db.flush()
        for event in poll.events:
            db.add(PollEvent(poll_id=clone.id, start=event.start, end=event.end, note=event.note))
        db.commit()
        db.refresh(clone)
    except Exception:
        db.rollback()
        raise

    logger.info("poll_cloned", poll_id=poll_id, clone_id=clone.id)
    return {**serialize_poll(clone, include_admin=True), "admin_token": token.reveal()}


def delete_poll(db: Session, poll_id: int) -> Optional[Dict[str, Any]]:
    """Delete a poll with its events, participants and their selections.

    Returns:
        The deleted poll's read model, or None if it did not exist
    """
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if not poll:
        return None

    deleted = serialize_poll(poll)
    participant_ids = select(Participant.id).where(Participant.poll_id == poll_id)

    try:
        db.query(Selection).filter(Selection.participant_id.in_(participant_ids)).delete(synchronize_session=False)
        db.query(Participant).filter(Participant.poll_id == poll_id).delete(synchronize_session=False)
        db.query(PollEvent).filter(PollEvent.poll_id == poll_id).delete(synchronize_session=False)
        db.query(Poll).filter(Poll.id == poll_id).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("poll_deleted", poll_id=poll_id)
    return deleted
