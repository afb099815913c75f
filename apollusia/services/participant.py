"""Participant business logic."""
import hmac
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from apollusia.core.constants import ANONYMOUS_NAME, CHOICE_MARKERS, CHOICE_MAYBE, CHOICE_NO, CHOICE_YES
from apollusia.core.logging_config import get_logger
from apollusia.core.security import AdminToken, generate_token, is_poll_admin
from apollusia.core.utils import render_event, to_utc
from apollusia.db.models import Participant, Poll, PollEvent, Selection
from apollusia.services.mail import mail_service
from apollusia.services.notifications import NotificationQueue
from apollusia.services.poll import poll_context, poll_link
from apollusia.services.push import push_service

logger = get_logger(__name__)


def _tokens_match(given: Optional[str], stored: Optional[str]) -> bool:
    if not given or not stored:
        return False
    return hmac.compare_digest(given.encode(), stored.encode())


def serialize_participant(participant: Participant, full: bool = False) -> Dict[str, Any]:
    """Read model of a participant; ``full`` adds mail and token for its owner."""
    data = {
        "id": participant.id,
        "poll_id": participant.poll_id,
        "name": participant.name,
        "participation": participant.participation,
        "indeterminate_participation": participant.indeterminate_participation,
        "created_at": to_utc(participant.created_at),
    }
    if full:
        data["mail"] = participant.mail
        data["token"] = participant.token
    return data


def _validate_selections(db: Session, poll: Poll, data: Dict[str, Any]) -> None:
    """Reject references to events outside the poll and disallowed maybes."""
    yes = data.get("participation") or []
    maybe = data.get("indeterminate_participation") or []

    if maybe and not poll.allow_maybe:
        raise ValueError("This poll does not allow 'maybe' answers")

    referenced = set(yes) | set(maybe)
    if not referenced:
        return

    known = {
        event_id
        for (event_id,) in db.query(PollEvent.id).filter(PollEvent.poll_id == poll.id).all()
    }
    unknown = referenced - known
    if unknown:
        raise ValueError(f"Unknown events for this poll: {sorted(unknown)}")


def _replace_selections(participant: Participant, data: Dict[str, Any]) -> None:
    """Bring the participant's selections in line with the submitted answers."""
    wanted = {event_id: CHOICE_YES for event_id in data.get("participation") or []}
    wanted.update({event_id: CHOICE_MAYBE for event_id in data.get("indeterminate_participation") or []})

    existing = {selection.event_id: selection for selection in participant.selections}
    for event_id, selection in existing.items():
        if event_id not in wanted:
            participant.selections.remove(selection)

    for event_id, choice in wanted.items():
        if event_id in existing:
            existing[event_id].choice = choice
        else:
            participant.selections.append(Selection(event_id=event_id, choice=choice))


def get_participants(
    db: Session,
    poll_id: int,
    token: Optional[str] = None,
    admin_token: Optional[AdminToken] = None,
) -> Optional[List[Dict[str, Any]]]:
    """List a poll's participants.

    Other people's records omit mail and token, and on anonymous polls their
    names too unless the caller is the poll admin. The caller's own records
    (matching ``token``) are returned in full, after everyone else.
    """
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if not poll:
        return None

    participants = (
        db.query(Participant)
        .options(selectinload(Participant.selections))
        .filter(Participant.poll_id == poll_id)
        .order_by(Participant.id)
        .all()
    )
    others = [p for p in participants if not _tokens_match(token, p.token)]
    own = [p for p in participants if _tokens_match(token, p.token)]

    masked = [serialize_participant(p) for p in others]
    if poll.anonymous and not is_poll_admin(poll, admin_token):
        for data in masked:
            data["name"] = ANONYMOUS_NAME
    return masked + [serialize_participant(p, full=True) for p in own]


def _admin_mail_context(db: Session, poll: Poll, participant: Participant) -> Dict[str, Any]:
    """Render the new participant's answer per event as yes/maybe/no markers."""
    events = (
        db.query(PollEvent)
        .filter(PollEvent.poll_id == poll.id)
        .order_by(PollEvent.start, PollEvent.id)
        .all()
    )
    yes = set(participant.participation)
    maybe = set(participant.indeterminate_participation)

    participation = []
    for event in events:
        if event.id in yes:
            choice = CHOICE_YES
        elif event.id in maybe:
            choice = CHOICE_MAYBE
        else:
            choice = CHOICE_NO
        participation.append(dict(CHOICE_MARKERS[choice]))

    return {
        "poll": poll_context(poll),
        "participant": {"name": participant.name},
        "events": [render_event(event.start, event.end, poll.time_zone) for event in events],
        "participation": participation,
        "link": poll_link(poll.id),
    }


def create_participant(
    db: Session,
    poll_id: int,
    data: Dict[str, Any],
    notifications: NotificationQueue,
) -> Optional[Dict[str, Any]]:
    """Store a participant and queue the admin and participant notifications.

    Returns:
        The participant's own full view, or None if the poll does not exist

    Raises:
        ValueError if the selections reference events outside the poll
    """
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if not poll:
        return None

    _validate_selections(db, poll, data)

    participant = Participant(
        poll_id=poll_id,
        name=data["name"],
        mail=data.get("mail"),
        token=data.get("token") or generate_token(),
    )
    _replace_selections(participant, data)

    try:
        db.add(participant)
        db.commit()
        db.refresh(participant)
    except Exception:
        db.rollback()
        raise

    logger.info("participant_created", poll_id=poll_id, participant_id=participant.id)

    if poll.admin_mail:
        notifications.submit(
            mail_service.send_mail,
            "Poll Admin",
            poll.admin_mail,
            "Updates in Poll",
            "participant",
            _admin_mail_context(db, poll, participant),
        )
    if poll.admin_push:
        notifications.submit(
            push_service.send,
            poll.admin_push,
            "Updates in Poll | Apollusia",
            f"{participant.name} participated in your poll {poll.title}",
            poll_link(poll.id),
        )
    if participant.mail:
        notifications.submit(
            mail_service.send_mail,
            participant.name,
            participant.mail,
            "Participated in Poll",
            "participated",
            {
                "poll": poll_context(poll),
                "participant": {"name": participant.name},
                "link": poll_link(poll.id),
            },
        )

    return serialize_participant(participant, full=True)


def edit_participant(
    db: Session,
    poll_id: int,
    participant_id: int,
    token: Optional[str],
    data: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    """Update a participant's answers.

    Returns:
        The updated full view, or None if the participant does not exist in the poll

    Raises:
        PermissionError if ``token`` does not match the stored participant token
        ValueError if the selections reference events outside the poll
    """
    participant = (
        db.query(Participant)
        .filter(Participant.id == participant_id, Participant.poll_id == poll_id)
        .first()
    )
    if not participant:
        return None

    if not _tokens_match(token, participant.token):
        raise PermissionError("Participant token does not match")

    _validate_selections(db, participant.poll, data)

    participant.name = data["name"]
    participant.mail = data.get("mail")
    _replace_selections(participant, data)

    try:
        db.commit()
        db.refresh(participant)
    except Exception:
        db.rollback()
        raise

    logger.info("participant_updated", poll_id=poll_id, participant_id=participant_id)
    return serialize_participant(participant, full=True)


def delete_participant(
    db: Session,
    poll_id: int,
    participant_id: int,
    admin_token: Optional[AdminToken] = None,
    token: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Delete a participant, either as poll admin or as the participant itself.

    Returns:
        The deleted participant's read model, or None if it did not exist

    Raises:
        PermissionError if neither credential authorizes the deletion
    """
    participant = (
        db.query(Participant)
        .filter(Participant.id == participant_id, Participant.poll_id == poll_id)
        .first()
    )
    if not participant:
        return None

    if not (is_poll_admin(participant.poll, admin_token) or _tokens_match(token, participant.token)):
        raise PermissionError("Not authorized to delete this participant")

    deleted = serialize_participant(participant)
    try:
        db.delete(participant)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("participant_deleted", poll_id=poll_id, participant_id=participant_id)
    return deleted


def set_mail(db: Session, token: str, mail: str) -> int:
    """Set the mail address on every participant record of a token.

    Returns:
        Number of updated participant records
    """
    try:
        updated = (
            db.query(Participant)
            .filter(Participant.token == token)
            .update({Participant.mail: mail}, synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("participant_mail_set", participants=updated)
    return updated
