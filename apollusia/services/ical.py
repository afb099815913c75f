"""iCalendar export of a poll."""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple

from icalendar import Calendar, Event, vCalAddress, vText
from sqlalchemy.orm import Session, selectinload

from apollusia.core.constants import CHOICE_MAYBE, CHOICE_YES
from apollusia.core.utils import get_zone, to_timezone, utcnow
from apollusia.db.models import Participant, Poll, PollEvent
from apollusia.services.poll import poll_link

PRODID = "-//Apollusia//apollusia.com//"


@dataclass
class CalendarConfig:
    custom_title: Optional[str] = None
    invite_participants: bool = False


def _choices_for(event_id: int, participants: Sequence[Any]) -> List[Tuple[Any, str]]:
    """Participants who marked the event yes or maybe, with their choice."""
    result = []
    for participant in participants:
        if event_id in participant.participation:
            result.append((participant, CHOICE_YES))
        elif event_id in participant.indeterminate_participation:
            result.append((participant, CHOICE_MAYBE))
    return result


def export_calendar(
    poll: Any,
    events: Sequence[Any],
    participants: Sequence[Any],
    config: Optional[CalendarConfig] = None,
    url: Optional[str] = None,
    stamp: Optional[datetime] = None,
) -> str:
    """Build an iCalendar document with one VEVENT per poll event.

    Works on plain attribute objects: the poll needs ``title``,
    ``description``, ``location`` and ``time_zone``; events ``id``, ``start``,
    ``end`` and ``note``; participants ``name``, ``mail``, ``participation``
    and ``indeterminate_participation``.
    """
    config = config or CalendarConfig()
    stamp = stamp or utcnow()
    zone = get_zone(poll.time_zone)

    calendar = Calendar()
    calendar.add("prodid", PRODID)
    calendar.add("version", "2.0")
    calendar.add("method", "REQUEST")
    calendar.add("x-wr-calname", poll.title)
    if poll.description:
        calendar.add("x-wr-caldesc", poll.description)
    if poll.time_zone:
        calendar.add("x-wr-timezone", poll.time_zone)
    if url:
        calendar.add("url", url)

    for event in events:
        marked = _choices_for(event.id, participants)

        summary = config.custom_title or poll.title
        if len(marked) == 1:
            summary += f": {marked[0][0].name}"

        description = poll.description or ""
        if event.note:
            description += f"\n\nNote: {event.note}"
        description += "\n\nParticipants:\n" + "\n".join(
            f"- {participant.name} ({choice})" for participant, choice in marked
        )

        ical_event = Event()
        ical_event.add("uid", f"{event.id}@apollusia")
        ical_event.add("dtstamp", stamp)
        ical_event.add("dtstart", to_timezone(event.start, zone))
        ical_event.add("dtend", to_timezone(event.end, zone))
        ical_event.add("summary", summary)
        ical_event.add("description", description)
        if poll.location:
            ical_event.add("location", poll.location)
        if url:
            ical_event.add("url", url)

        if config.invite_participants:
            for participant, choice in marked:
                if not participant.mail:
                    continue
                attendee = vCalAddress(f"mailto:{participant.mail}")
                attendee.params["cn"] = vText(participant.name)
                attendee.params["partstat"] = vText("ACCEPTED" if choice == CHOICE_YES else "TENTATIVE")
                ical_event.add("attendee", attendee, encode=0)

        calendar.add_component(ical_event)

    return calendar.to_ical().decode("utf-8")


def export_poll_calendar(db: Session, poll_id: int, config: Optional[CalendarConfig] = None) -> Optional[Tuple[Poll, str]]:
    """Load a poll with its events and participants and export it.

    Returns:
        The poll and its iCalendar text, or None if the poll does not exist
    """
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if not poll:
        return None

    events = (
        db.query(PollEvent)
        .filter(PollEvent.poll_id == poll_id)
        .order_by(PollEvent.start, PollEvent.id)
        .all()
    )
    participants = (
        db.query(Participant)
        .options(selectinload(Participant.selections))
        .filter(Participant.poll_id == poll_id)
        .order_by(Participant.id)
        .all()
    )
    return poll, export_calendar(poll, events, participants, config, url=poll_link(poll_id))
