"""Poll endpoints."""
import re
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from apollusia.api.deps import (
    get_admin_token,
    get_db,
    get_notification_queue,
    get_participant_token,
    require_admin_token,
    require_poll_admin,
)
from apollusia.core.logging_config import get_logger
from apollusia.core.rate_limit import RATE_LIMITS, limiter
from apollusia.core.security import AdminToken
from apollusia.schemas import (
    AdminCheck,
    BookRequest,
    PollAdminRead,
    PollCreate,
    PollCreated,
    PollRead,
    PollStats,
    PollUpdate,
)
from apollusia.services.booking import book_events
from apollusia.services.ical import CalendarConfig, export_poll_calendar
from apollusia.services.notifications import NotificationQueue
from apollusia.services.poll import (
    clone_poll,
    create_poll,
    delete_poll,
    get_participated_polls,
    get_poll,
    get_polls,
    is_admin,
    update_poll,
)

logger = get_logger(__name__)
router = APIRouter()


@router.get("", response_model=List[PollStats])
async def get_polls_endpoint(
    active: Optional[bool] = None,
    admin_token: AdminToken = Depends(require_admin_token),
    db: Session = Depends(get_db)
):
    """
    List the polls owned by the bearer admin token, newest first.

    Args:
        active: True for polls without a deadline or with a future deadline,
                False for polls whose deadline has passed, omitted for all
        admin_token: Bearer token from the Authorization header (injected)
        db: Database session (injected)

    Returns:
        List[PollStats]: Polls with their event and participant counts

    Raises:
        HTTPException: 401 if no bearer token is sent

    Example:
        Request:
            GET /api/v1/polls?active=true
            Authorization: Bearer 3q2-7wE...

        Response (200):
            [
                {
                    "id": 7,
                    "title": "Standup",
                    "settings": {"deadline": null, ...},
                    "booked_events": [],
                    "events": 3,
                    "participants": 5,
                    ...
                }
            ]
    """
    return get_polls(db, admin_token, active)


@router.get("/participated", response_model=List[PollStats])
async def get_participated_polls_endpoint(
    participant_token: Optional[str] = Depends(get_participant_token),
    db: Session = Depends(get_db)
):
    """List the polls answered by the participant token, newest first."""
    if not participant_token:
        raise HTTPException(status_code=400, detail="Participant-Token header is required")
    return get_participated_polls(db, participant_token)


@router.post("", response_model=PollCreated)
@limiter.limit(RATE_LIMITS["create_poll"])
async def create_poll_endpoint(
    request: Request,
    poll: PollCreate,
    db: Session = Depends(get_db)
):
    """
    Create a new poll.

    The response is the only one that ever carries the admin token. Clients
    either send their own token (to manage all their polls with one value)
    or keep the generated one.

    Args:
        request: FastAPI Request (for rate limiting)
        poll: PollCreate schema
        db: Database session (injected)

    Returns:
        PollCreated: The owner's view of the poll including ``admin_token``

    Example:
        Request:
            POST /api/v1/polls
            {
                "title": "Standup",
                "description": "Daily sync",
                "time_zone": "Europe/Berlin",
                "settings": {"deadline": "2026-11-01T12:00:00Z"}
            }

        Response (200):
            {
                "id": 7,
                "title": "Standup",
                "admin_token": "3q2-7wE...",
                ...
            }
    """
    return create_poll(db, poll.model_dump())


@router.get("/{poll_id}", response_model=PollAdminRead, response_model_exclude_unset=True)
async def get_poll_endpoint(
    poll_id: int,
    admin_token: Optional[AdminToken] = Depends(get_admin_token),
    db: Session = Depends(get_db)
):
    """
    Get a single poll.

    Owners (matching bearer token) also receive ``admin_mail`` and
    ``admin_push``. Nobody receives the admin token.
    """
    poll = get_poll(db, poll_id, admin_token)
    if poll is None:
        raise HTTPException(status_code=404, detail="Poll not found")
    return poll


@router.put("/{poll_id}", response_model=PollAdminRead, dependencies=[Depends(require_poll_admin)])
async def update_poll_endpoint(
    poll_id: int,
    poll: PollUpdate,
    db: Session = Depends(get_db)
):
    """Replace the editable fields of a poll (admin only)."""
    updated = update_poll(db, poll_id, poll.model_dump())
    if updated is None:
        raise HTTPException(status_code=404, detail="Poll not found")
    return updated


@router.delete("/{poll_id}", response_model=PollRead, dependencies=[Depends(require_poll_admin)])
async def delete_poll_endpoint(
    poll_id: int,
    db: Session = Depends(get_db)
):
    """
    Delete a poll with all of its events and participants (admin only).

    Returns:
        PollRead: The deleted poll

    Raises:
        HTTPException: 401 without bearer token, 403 for a foreign token,
                       404 if the poll does not exist
    """
    deleted = delete_poll(db, poll_id)
    if deleted is None:
        raise HTTPException(status_code=404, detail="Poll not found")
    return deleted


@router.get("/{poll_id}/admin", response_model=AdminCheck)
async def is_admin_endpoint(
    poll_id: int,
    admin_token: Optional[AdminToken] = Depends(get_admin_token),
    db: Session = Depends(get_db)
):
    """Tell the client whether its bearer token owns the poll."""
    admin = is_admin(db, poll_id, admin_token)
    if admin is None:
        raise HTTPException(status_code=404, detail="Poll not found")
    return AdminCheck(admin=admin)


@router.post("/{poll_id}/clone", response_model=PollCreated, dependencies=[Depends(require_poll_admin)])
async def clone_poll_endpoint(
    poll_id: int,
    db: Session = Depends(get_db)
):
    """
    Clone a poll with its events (admin only).

    The clone is titled "<title> (clone)", gets a fresh admin token and starts
    without participants or bookings.
    """
    cloned = clone_poll(db, poll_id)
    if cloned is None:
        raise HTTPException(status_code=404, detail="Poll not found")
    return cloned


@router.post("/{poll_id}/book", response_model=PollAdminRead, dependencies=[Depends(require_poll_admin)])
async def book_events_endpoint(
    poll_id: int,
    booking: BookRequest,
    db: Session = Depends(get_db),
    notifications: NotificationQueue = Depends(get_notification_queue)
):
    """
    Book the final events of a poll (admin only).

    Sets ``booked_events`` to exactly the given list and mails every
    participant with an address their schedule. Mails are sent after the
    response; delivery failures are only logged.

    Args:
        poll_id: Poll to book
        booking: BookRequest with the ordered event ids (empty clears the booking)
        db: Database session (injected)
        notifications: Outbound notification queue (injected)

    Raises:
        HTTPException: 400 if an id is not an event of this poll

    Example:
        Request:
            POST /api/v1/polls/7/book
            Authorization: Bearer 3q2-7wE...
            {"events": [12, 14]}

        Response (200):
            {"id": 7, "booked_events": [12, 14], ...}
    """
    try:
        poll = book_events(db, poll_id, booking.events, notifications)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if poll is None:
        raise HTTPException(status_code=404, detail="Poll not found")
    return poll


@router.get("/{poll_id}/calendar.ics")
async def export_calendar_endpoint(
    poll_id: int,
    custom_title: Optional[str] = None,
    invite_participants: bool = False,
    admin_token: Optional[AdminToken] = Depends(get_admin_token),
    db: Session = Depends(get_db)
):
    """
    Download the poll as an iCalendar file.

    Inviting participants exposes their mail addresses as attendees, so it is
    restricted to the poll admin.
    """
    if invite_participants:
        admin = is_admin(db, poll_id, admin_token)
        if admin is None:
            raise HTTPException(status_code=404, detail="Poll not found")
        if admin_token is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        if not admin:
            raise HTTPException(status_code=403, detail="Not authorized")

    exported = export_poll_calendar(db, poll_id, CalendarConfig(custom_title, invite_participants))
    if exported is None:
        raise HTTPException(status_code=404, detail="Poll not found")

    poll, content = exported
    logger.info("calendar_exported", poll_id=poll_id, invite_participants=invite_participants)
    filename = re.sub(r'[^\w\- ]', '_', poll.title).strip() or "poll"
    return Response(
        content=content,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{filename}.ics"'},
    )
