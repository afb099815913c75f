"""Poll event endpoints."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from apollusia.api.deps import get_db, require_poll_admin
from apollusia.schemas import PollEventIn, PollEventRead
from apollusia.services.event import get_events, post_events

router = APIRouter()


@router.get("/{poll_id}/events", response_model=List[PollEventRead])
async def get_events_endpoint(
    poll_id: int,
    db: Session = Depends(get_db)
):
    """List the candidate events of a poll ordered by start."""
    events = get_events(db, poll_id)
    if events is None:
        raise HTTPException(status_code=404, detail="Poll not found")
    return events


@router.post("/{poll_id}/events", response_model=List[PollEventRead], dependencies=[Depends(require_poll_admin)])
async def post_events_endpoint(
    poll_id: int,
    events: List[PollEventIn],
    db: Session = Depends(get_db)
):
    """
    Replace the complete event set of a poll (admin only).

    The body is the full new list. Entries without an id are created,
    entries whose start, end or note changed are updated, and stored events
    missing from the list are deleted. Deleted events are removed from every
    participant's answers and from the poll's bookings.

    Args:
        poll_id: Poll whose events are replaced
        events: Complete list of PollEventIn
        db: Database session (injected)

    Returns:
        List[PollEventRead]: The poll's events after the update

    Raises:
        HTTPException: 400 if an id is listed twice
        HTTPException: 401/403 if not the poll admin

    Example:
        Request:
            POST /api/v1/polls/7/events
            Authorization: Bearer 3q2-7wE...
            [
                {"id": 12, "start": "2026-11-02T09:00:00Z", "end": "2026-11-02T10:00:00Z"},
                {"start": "2026-11-03T09:00:00Z", "end": "2026-11-03T10:00:00Z", "note": "Room B"}
            ]

    Note:
        Sending the same list twice changes nothing the second time.
    """
    ids = [event.id for event in events if event.id is not None]
    if len(ids) != len(set(ids)):
        raise HTTPException(status_code=400, detail="Event ids must be unique")

    updated = post_events(db, poll_id, events)
    if updated is None:
        raise HTTPException(status_code=404, detail="Poll not found")
    return updated
