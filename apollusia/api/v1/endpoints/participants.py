"""Participant endpoints."""
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from apollusia.api.deps import (
    get_admin_token,
    get_db,
    get_notification_queue,
    get_participant_token,
)
from apollusia.core.rate_limit import RATE_LIMITS, limiter
from apollusia.core.security import AdminToken
from apollusia.schemas import (
    ParticipantCreate,
    ParticipantFull,
    ParticipantRead,
    ParticipantUpdate,
)
from apollusia.services.notifications import NotificationQueue
from apollusia.services.participant import (
    create_participant,
    delete_participant,
    edit_participant,
    get_participants,
)

router = APIRouter()


@router.get("/{poll_id}/participants", response_model=List[Union[ParticipantFull, ParticipantRead]])
@limiter.limit(RATE_LIMITS["read"])
async def get_participants_endpoint(
    request: Request,
    poll_id: int,
    participant_token: Optional[str] = Depends(get_participant_token),
    admin_token: Optional[AdminToken] = Depends(get_admin_token),
    db: Session = Depends(get_db)
):
    """
    List the participants of a poll.

    Other participants come without mail and token, and on anonymous polls
    without their names unless the poll admin asks. Records matching the
    Participant-Token header are returned in full at the end of the list.
    """
    participants = get_participants(db, poll_id, participant_token, admin_token)
    if participants is None:
        raise HTTPException(status_code=404, detail="Poll not found")
    return participants


@router.post("/{poll_id}/participants", response_model=ParticipantFull)
@limiter.limit(RATE_LIMITS["participate"])
async def create_participant_endpoint(
    request: Request,
    poll_id: int,
    participant: ParticipantCreate,
    db: Session = Depends(get_db),
    notifications: NotificationQueue = Depends(get_notification_queue)
):
    """
    Submit availability for a poll.

    The poll admin is notified by mail and push if configured, and the
    participant receives a confirmation mail if an address was given. All of
    these are sent after the response.

    Args:
        request: FastAPI Request (for rate limiting)
        poll_id: Poll to participate in
        participant: ParticipantCreate with name, optional mail/token and the
                     yes (participation) and maybe (indeterminate_participation) event ids
        db: Database session (injected)
        notifications: Outbound notification queue (injected)

    Returns:
        ParticipantFull including the token needed for later edits

    Raises:
        HTTPException: 400 if an event id does not belong to the poll
        HTTPException: 404 if the poll does not exist

    Example:
        Request:
            POST /api/v1/polls/7/participants
            {
                "name": "Alice",
                "mail": "alice@example.com",
                "participation": [12],
                "indeterminate_participation": [13]
            }

        Response (200):
            {
                "id": 3,
                "name": "Alice",
                "token": "kq9...",
                "participation": [12],
                "indeterminate_participation": [13],
                ...
            }
    """
    try:
        created = create_participant(db, poll_id, participant.model_dump(), notifications)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if created is None:
        raise HTTPException(status_code=404, detail="Poll not found")
    return created


@router.put("/{poll_id}/participants/{participant_id}", response_model=ParticipantFull)
@limiter.limit(RATE_LIMITS["participate"])
async def edit_participant_endpoint(
    request: Request,
    poll_id: int,
    participant_id: int,
    participant: ParticipantUpdate,
    participant_token: Optional[str] = Depends(get_participant_token),
    db: Session = Depends(get_db)
):
    """
    Edit a participant's answers.

    Requires the Participant-Token header to match the token the record was
    created with. Nothing is changed on mismatch.
    """
    try:
        updated = edit_participant(db, poll_id, participant_id, participant_token, participant.model_dump())
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if updated is None:
        raise HTTPException(status_code=404, detail="Participant not found")
    return updated


@router.delete("/{poll_id}/participants/{participant_id}", response_model=ParticipantRead)
async def delete_participant_endpoint(
    poll_id: int,
    participant_id: int,
    admin_token: Optional[AdminToken] = Depends(get_admin_token),
    participant_token: Optional[str] = Depends(get_participant_token),
    db: Session = Depends(get_db)
):
    """Delete a participant as poll admin (bearer token) or as the participant itself."""
    if admin_token is None and participant_token is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        deleted = delete_participant(db, poll_id, participant_id, admin_token, participant_token)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    if deleted is None:
        raise HTTPException(status_code=404, detail="Participant not found")
    return deleted
