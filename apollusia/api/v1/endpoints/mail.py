"""Participant mail endpoints."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from apollusia.api.deps import get_db
from apollusia.core.rate_limit import RATE_LIMITS, limiter
from apollusia.schemas import MailUpdate, SuccessResponse
from apollusia.services.participant import set_mail

router = APIRouter()


@router.put("/mail", response_model=SuccessResponse)
@limiter.limit(RATE_LIMITS["set_mail"])
async def set_mail_endpoint(
    request: Request,
    mail_update: MailUpdate,
    db: Session = Depends(get_db)
) -> SuccessResponse:
    """Set the mail address on every participation of a participant token."""
    updated = set_mail(db, mail_update.token, mail_update.mail)
    return SuccessResponse(success=True, message=f"Updated {updated} participations")
