"""Main API router for v1."""
from fastapi import APIRouter

from apollusia.api.v1.endpoints import polls, events, participants, mail

api_router = APIRouter(prefix="/api/v1")

# Include all endpoint routers
api_router.include_router(polls.router, prefix="/polls", tags=["Polls"])
api_router.include_router(events.router, prefix="/polls", tags=["Events"])
api_router.include_router(participants.router, prefix="/polls", tags=["Participants"])
api_router.include_router(mail.router, tags=["Mail"])
