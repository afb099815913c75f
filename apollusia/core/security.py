"""Security and authorization utilities.

Polls are not tied to user accounts. Whoever holds a poll's admin token may
edit it, so the token is a bearer capability: it is generated once, handed to
the creator and afterwards only ever compared, never returned by reads.
"""
import hmac
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from apollusia.core.constants import PARTICIPANT_TOKEN_HEADER, TOKEN_BYTES
from apollusia.db import get_db
from apollusia.db.models import Poll


def generate_token() -> str:
    """Generate a secure random admin or participant token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


class AdminToken:
    """Opaque admin credential compared in constant time."""

    __slots__ = ("_value",)

    def __init__(self, value: str):
        if not value:
            raise ValueError("Admin token cannot be empty")
        self._value = value

    @classmethod
    def generate(cls) -> "AdminToken":
        return cls(generate_token())

    def matches(self, stored: Optional[str]) -> bool:
        if not stored:
            return False
        return hmac.compare_digest(self._value.encode(), stored.encode())

    def reveal(self) -> str:
        """Return the raw token, for persisting or handing to the poll owner."""
        return self._value

    def __eq__(self, other):
        if isinstance(other, AdminToken):
            return self.matches(other._value)
        return NotImplemented

    def __hash__(self):
        return hash(self._value)

    def __repr__(self):
        return "AdminToken(***)"


def get_admin_token(request: Request) -> Optional[AdminToken]:
    """Read an optional bearer admin token from the Authorization header."""
    header = request.headers.get("Authorization")
    if not header:
        return None

    scheme, _, value = header.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return AdminToken(value.strip())


def require_admin_token(request: Request) -> AdminToken:
    """Dependency that insists on a bearer admin token."""
    token = get_admin_token(request)
    if token is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return token


def get_participant_token(request: Request) -> Optional[str]:
    """Read the optional participant token header."""
    token = request.headers.get(PARTICIPANT_TOKEN_HEADER)
    return token.strip() if token and token.strip() else None


def is_poll_admin(poll: Poll, token: Optional[AdminToken]) -> bool:
    return token is not None and token.matches(poll.admin_token)


def require_poll_admin(
    poll_id: int,
    token: AdminToken = Depends(require_admin_token),
    db: Session = Depends(get_db),
) -> Poll:
    """Resolve the poll from the path and verify the caller owns it."""
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if not poll:
        raise HTTPException(status_code=404, detail="Poll not found")

    if not is_poll_admin(poll, token):
        raise HTTPException(status_code=403, detail="Not authorized")
    return poll
