"""Tests for admin token handling and request credential parsing."""
import pytest
from unittest.mock import Mock

from fastapi import HTTPException

from apollusia.core.security import (
    AdminToken,
    generate_token,
    get_admin_token,
    get_participant_token,
    is_poll_admin,
    require_admin_token,
    require_poll_admin,
)
from apollusia.db.models import Poll


def _request(headers):
    request = Mock()
    request.headers = headers
    return request


@pytest.mark.unit
class TestAdminToken:
    """AdminToken comparisons and representation."""

    def test_generated_tokens_are_unique_and_url_safe(self):
        tokens = {generate_token() for _ in range(50)}
        assert len(tokens) == 50
        for token in tokens:
            assert len(token) >= 40
            assert all(c.isalnum() or c in "-_" for c in token)

    def test_matches_stored_value(self):
        token = AdminToken("secret-token")
        assert token.matches("secret-token")
        assert not token.matches("other-token")
        assert not token.matches(None)
        assert not token.matches("")

    def test_empty_token_rejected(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            AdminToken("")

    def test_repr_hides_value(self):
        token = AdminToken("secret-token")
        assert "secret" not in repr(token)
        assert "secret" not in str(token)

    def test_equality(self):
        assert AdminToken("abc") == AdminToken("abc")
        assert AdminToken("abc") != AdminToken("abd")

    def test_reveal(self):
        assert AdminToken("abc").reveal() == "abc"


@pytest.mark.unit
class TestRequestCredentials:
    """Parsing of Authorization and Participant-Token headers."""

    def test_bearer_token_parsed(self):
        token = get_admin_token(_request({"Authorization": "Bearer abc"}))
        assert token.matches("abc")

    def test_bearer_scheme_case_insensitive(self):
        assert get_admin_token(_request({"Authorization": "bearer abc"})).matches("abc")

    @pytest.mark.parametrize("header", ["", "Basic abc", "Bearer", "Bearer   "])
    def test_invalid_authorization_ignored(self, header):
        assert get_admin_token(_request({"Authorization": header})) is None

    def test_missing_authorization(self):
        assert get_admin_token(_request({})) is None

    def test_require_admin_token_raises_401(self):
        with pytest.raises(HTTPException) as exc_info:
            require_admin_token(_request({}))
        assert exc_info.value.status_code == 401

    def test_participant_token(self):
        assert get_participant_token(_request({"Participant-Token": " tok "})) == "tok"
        assert get_participant_token(_request({"Participant-Token": "  "})) is None
        assert get_participant_token(_request({})) is None


@pytest.mark.unit
class TestPollAdmin:
    """Ownership checks against stored polls."""

    def _poll(self, db_session, token="owner-token"):
        poll = Poll(title="Poll", admin_token=token, booked_events=[])
        db_session.add(poll)
        db_session.commit()
        return poll

    def test_is_poll_admin(self, db_session):
        poll = self._poll(db_session)
        assert is_poll_admin(poll, AdminToken("owner-token"))
        assert not is_poll_admin(poll, AdminToken("intruder"))
        assert not is_poll_admin(poll, None)

    def test_require_poll_admin_returns_poll(self, db_session):
        poll = self._poll(db_session)
        assert require_poll_admin(poll.id, AdminToken("owner-token"), db_session) is poll

    def test_require_poll_admin_foreign_token(self, db_session):
        poll = self._poll(db_session)
        with pytest.raises(HTTPException) as exc_info:
            require_poll_admin(poll.id, AdminToken("intruder"), db_session)
        assert exc_info.value.status_code == 403

    def test_require_poll_admin_missing_poll(self, db_session):
        with pytest.raises(HTTPException) as exc_info:
            require_poll_admin(999, AdminToken("owner-token"), db_session)
        assert exc_info.value.status_code == 404
