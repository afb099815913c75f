"""Integration tests for booking."""
import pytest
from unittest.mock import patch


@pytest.mark.integration
class TestBooking:
    """POST /api/v1/polls/{id}/book"""

    def test_book_events(self, client, poll, admin_headers, poll_events):
        ids = [poll_events[2]["id"], poll_events[0]["id"]]

        response = client.post(f"/api/v1/polls/{poll['id']}/book", json={"events": ids}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["booked_events"] == ids
        assert client.get(f"/api/v1/polls/{poll['id']}").json()["booked_events"] == ids

    def test_booked_events_are_subset_of_poll_events(self, client, poll, admin_headers, poll_events):
        other = client.post("/api/v1/polls", json={"title": "Other", "admin_token": poll["admin_token"]}).json()
        foreign = client.post(
            f"/api/v1/polls/{other['id']}/events",
            json=[{"start": poll_events[0]["start"], "end": poll_events[0]["end"]}],
            headers=admin_headers,
        ).json()

        response = client.post(
            f"/api/v1/polls/{poll['id']}/book",
            json={"events": [poll_events[0]["id"], foreign[0]["id"]]},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert client.get(f"/api/v1/polls/{poll['id']}").json()["booked_events"] == []

    def test_duplicate_ids_rejected(self, client, poll, admin_headers, poll_events):
        event_id = poll_events[0]["id"]
        response = client.post(
            f"/api/v1/polls/{poll['id']}/book", json={"events": [event_id, event_id]}, headers=admin_headers,
        )
        assert response.status_code == 422

    def test_book_requires_owner(self, client, poll, poll_events):
        url = f"/api/v1/polls/{poll['id']}/book"
        assert client.post(url, json={"events": []}).status_code == 401
        assert client.post(url, json={"events": []}, headers={"Authorization": "Bearer x"}).status_code == 403

    def test_participants_with_mail_are_notified(self, client, poll, admin_headers, poll_events):
        client.post(
            f"/api/v1/polls/{poll['id']}/participants",
            json={"name": "Alice", "mail": "alice@example.com", "participation": [poll_events[0]["id"]]},
        )
        client.post(f"/api/v1/polls/{poll['id']}/participants", json={"name": "Bob"})

        with patch("apollusia.services.mail.MailService.send_mail") as send_mail:
            response = client.post(
                f"/api/v1/polls/{poll['id']}/book",
                json={"events": [poll_events[0]["id"]]},
                headers=admin_headers,
            )

        assert response.status_code == 200
        assert send_mail.call_count == 1
        name, address, subject, template, context = send_mail.call_args.args
        assert (name, address, subject, template) == ("Alice", "alice@example.com", "Poll booked", "book")
        assert context["appointments"][0].endswith(" *")

    def test_failing_mail_does_not_fail_booking(self, client, poll, admin_headers, poll_events):
        client.post(
            f"/api/v1/polls/{poll['id']}/participants",
            json={"name": "Alice", "mail": "alice@example.com"},
        )

        with patch("apollusia.services.mail.MailService.send_mail", side_effect=OSError("smtp down")):
            response = client.post(
                f"/api/v1/polls/{poll['id']}/book",
                json={"events": [poll_events[0]["id"]]},
                headers=admin_headers,
            )

        assert response.status_code == 200
        assert response.json()["booked_events"] == [poll_events[0]["id"]]
