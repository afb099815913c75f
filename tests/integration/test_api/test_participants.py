"""Integration tests for participant endpoints."""
import pytest


def _participate(client, poll_id, **body):
    body.setdefault("name", "Alice")
    return client.post(f"/api/v1/polls/{poll_id}/participants", json=body)


@pytest.mark.integration
class TestParticipate:
    """POST /api/v1/polls/{id}/participants"""

    def test_participate(self, client, poll, poll_events):
        response = _participate(
            client, poll["id"],
            mail="alice@example.com",
            participation=[poll_events[0]["id"]],
            indeterminate_participation=[poll_events[1]["id"]],
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert data["mail"] == "alice@example.com"
        assert data["participation"] == [poll_events[0]["id"]]
        assert data["indeterminate_participation"] == [poll_events[1]["id"]]

    def test_unknown_event_rejected(self, client, poll, poll_events):
        response = _participate(client, poll["id"], participation=[999])
        assert response.status_code == 400

    def test_yes_and_maybe_overlap_rejected(self, client, poll, poll_events):
        event_id = poll_events[0]["id"]
        response = _participate(client, poll["id"], participation=[event_id], indeterminate_participation=[event_id])
        assert response.status_code == 422

    def test_maybe_disallowed(self, client, poll, admin_headers, poll_events):
        client.put(
            f"/api/v1/polls/{poll['id']}",
            json={"title": poll["title"], "settings": {"allow_maybe": False}},
            headers=admin_headers,
        )
        response = _participate(client, poll["id"], indeterminate_participation=[poll_events[0]["id"]])
        assert response.status_code == 400

    def test_empty_name_rejected(self, client, poll):
        assert _participate(client, poll["id"], name="  ").status_code == 422

    def test_unknown_poll(self, client):
        assert _participate(client, 999).status_code == 404


@pytest.mark.integration
class TestListParticipants:
    """GET /api/v1/polls/{id}/participants"""

    def test_masking(self, client, poll, poll_events):
        mine = _participate(client, poll["id"], name="Me", mail="me@example.com", token="my-token").json()
        _participate(client, poll["id"], name="Other", mail="other@example.com")

        anonymous = client.get(f"/api/v1/polls/{poll['id']}/participants").json()
        assert len(anonymous) == 2
        assert all("token" not in p and "mail" not in p for p in anonymous)

        own_view = client.get(
            f"/api/v1/polls/{poll['id']}/participants",
            headers={"Participant-Token": "my-token"},
        ).json()
        assert [p["name"] for p in own_view] == ["Other", "Me"]
        assert own_view[1]["token"] == mine["token"]
        assert own_view[1]["mail"] == "me@example.com"
        assert "token" not in own_view[0]

    def test_anonymous_poll_names_visible_to_admin_only(self, client, poll, admin_headers, poll_events):
        client.put(
            f"/api/v1/polls/{poll['id']}",
            json={"title": poll["title"], "settings": {"anonymous": True}},
            headers=admin_headers,
        )
        _participate(client, poll["id"], name="Me", token="my-token")
        _participate(client, poll["id"], name="Other")

        own_view = client.get(
            f"/api/v1/polls/{poll['id']}/participants",
            headers={"Participant-Token": "my-token"},
        ).json()
        assert [p["name"] for p in own_view] == ["Anonymous", "Me"]

        admin_view = client.get(f"/api/v1/polls/{poll['id']}/participants", headers=admin_headers).json()
        assert [p["name"] for p in admin_view] == ["Me", "Other"]


@pytest.mark.integration
class TestEditParticipant:
    """PUT /api/v1/polls/{id}/participants/{pid}"""

    def test_edit_with_token(self, client, poll, poll_events):
        created = _participate(client, poll["id"], participation=[poll_events[0]["id"]]).json()

        response = client.put(
            f"/api/v1/polls/{poll['id']}/participants/{created['id']}",
            json={"name": "Alice", "participation": [poll_events[2]["id"]]},
            headers={"Participant-Token": created["token"]},
        )

        assert response.status_code == 200
        assert response.json()["participation"] == [poll_events[2]["id"]]

    def test_edit_with_wrong_token(self, client, poll, poll_events):
        created = _participate(client, poll["id"], participation=[poll_events[0]["id"]]).json()
        url = f"/api/v1/polls/{poll['id']}/participants/{created['id']}"

        response = client.put(url, json={"name": "Mallory"}, headers={"Participant-Token": "forged"})
        assert response.status_code == 403
        assert client.put(url, json={"name": "Mallory"}).status_code == 403

        participants = client.get(f"/api/v1/polls/{poll['id']}/participants").json()
        assert participants[0]["name"] == "Alice"
        assert participants[0]["participation"] == [poll_events[0]["id"]]

    def test_edit_unknown(self, client, poll):
        response = client.put(
            f"/api/v1/polls/{poll['id']}/participants/999",
            json={"name": "x"},
            headers={"Participant-Token": "t"},
        )
        assert response.status_code == 404


@pytest.mark.integration
class TestDeleteParticipant:
    """DELETE /api/v1/polls/{id}/participants/{pid}"""

    def test_delete_by_participant(self, client, poll):
        created = _participate(client, poll["id"]).json()

        response = client.delete(
            f"/api/v1/polls/{poll['id']}/participants/{created['id']}",
            headers={"Participant-Token": created["token"]},
        )

        assert response.status_code == 200
        assert client.get(f"/api/v1/polls/{poll['id']}/participants").json() == []

    def test_delete_by_admin(self, client, poll, admin_headers):
        created = _participate(client, poll["id"]).json()
        response = client.delete(f"/api/v1/polls/{poll['id']}/participants/{created['id']}", headers=admin_headers)
        assert response.status_code == 200

    def test_delete_unauthorized(self, client, poll):
        created = _participate(client, poll["id"]).json()
        url = f"/api/v1/polls/{poll['id']}/participants/{created['id']}"

        assert client.delete(url).status_code == 401
        assert client.delete(url, headers={"Participant-Token": "forged"}).status_code == 403
        assert client.delete(url, headers={"Authorization": "Bearer forged"}).status_code == 403


@pytest.mark.integration
class TestSetMail:
    """PUT /api/v1/mail"""

    def test_set_mail_for_all_participations(self, client, poll, poll_events):
        second_poll = client.post("/api/v1/polls", json={"title": "Second"}).json()
        _participate(client, poll["id"], token="my-token")
        _participate(client, second_poll["id"], token="my-token")

        response = client.put("/api/v1/mail", json={"token": "my-token", "mail": "me@example.com"})

        assert response.status_code == 200
        assert response.json()["success"] is True
        for poll_id in (poll["id"], second_poll["id"]):
            participants = client.get(
                f"/api/v1/polls/{poll_id}/participants",
                headers={"Participant-Token": "my-token"},
            ).json()
            assert participants[0]["mail"] == "me@example.com"

    def test_invalid_mail(self, client):
        response = client.put("/api/v1/mail", json={"token": "my-token", "mail": "nope"})
        assert response.status_code == 422
