"""Unit tests for event reconciliation."""
import pytest
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from apollusia.db.models import Participant, Poll, PollEvent, Selection
from apollusia.schemas import PollEventIn
from apollusia.services.event import diff_events, get_events, post_events

BASE = datetime(2030, 5, 6, 9, 0, tzinfo=timezone.utc)


def _slot(id=None, hours=0, note=None):
    return SimpleNamespace(
        id=id,
        start=BASE + timedelta(hours=hours),
        end=BASE + timedelta(hours=hours + 1),
        note=note,
    )


def _event_in(id=None, hours=0, note=None):
    return PollEventIn(
        id=id,
        start=BASE + timedelta(hours=hours),
        end=BASE + timedelta(hours=hours + 1),
        note=note,
    )


@pytest.fixture
def poll(db_session):
    poll = Poll(title="Team Dinner", admin_token="owner", booked_events=[])
    db_session.add(poll)
    db_session.commit()
    return poll


@pytest.mark.unit
class TestDiffEvents:
    """diff_events partitions incoming events without touching storage."""

    def test_new_events_are_inserted(self):
        diff = diff_events([], [_slot(hours=0), _slot(hours=2)])
        assert len(diff.inserted) == 2
        assert diff.updated == []
        assert diff.deleted == []

    def test_unchanged_events_appear_nowhere(self):
        stored = [_slot(id=1, hours=0), _slot(id=2, hours=2)]
        diff = diff_events(stored, [_slot(id=1, hours=0), _slot(id=2, hours=2)])
        assert not diff.changed

    def test_changed_time_is_updated(self):
        diff = diff_events([_slot(id=1, hours=0)], [_slot(id=1, hours=5)])
        assert [e.id for e in diff.updated] == [1]
        assert diff.inserted == []

    def test_changed_note_is_updated(self):
        diff = diff_events([_slot(id=1, note="Room A")], [_slot(id=1, note="Room B")])
        assert [e.id for e in diff.updated] == [1]

    def test_empty_note_equals_missing_note(self):
        diff = diff_events([_slot(id=1, note=None)], [_slot(id=1, note="")])
        assert not diff.changed

    def test_missing_events_are_deleted(self):
        stored = [_slot(id=1, hours=0), _slot(id=2, hours=2)]
        diff = diff_events(stored, [_slot(id=1, hours=0)])
        assert [e.id for e in diff.deleted] == [2]

    def test_unknown_id_is_inserted(self):
        diff = diff_events([_slot(id=1)], [_slot(id=1), _slot(id=99, hours=3)])
        assert [e.id for e in diff.inserted] == [99]

    def test_naive_and_aware_times_compare_equal(self):
        stored = SimpleNamespace(id=1, start=BASE.replace(tzinfo=None), end=(BASE + timedelta(hours=1)).replace(tzinfo=None), note=None)
        diff = diff_events([stored], [_slot(id=1, hours=0)])
        assert not diff.changed

    def test_all_three_partitions(self):
        stored = [_slot(id=1, hours=0), _slot(id=2, hours=2), _slot(id=3, hours=4)]
        incoming = [_slot(id=1, hours=0), _slot(id=2, hours=3), _slot(hours=6)]
        diff = diff_events(stored, incoming)
        assert [e.id for e in diff.updated] == [2]
        assert [e.id for e in diff.deleted] == [3]
        assert len(diff.inserted) == 1 and diff.inserted[0].id is None


@pytest.mark.unit
class TestPostEvents:
    """post_events applies the diff and keeps references consistent."""

    def test_post_events_creates_events_ordered_by_start(self, db_session, poll):
        events = post_events(db_session, poll.id, [_event_in(hours=5), _event_in(hours=1)])

        assert len(events) == 2
        assert events[0]["start"] < events[1]["start"]
        assert all(e["poll_id"] == poll.id for e in events)

    def test_post_events_is_idempotent(self, db_session, poll):
        first = post_events(db_session, poll.id, [_event_in(hours=0), _event_in(hours=2, note="Late")])
        incoming = [PollEventIn(**e) for e in first]

        second = post_events(db_session, poll.id, incoming)
        assert second == first

    def test_update_keeps_id(self, db_session, poll):
        created = post_events(db_session, poll.id, [_event_in(hours=0)])
        updated = post_events(db_session, poll.id, [_event_in(id=created[0]["id"], hours=3, note="Moved")])

        assert updated[0]["id"] == created[0]["id"]
        assert updated[0]["start"] == BASE + timedelta(hours=3)
        assert updated[0]["note"] == "Moved"

    def test_deleted_event_is_pruned_from_selections_and_bookings(self, db_session, poll):
        e1, e2 = post_events(db_session, poll.id, [_event_in(hours=0), _event_in(hours=2)])

        participant = Participant(poll_id=poll.id, name="Alice", token="tok")
        participant.selections.append(Selection(event_id=e1["id"], choice="yes"))
        participant.selections.append(Selection(event_id=e2["id"], choice="maybe"))
        db_session.add(participant)
        poll.booked_events = [e1["id"], e2["id"]]
        db_session.commit()

        remaining = post_events(db_session, poll.id, [_event_in(id=e1["id"], hours=0)])

        assert [e["id"] for e in remaining] == [e1["id"]]
        db_session.expire_all()
        participant = db_session.query(Participant).filter(Participant.id == participant.id).first()
        assert participant.participation == [e1["id"]]
        assert participant.indeterminate_participation == []
        assert db_session.query(Poll).filter(Poll.id == poll.id).first().booked_events == [e1["id"]]

    def test_updated_event_keeps_selections(self, db_session, poll):
        (e1,) = post_events(db_session, poll.id, [_event_in(hours=0)])
        participant = Participant(poll_id=poll.id, name="Alice", token="tok")
        participant.selections.append(Selection(event_id=e1["id"], choice="yes"))
        db_session.add(participant)
        db_session.commit()

        post_events(db_session, poll.id, [_event_in(id=e1["id"], hours=1)])

        db_session.expire_all()
        assert db_session.query(Participant).first().participation == [e1["id"]]

    def test_empty_list_deletes_everything(self, db_session, poll):
        post_events(db_session, poll.id, [_event_in(hours=0), _event_in(hours=2)])
        assert post_events(db_session, poll.id, []) == []
        assert db_session.query(PollEvent).count() == 0

    def test_unknown_poll(self, db_session):
        assert post_events(db_session, 999, [_event_in()]) is None
        assert get_events(db_session, 999) is None
