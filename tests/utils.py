from datetime import datetime, timedelta, timezone
from typing import Optional

BASE_TIME = datetime(2030, 5, 6, 9, 0, tzinfo=timezone.utc)


def event_payload(hours_from_base: int, duration: int = 1, note: Optional[str] = None, id: Optional[int] = None) -> dict:
    """JSON body entry for one event, relative to BASE_TIME

    Args:
        hours_from_base: Offset of the start from BASE_TIME in hours
        duration: Length of the event in hours
        note: Optional event note
        id: Id of a stored event to update, omitted for new events
    """
    start = BASE_TIME + timedelta(hours=hours_from_base)
    payload = {
        "start": start.isoformat(),
        "end": (start + timedelta(hours=duration)).isoformat(),
        "note": note,
    }
    if id is not None:
        payload["id"] = id
    return payload
