from datetime import datetime, timezone
from typing import Iterable, List

from .domain import Event, EventStatus, EventType

STATUS_ORDER = {
    EventStatus.SCHEDULED: 0,
    EventStatus.IN_PROGRESS: 1,
    EventStatus.COMPLETED: 2,
}

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def sort_events(events: Iterable[Event]) -> List[Event]:
    """Scheduled first, then in progress, then completed; by name within each."""
    return sorted(events, key=lambda e: (STATUS_ORDER[e.status], e.name.lower()))


def upcoming_events(events: Iterable[Event]) -> List[Event]:
    pending = [e for e in sort_events(events) if e.status != EventStatus.COMPLETED]
    # Started events first in start order; the rest keep name order
    started = sorted((e for e in pending if e.start_time), key=lambda e: e.start_time)
    return started + [e for e in pending if not e.start_time]


def completed_events(events: Iterable[Event]) -> List[Event]:
    done = sorted(
        (e for e in events if e.status == EventStatus.COMPLETED),
        key=lambda e: e.name.lower(),
    )
    return sorted(done, key=lambda e: e.end_time or _EPOCH, reverse=True)


def event_statistics(events: Iterable[Event]) -> dict:
    events = list(events)
    return {
        'total': len(events),
        'scheduled': sum(1 for e in events if e.status == EventStatus.SCHEDULED),
        'in_progress': sum(1 for e in events if e.status == EventStatus.IN_PROGRESS),
        'completed': sum(1 for e in events if e.status == EventStatus.COMPLETED),
        'by_type': {
            t.value: sum(1 for e in events if e.type == t) for t in EventType
        },
    }
