import logging
from typing import Any, Callable, Dict, Iterable, Mapping

from .domain import Event, EventResult, EventStatus, EventType, utcnow
from .errors import (
    AlreadyScheduled,
    CannotDeleteActive,
    CannotDeleteCompleted,
    DuplicateName,
    DuplicatePlacement,
    EmptyCategory,
    EmptyName,
    EmptyResults,
    InvalidEventType,
    InvalidTransition,
    MalformedResult,
    MissingFirstPlace,
    NotFound,
    ReadOnlyField,
    UnknownPlacement,
)
from .scoring_config import validate_scoring_config
from .store import DELETE_FIELD, Repository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('name', 'category_id', 'type', 'scoring')


def _has_repeats(values) -> bool:
    # Entries come straight from request JSON and may be unhashable
    seen = []
    for value in values:
        if value in seen:
            return True
        seen.append(value)
    return False


def _is_placement(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class EventLifecycle:
    """State machine over an event's status.

    scheduled -> in-progress -> completed, and back to scheduled via reset.
    Each operation reads the current record, validates, then issues exactly
    one store write; a raised error means nothing was written.
    """

    def __init__(self, events: Repository, clock: Callable[[], Any] = utcnow):
        self.events = events
        self.clock = clock

    # ---- Validation helpers ----

    @staticmethod
    def _clean_name(name) -> str:
        cleaned = name.strip() if isinstance(name, str) else ''
        if not cleaned:
            raise EmptyName('Event name is required')
        return cleaned

    @staticmethod
    def _clean_category(category_id) -> str:
        cleaned = category_id.strip() if isinstance(category_id, str) else ''
        if not cleaned:
            raise EmptyCategory('Event category is required')
        return cleaned

    @staticmethod
    def _clean_type(event_type) -> EventType:
        try:
            return EventType(event_type)
        except ValueError:
            raise InvalidEventType(f'Unknown event type {event_type!r}') from None

    def _ensure_name_free(self, name: str, exclude_id: str = None) -> None:
        lowered = name.lower()
        for existing in self.events.get_all():
            if existing.id != exclude_id and existing.name.lower() == lowered:
                raise DuplicateName(f"An event named '{existing.name}' already exists")

    def get(self, event_id: str) -> Event:
        event = self.events.get_by_id(event_id)
        if event is None:
            raise NotFound('Event not found', event_id=event_id)
        return event

    # ---- Operations ----

    def create(self, data: Mapping[str, Any]) -> Event:
        name = self._clean_name(data.get('name'))
        category_id = self._clean_category(data.get('category_id'))
        event_type = self._clean_type(data.get('type'))
        scoring = validate_scoring_config(data.get('scoring') or {})
        self._ensure_name_free(name)

        event_id = self.events.create({
            'name': name,
            'category_id': category_id,
            'type': event_type,
            'status': EventStatus.SCHEDULED,
            'scoring': scoring,
            'created_at': self.clock(),
        })
        logger.info(f"[create] event={event_id} name={name!r} type={event_type.value} category={category_id}")
        return self.get(event_id)

    def update(self, event_id: str, data: Mapping[str, Any]) -> Event:
        event = self.get(event_id)
        changes: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in EDITABLE_FIELDS:
                raise ReadOnlyField(f"Field '{key}' cannot be updated directly", field=key)
            if key == 'name':
                changes['name'] = self._clean_name(value)
            elif key == 'category_id':
                changes['category_id'] = self._clean_category(value)
            elif key == 'type':
                changes['type'] = self._clean_type(value)
            elif key == 'scoring':
                changes['scoring'] = validate_scoring_config(value or {})
        if 'name' in changes:
            self._ensure_name_free(changes['name'], exclude_id=event.id)
        if not changes:
            return event

        if 'scoring' in changes and event.results:
            # Historical totals follow the new mapping on the next aggregation
            logger.warning(f"[rescore] event={event.id} scoring changed after results were recorded")
        self.events.update(event.id, changes)
        logger.info(f"[update] event={event.id} fields={sorted(changes)}")
        return self.get(event.id)

    def start(self, event_id: str) -> Event:
        event = self.get(event_id)
        if event.status != EventStatus.SCHEDULED:
            raise InvalidTransition(
                'Only scheduled events can be started',
                status=event.status.value,
            )
        self.events.update(event.id, {
            'status': EventStatus.IN_PROGRESS,
            'start_time': self.clock(),
        })
        logger.info(f"[start] event={event.id}")
        return self.get(event.id)

    def complete(self, event_id: str, results: Iterable) -> Event:
        event = self.get(event_id)
        if event.status != EventStatus.IN_PROGRESS:
            raise InvalidTransition(
                'Only in-progress events can be completed',
                status=event.status.value,
            )
        entries = self._check_results(event, [EventResult.from_dict(r) for r in (results or [])])
        self.events.update(event.id, {
            'status': EventStatus.COMPLETED,
            'end_time': self.clock(),
            'results': entries,
        })
        logger.info(f"[complete] event={event.id} results={len(entries)}")
        return self.get(event.id)

    @staticmethod
    def _check_results(event: Event, entries):
        if not entries:
            raise EmptyResults()
        placements = [entry.placement for entry in entries]
        if 1 not in placements:
            raise MissingFirstPlace('Results must include 1st place')
        if _has_repeats(placements):
            raise DuplicatePlacement()
        participants = [entry.participant_id for entry in entries]
        if _has_repeats(participants):
            raise DuplicatePlacement('A participant can only be assigned one placement')
        for placement in placements:
            if not _is_placement(placement) or placement not in event.scoring:
                raise UnknownPlacement(
                    f'Placement {placement!r} is not configured in the scoring system',
                    placement=placement,
                )
        for participant_id in participants:
            if not isinstance(participant_id, str) or not participant_id.strip():
                raise MalformedResult('Each result needs a participant id', participant_id=participant_id)
        return entries

    def reset(self, event_id: str) -> Event:
        event = self.get(event_id)
        if event.status == EventStatus.SCHEDULED:
            raise AlreadyScheduled()
        self.events.update(event.id, {
            'status': EventStatus.SCHEDULED,
            'start_time': DELETE_FIELD,
            'end_time': DELETE_FIELD,
            'results': DELETE_FIELD,
        })
        logger.info(f"[reset] event={event.id} from={event.status.value}")
        return self.get(event.id)

    def delete(self, event_id: str) -> None:
        event = self.get(event_id)
        if event.status == EventStatus.IN_PROGRESS:
            raise CannotDeleteActive()
        if event.status == EventStatus.COMPLETED:
            raise CannotDeleteCompleted()
        self.events.delete(event.id)
        logger.info(f"[delete] event={event.id} name={event.name!r}")
