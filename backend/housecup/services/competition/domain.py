"""Plain records the competition core works on.

Repositories hand these out and the lifecycle/aggregator never see ORM rows,
so the core runs the same against SQLAlchemy or an in-memory fake.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Mapping, Optional, Union

from .errors import MalformedResult


class EventType(str, Enum):
    INDIVIDUAL = 'individual'
    GROUP = 'group'


class EventStatus(str, Enum):
    SCHEDULED = 'scheduled'
    IN_PROGRESS = 'in-progress'
    COMPLETED = 'completed'


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


@dataclass
class House:
    id: str
    name: str
    color_hex: str

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'color_hex': self.color_hex}


@dataclass
class Category:
    id: str
    name: str
    label: str

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'label': self.label}


@dataclass
class Player:
    id: str
    full_name: str
    category_id: str
    house_id: str

    def to_dict(self):
        return {
            'id': self.id,
            'full_name': self.full_name,
            'category_id': self.category_id,
            'house_id': self.house_id,
        }


@dataclass(frozen=True)
class EventResult:
    placement: int
    participant_id: str

    @classmethod
    def from_dict(cls, data) -> 'EventResult':
        if isinstance(data, EventResult):
            return data
        if not isinstance(data, Mapping):
            raise MalformedResult(result=repr(data))
        placement = data.get('placement')
        if isinstance(placement, str) and placement.strip().isdigit():
            try:
                placement = int(placement)
            except ValueError:
                pass  # kept as text; the lifecycle rejects it as UnknownPlacement
        return cls(placement=placement, participant_id=data.get('participant_id'))

    def to_dict(self):
        return {'placement': self.placement, 'participant_id': self.participant_id}


@dataclass
class Event:
    id: str
    name: str
    category_id: str
    type: EventType
    status: EventStatus
    scoring: Dict[int, int]
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    results: Optional[List[EventResult]] = None
    created_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == EventStatus.COMPLETED

    def points_for(self, placement: int) -> int:
        return self.scoring.get(placement, 0)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category_id': self.category_id,
            'type': self.type.value,
            'status': self.status.value,
            # JSON object keys are strings; clients read them back as placements
            'scoring': {str(k): v for k, v in sorted(self.scoring.items())},
            'start_time': isoformat(self.start_time),
            'end_time': isoformat(self.end_time),
            'results': [r.to_dict() for r in self.results] if self.results is not None else None,
            'created_at': isoformat(self.created_at),
        }


@dataclass
class PlacementDefault:
    id: str
    category_id: str
    event_type: EventType
    placements: Dict[int, int]

    def to_dict(self):
        return {
            'id': self.id,
            'category_id': self.category_id,
            'event_type': self.event_type.value,
            'placements': {str(k): v for k, v in sorted(self.placements.items())},
        }


@dataclass
class HouseScore:
    house_id: str
    total_score: int = 0
    events_won: int = 0
    category_breakdown: Dict[str, int] = field(default_factory=dict)

    def credit(self, category_id: str, points: int, won: bool) -> None:
        self.total_score += points
        self.category_breakdown[category_id] = self.category_breakdown.get(category_id, 0) + points
        if won:
            self.events_won += 1

    def to_dict(self):
        return {
            'house_id': self.house_id,
            'total_score': self.total_score,
            'events_won': self.events_won,
            'category_breakdown': dict(self.category_breakdown),
        }


@dataclass
class PlayerScore:
    player_id: str
    house_id: str
    total_score: int = 0
    events_won: int = 0

    def credit(self, points: int, won: bool) -> None:
        self.total_score += points
        if won:
            self.events_won += 1

    def to_dict(self):
        return {
            'player_id': self.player_id,
            'house_id': self.house_id,
            'total_score': self.total_score,
            'events_won': self.events_won,
        }


# ---- Participants ----

@dataclass(frozen=True)
class PlayerParticipant:
    player: Player
    house: Optional[House]
    kind: str = 'player'

    @property
    def id(self) -> str:
        return self.player.id

    @property
    def name(self) -> str:
        return self.player.full_name


@dataclass(frozen=True)
class HouseParticipant:
    house: House
    kind: str = 'house'

    @property
    def id(self) -> str:
        return self.house.id

    @property
    def name(self) -> str:
        return self.house.name


Participant = Union[PlayerParticipant, HouseParticipant]


def resolve_participant(
    event: Event,
    result: EventResult,
    players_by_id: Dict[str, Player],
    houses_by_id: Dict[str, House],
) -> Optional[Participant]:
    """Resolve a result's participant id against the event type.

    Individual events point at players, group events at houses. Returns None
    when the id is dangling. A player whose house is gone still resolves, with
    ``house`` set to None.
    """
    if event.type == EventType.INDIVIDUAL:
        player = players_by_id.get(result.participant_id)
        if player is None:
            return None
        return PlayerParticipant(player=player, house=houses_by_id.get(player.house_id))
    house = houses_by_id.get(result.participant_id)
    if house is None:
        return None
    return HouseParticipant(house=house)
