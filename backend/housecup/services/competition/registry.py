"""Reference data management: houses, players, categories, placement defaults."""
import logging
import re
from typing import Any, Dict, Mapping, Optional

from .domain import EventType
from .errors import (
    DuplicateName,
    EmptyCategory,
    EmptyHouse,
    EmptyName,
    InvalidColor,
    InvalidEventType,
    NotFound,
    ReadOnlyField,
)
from .scoring_config import validate_scoring_config
from .store import Repository

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r'^#[0-9A-F]{6}$', re.IGNORECASE)


def _required(value, error):
    cleaned = value.strip() if isinstance(value, str) else ''
    if not cleaned:
        raise error
    return cleaned


class HouseRegistry:
    def __init__(self, houses: Repository):
        self.houses = houses

    def _clean(self, data: Mapping[str, Any], exclude_id: Optional[str] = None) -> Dict[str, Any]:
        changes = {}
        for key, value in data.items():
            if key == 'name':
                name = _required(value, EmptyName('House name is required'))
                if self.is_name_taken(name, exclude_id):
                    raise DuplicateName(f"A house named '{name}' already exists")
                changes['name'] = name
            elif key == 'color_hex':
                color = _required(value, InvalidColor('House color is required'))
                if not HEX_COLOR.match(color):
                    raise InvalidColor()
                changes['color_hex'] = color.upper()
            else:
                raise ReadOnlyField(f"Field '{key}' cannot be set on a house", field=key)
        return changes

    def is_name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        lowered = name.lower()
        return any(h.name.lower() == lowered and h.id != exclude_id for h in self.houses.get_all())

    def get(self, house_id: str):
        house = self.houses.get_by_id(house_id)
        if house is None:
            raise NotFound('House not found', house_id=house_id)
        return house

    def create(self, data: Mapping[str, Any]):
        payload = {'name': data.get('name'), 'color_hex': data.get('color_hex')}
        house_id = self.houses.create(self._clean(payload))
        logger.info(f"[house-create] house={house_id}")
        return self.get(house_id)

    def update(self, house_id: str, data: Mapping[str, Any]):
        house = self.get(house_id)
        changes = self._clean(data, exclude_id=house.id)
        if changes:
            self.houses.update(house.id, changes)
        return self.get(house.id)

    def delete(self, house_id: str) -> None:
        house = self.get(house_id)
        self.houses.delete(house.id)
        logger.info(f"[house-delete] house={house.id} name={house.name!r}")


class PlayerRegistry:
    def __init__(self, players: Repository, houses: Repository, categories: Repository):
        self.players = players
        self.houses = houses
        self.categories = categories

    def get(self, player_id: str):
        player = self.players.get_by_id(player_id)
        if player is None:
            raise NotFound('Player not found', player_id=player_id)
        return player

    def is_name_taken(self, full_name: str, category_id: str, house_id: str, exclude_id: Optional[str] = None) -> bool:
        lowered = full_name.lower()
        return any(
            p.full_name.lower() == lowered and p.id != exclude_id
            for p in self.players.get_all()
            if p.category_id == category_id and p.house_id == house_id
        )

    def _clean(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        changes = {}
        for key, value in data.items():
            if key == 'full_name':
                changes['full_name'] = _required(value, EmptyName('Player full name is required'))
            elif key == 'category_id':
                category_id = _required(value, EmptyCategory('Player category is required'))
                if self.categories.get_by_id(category_id) is None:
                    raise NotFound('Category not found', category_id=category_id)
                changes['category_id'] = category_id
            elif key == 'house_id':
                house_id = _required(value, EmptyHouse('Player house is required'))
                if self.houses.get_by_id(house_id) is None:
                    raise NotFound('House not found', house_id=house_id)
                changes['house_id'] = house_id
            else:
                raise ReadOnlyField(f"Field '{key}' cannot be set on a player", field=key)
        return changes

    def create(self, data: Mapping[str, Any]):
        fields = self._clean({
            'full_name': data.get('full_name'),
            'category_id': data.get('category_id'),
            'house_id': data.get('house_id'),
        })
        if self.is_name_taken(fields['full_name'], fields['category_id'], fields['house_id']):
            raise DuplicateName(f"{fields['full_name']} is already registered in this house and category")
        player_id = self.players.create(fields)
        logger.info(f"[player-create] player={player_id} house={fields['house_id']}")
        return self.get(player_id)

    def update(self, player_id: str, data: Mapping[str, Any]):
        player = self.get(player_id)
        changes = self._clean(data)
        if not changes:
            return player
        merged = {
            'full_name': changes.get('full_name', player.full_name),
            'category_id': changes.get('category_id', player.category_id),
            'house_id': changes.get('house_id', player.house_id),
        }
        if self.is_name_taken(merged['full_name'], merged['category_id'], merged['house_id'], exclude_id=player.id):
            raise DuplicateName(f"{merged['full_name']} is already registered in this house and category")
        self.players.update(player.id, changes)
        return self.get(player.id)

    def delete(self, player_id: str) -> None:
        player = self.get(player_id)
        self.players.delete(player.id)
        logger.info(f"[player-delete] player={player.id}")


class CategoryRegistry:
    """Categories are seeded reference data; the core only reads them."""

    def __init__(self, categories: Repository):
        self.categories = categories

    def all(self):
        return self.categories.get_all()

    def by_name(self, name: str):
        return next((c for c in self.categories.get_all() if c.name == name), None)

    def ensure(self, name: str, label: str):
        existing = self.by_name(name)
        if existing is not None:
            return existing
        category_id = self.categories.create({'name': name, 'label': label})
        return self.categories.get_by_id(category_id)


class ScoringDefaults:
    """Default placement -> points mapping per (category, event type).

    New events pick these up when they are created without an explicit
    scoring mapping.
    """

    def __init__(self, defaults: Repository, fallback: Mapping[int, int]):
        self.defaults = defaults
        self.fallback = validate_scoring_config(fallback)

    @staticmethod
    def key(category_id: str, event_type) -> str:
        return f"placement-points-{category_id}-{EventType(event_type).value}"

    def get(self, category_id: str, event_type) -> Dict[int, int]:
        try:
            record = self.defaults.get_by_id(self.key(category_id, event_type))
        except ValueError:
            raise InvalidEventType(f'Unknown event type {event_type!r}') from None
        return dict(record.placements) if record else dict(self.fallback)

    def set(self, category_id: str, event_type, placements: Mapping) -> Dict[int, int]:
        category_id = _required(category_id, EmptyCategory())
        try:
            record_id = self.key(category_id, event_type)
        except ValueError:
            raise InvalidEventType(f'Unknown event type {event_type!r}') from None
        normalized = validate_scoring_config(placements)
        if self.defaults.get_by_id(record_id) is None:
            self.defaults.create({
                'id': record_id,
                'category_id': category_id,
                'event_type': EventType(event_type),
                'placements': normalized,
            })
        else:
            self.defaults.update(record_id, {'placements': normalized})
        logger.info(f"[defaults] category={category_id} type={EventType(event_type).value} placements={len(normalized)}")
        return normalized

    def all(self):
        return self.defaults.get_all()
