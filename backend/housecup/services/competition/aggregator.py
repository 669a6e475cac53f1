"""Standings derived from completed events.

Nothing here is stored: every call recomputes from the snapshot it is given,
in O(events x results). Dangling references are skipped rather than raised;
whichever side of a result still resolves is credited.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .domain import (
    Event,
    EventType,
    House,
    HouseParticipant,
    HouseScore,
    Player,
    PlayerParticipant,
    PlayerScore,
    resolve_participant,
)
from .store import Repository

logger = logging.getLogger(__name__)


@dataclass
class Standings:
    house_scores: List[HouseScore]
    player_scores: List[PlayerScore]

    def to_dict(self):
        return {
            'house_scores': [s.to_dict() for s in self.house_scores],
            'player_scores': [s.to_dict() for s in self.player_scores],
        }


def _scored_events(events: Iterable[Event]) -> List[Event]:
    return [e for e in events if e.is_completed and e.results]


def _tally(houses: List[House], players: List[Player], events: Iterable[Event]):
    houses_by_id = {h.id: h for h in houses}
    players_by_id = {p.id: p for p in players}

    house_scores: Dict[str, HouseScore] = {h.id: HouseScore(house_id=h.id) for h in houses}
    # Players on an unknown house are orphans: they never appear in standings
    player_scores: Dict[str, PlayerScore] = {
        p.id: PlayerScore(player_id=p.id, house_id=p.house_id)
        for p in players
        if p.house_id in houses_by_id
    }

    for event in _scored_events(events):
        for result in event.results:
            points = event.points_for(result.placement)
            won = result.placement == 1
            participant = resolve_participant(event, result, players_by_id, houses_by_id)
            if participant is None:
                logger.debug(
                    f"[skip] event={event.id} participant={result.participant_id} does not resolve"
                )
                continue
            if isinstance(participant, PlayerParticipant):
                player_score = player_scores.get(participant.player.id)
                if player_score is not None:
                    player_score.credit(points, won)
                if participant.house is not None:
                    house_scores[participant.house.id].credit(event.category_id, points, won)
            elif isinstance(participant, HouseParticipant):
                house_scores[participant.house.id].credit(event.category_id, points, won)

    return house_scores, player_scores


def _by_total(scores):
    # sorted() is stable: equal totals keep the order they were built in
    return sorted(scores, key=lambda s: -s.total_score)


def aggregate(houses: Iterable[House], players: Iterable[Player], events: Iterable[Event]) -> Standings:
    """Compute house and player standings from completed events.

    Individual results credit the player and the player's house; group
    results credit the house directly. Placement 1 counts as a win. Both
    lists are ordered by total score descending with ties left in input order.
    """
    house_scores, player_scores = _tally(list(houses), list(players), events)
    return Standings(
        house_scores=_by_total(house_scores.values()),
        player_scores=_by_total(player_scores.values()),
    )


def player_standings_for_category(
    category_id: str,
    houses: Iterable[House],
    players: Iterable[Player],
    events: Iterable[Event],
) -> List[PlayerScore]:
    """Player standings restricted to players of one category.

    The category picks which players are listed, not which events count: a
    listed player's total still includes individual events of any category.
    Ties are broken by full name ascending.
    """
    members = [p for p in players if p.category_id == category_id]
    names = {p.id: p.full_name for p in members}
    _, player_scores = _tally(list(houses), members, events)
    return sorted(
        player_scores.values(),
        key=lambda s: (-s.total_score, names[s.player_id].lower()),
    )


def rank_houses(standings: Standings, houses: Iterable[House], category_id: Optional[str] = None) -> List[HouseScore]:
    """House scores ordered for display.

    Without a category this is the global order. With one, houses are ordered
    by that category's points, ties by house name.
    """
    if category_id is None:
        return list(standings.house_scores)
    names = {h.id: h.name for h in houses}
    return sorted(
        standings.house_scores,
        key=lambda s: (-s.category_breakdown.get(category_id, 0), names.get(s.house_id, '').lower()),
    )


class ScoreAggregator:
    """Reads one snapshot from the injected repositories and aggregates it."""

    def __init__(self, houses: Repository, players: Repository, events: Repository):
        self.houses = houses
        self.players = players
        self.events = events

    def _snapshot(self):
        return self.houses.get_all(), self.players.get_all(), self.events.get_all()

    def standings(self) -> Standings:
        houses, players, events = self._snapshot()
        return aggregate(houses, players, events)

    def player_standings(self, category_id: Optional[str] = None) -> List[PlayerScore]:
        houses, players, events = self._snapshot()
        if category_id is None:
            return aggregate(houses, players, events).player_scores
        return player_standings_for_category(category_id, houses, players, events)

    def house_standings(self, category_id: Optional[str] = None) -> List[HouseScore]:
        houses, players, events = self._snapshot()
        return rank_houses(aggregate(houses, players, events), houses, category_id)
