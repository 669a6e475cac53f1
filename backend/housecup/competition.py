"""Wires the competition core to Flask-SQLAlchemy and Socket.IO.

One set of repositories and services per app, kept on ``app.extensions`` so
nothing process-wide holds competition state.
"""
from flask import current_app, request

from housecup import db, socketio
from housecup.models import Category, Event, House, PlacementDefault, Player
from housecup.services.competition.aggregator import ScoreAggregator
from housecup.services.competition.errors import ValidationError
from housecup.services.competition.lifecycle import EventLifecycle
from housecup.services.competition.publisher import StandingsPublisher
from housecup.services.competition.registry import (
    CategoryRegistry,
    HouseRegistry,
    PlayerRegistry,
    ScoringDefaults,
)
from housecup.services.competition.store import SqlRepository

EXTENSION_KEY = 'housecup.competition'
STANDINGS_ROOM = 'standings'


class CompetitionServices:
    def __init__(self, house_repo, player_repo, category_repo, event_repo, defaults_repo, fallback_scoring, emit):
        self.house_repo = house_repo
        self.player_repo = player_repo
        self.category_repo = category_repo
        self.event_repo = event_repo

        self.lifecycle = EventLifecycle(event_repo)
        self.aggregator = ScoreAggregator(house_repo, player_repo, event_repo)
        self.houses = HouseRegistry(house_repo)
        self.players = PlayerRegistry(player_repo, house_repo, category_repo)
        self.categories = CategoryRegistry(category_repo)
        self.scoring_defaults = ScoringDefaults(defaults_repo, fallback_scoring)
        self.publisher = StandingsPublisher(self.aggregator, emit)


def emit_standings(payload):
    socketio.emit('standings_update', payload, to=STANDINGS_ROOM, namespace='/ws')


def init_competition(flask_app):
    services = CompetitionServices(
        house_repo=SqlRepository(db, House, order_by='name'),
        player_repo=SqlRepository(db, Player, order_by='full_name'),
        category_repo=SqlRepository(db, Category, order_by='name'),
        event_repo=SqlRepository(db, Event, order_by='name'),
        defaults_repo=SqlRepository(db, PlacementDefault, order_by='id'),
        fallback_scoring=flask_app.config.get('DEFAULT_PLACEMENT_POINTS') or {1: 5, 2: 3, 3: 1},
        emit=emit_standings,
    )
    services.publisher.start()
    flask_app.extensions[EXTENSION_KEY] = services
    return services


def get_competition() -> CompetitionServices:
    return current_app.extensions[EXTENSION_KEY]


def request_json() -> dict:
    """The request's JSON body as a dict; a missing body reads as empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data
