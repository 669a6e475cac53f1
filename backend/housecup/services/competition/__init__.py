"""Competition domain services: event lifecycle and score aggregation.

This package contains the pure domain logic that HTTP routes and socket
handlers call into. It only talks to storage through the repository port in
``store``, keeping Flask and SQLAlchemy out of the core.
"""
from .aggregator import ScoreAggregator, Standings, aggregate, player_standings_for_category, rank_houses
from .lifecycle import EventLifecycle
from .scoring_config import validate_scoring_config
