import logging
from typing import Callable, List

from .aggregator import ScoreAggregator

logger = logging.getLogger(__name__)


class StandingsPublisher:
    """Recompute standings whenever houses, players or events change.

    Each change triggers a full aggregation; there is no incremental patching
    and nothing is retained between runs.
    """

    def __init__(self, aggregator: ScoreAggregator, emit: Callable[[dict], None]):
        self.aggregator = aggregator
        self.emit = emit
        self._unsubscribers: List[Callable[[], None]] = []

    def start(self) -> None:
        if self._unsubscribers:
            return
        for repository in (self.aggregator.houses, self.aggregator.players, self.aggregator.events):
            self._unsubscribers.append(repository.subscribe(self._on_change))

    def stop(self) -> None:
        while self._unsubscribers:
            self._unsubscribers.pop()()

    def _on_change(self, _collection) -> None:
        self.publish()

    def publish(self) -> dict:
        payload = self.aggregator.standings().to_dict()
        logger.debug(
            f"[standings] houses={len(payload['house_scores'])} players={len(payload['player_scores'])}"
        )
        self.emit(payload)
        return payload
