from typing import Dict, Mapping

from .errors import (
    EmptyConfig,
    MissingFirstPlace,
    NegativePoints,
    NonContiguousPlacements,
    NonPositivePlacement,
    ValidationError,
)


def _as_int(value):
    """Accept ints and decimal strings (JSON object keys); reject everything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def validate_scoring_config(config: Mapping) -> Dict[int, int]:
    """Validate a placement -> points mapping and return it normalized.

    Placements must be exactly 1..N and points must be non-negative integers.
    The returned dict has int keys in ascending order.
    """
    if not config:
        raise EmptyConfig()
    if not isinstance(config, Mapping):
        raise ValidationError('Scoring must map placements to points')

    placements = {}
    for key, points in config.items():
        placement = _as_int(key)
        if placement is None or placement < 1:
            raise NonPositivePlacement(f'Placement {key!r} is not a positive integer', placement=str(key))
        placements[placement] = points

    ordered = sorted(placements)
    if ordered[0] != 1:
        raise MissingFirstPlace()
    for prev, cur in zip(ordered, ordered[1:]):
        if cur - prev > 1:
            raise NonContiguousPlacements(
                f'Scoring placements must be consecutive: {prev} is followed by {cur}',
                after=prev,
                next=cur,
            )

    normalized = {}
    for placement in ordered:
        points = _as_int(placements[placement])
        if points is None or points < 0:
            raise NegativePoints(
                f'Points for placement {placement} must be a non-negative integer',
                placement=placement,
            )
        normalized[placement] = points
    return normalized
