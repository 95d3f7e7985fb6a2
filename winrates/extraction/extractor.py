import math
from typing import Any, List, Mapping, Optional, Sequence

from loguru import logger

from winrates.models.enums import Side
from winrates.models.record import BattleRecord
from winrates.models.stats import GameResult
from winrates.normalization.species import SpeciesNormalizer, default_normalizer


class StatsError(Exception):
    """Base exception for errors that fail an aggregation run."""

    pass


class TeamDataError(StatsError):
    """Raised when a battle log's team data does not have the expected shape."""

    pass


def parse_rating(value: Any) -> Optional[float]:
    """Parses a raw JSON rating, returning None if it is not a usable number.

    Only JSON numbers count: quoted ratings such as ``"1500"`` are rejected.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        rating = float(value)
    except OverflowError:
        return None
    if not math.isfinite(rating) or rating < 0:
        return None
    return rating


def passes_rating_filter(min_rating: float, record: BattleRecord) -> bool:
    """Both sides must have a valid rating of at least ``min_rating``."""
    for raw in (record.ratings.p1, record.ratings.p2):
        rating = parse_rating(raw)
        if rating is None or rating < min_rating:
            return False
    return True


def _team_species(team: Any, source: Optional[str]) -> List[str]:
    if isinstance(team, (str, bytes)) or not isinstance(team, Sequence):
        raise TeamDataError(
            f"Team data in {source or 'record'} is not a list (got {type(team).__name__})"
        )

    species_names: List[str] = []
    for position, entry in enumerate(team):
        if not isinstance(entry, Mapping):
            raise TeamDataError(
                f"Team entry {position} in {source or 'record'} is not an object"
            )
        species = entry.get("species")
        if species is None:
            continue
        if not isinstance(species, str):
            raise TeamDataError(
                f"Species of team entry {position} in {source or 'record'} is not a string"
            )
        species_names.append(species)
    return species_names


def extract(
    min_rating: float,
    record: BattleRecord,
    normalizer: SpeciesNormalizer = default_normalizer,
) -> List[GameResult]:
    """Turns one battle into a result per Pokemon brought by either side.

    Returns an empty list when the battle is filtered out by rating. A side
    with no team data contributes nothing; a side with malformed team data
    raises TeamDataError.
    """
    if not passes_rating_filter(min_rating, record):
        return []

    results: List[GameResult] = []
    for side in Side:
        slot = record.slot(side)
        if slot.team is None:
            continue
        won = record.winner is not None and record.winner == slot.player
        for species in _team_species(slot.team, record.source):
            results.append(GameResult(species=normalizer.normalize(species), won=won))

    logger.trace(f"Extracted {len(results)} results from {record.source or 'record'}")
    return results
