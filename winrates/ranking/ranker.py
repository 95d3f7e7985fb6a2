from typing import List

from winrates.aggregation.store import AggregateStats
from winrates.models.stats import RankedEntry


def rank(store: AggregateStats) -> List[RankedEntry]:
    """Orders species by deviations, highest first.

    Species with equal deviations keep the order they were first seen in.
    Ranks start at 1 and never repeat.
    """
    unranked = [
        RankedEntry(rank=1, species=species, games=counters.games, wins=counters.wins)
        for species, counters in store.items()
    ]
    # sorted() is stable with reverse=True, so ties stay in insertion order
    ordered = sorted(unranked, key=lambda entry: entry.deviations, reverse=True)
    return [
        entry.model_copy(update={"rank": position})
        for position, entry in enumerate(ordered, start=1)
    ]
