from typing import Dict, Iterable, Iterator, Tuple

from winrates.models.stats import GameResult, PokemonCounters


class AggregateStats:
    """Per-species game and win counters for a whole run.

    Species are kept in the order they were first seen; the ranking uses
    that order to break ties. ``merge`` is the only way to change the
    counters, and callers sharing a store between workers must not run two
    merges at once.
    """

    def __init__(self) -> None:
        self._pokemon: Dict[str, PokemonCounters] = {}

    def merge(self, results: Iterable[GameResult]) -> None:
        for result in results:
            counters = self._pokemon.get(result.species)
            if counters is None:
                counters = self._pokemon[result.species] = PokemonCounters()
            counters.record(result.won)

    def __getitem__(self, species: str) -> PokemonCounters:
        return self._pokemon[species]

    def __contains__(self, species: object) -> bool:
        return species in self._pokemon

    def __len__(self) -> int:
        return len(self._pokemon)

    def __iter__(self) -> Iterator[str]:
        return iter(self._pokemon)

    def items(self) -> Iterator[Tuple[str, PokemonCounters]]:
        return iter(self._pokemon.items())

    def snapshot(self) -> Dict[str, Tuple[int, int]]:
        """Plain ``{species: (games, wins)}`` copy of the current counters."""
        return {
            species: (counters.games, counters.wins)
            for species, counters in self._pokemon.items()
        }

    def __repr__(self) -> str:
        return f"AggregateStats(species={len(self._pokemon)})"
