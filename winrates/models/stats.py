import math

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class GameResult(BaseModel):
    """One Pokemon's outcome in one battle."""

    model_config = ConfigDict(frozen=True)

    species: str  # Canonical species name
    won: bool


class PokemonCounters(BaseModel):
    """Running game and win totals for one canonical species."""

    games: int = Field(0, ge=0)
    wins: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _wins_within_games(self) -> "PokemonCounters":
        if self.wins > self.games:
            raise ValueError(f"wins ({self.wins}) cannot exceed games ({self.games})")
        return self

    def record(self, won: bool) -> None:
        self.games += 1
        if won:
            self.wins += 1


class RankedEntry(BaseModel):
    """A species' final line in the leaderboard."""

    model_config = ConfigDict(frozen=True)

    rank: int = Field(..., ge=1)
    species: str
    games: int = Field(..., gt=0)
    wins: int = Field(..., ge=0)

    @computed_field  # type: ignore[misc]
    @property
    def winrate(self) -> float:
        """Winrate as a percentage."""
        return 100 * self.wins / self.games

    @computed_field  # type: ignore[misc]
    @property
    def deviations(self) -> float:
        """Distance from a 50% winrate, scaled by sample size."""
        return (self.winrate - 50.0) * math.sqrt(self.games) / 50.0
