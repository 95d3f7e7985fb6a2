from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from winrates.models.enums import Side


class RatingPair(BaseModel):
    """Raw rating values for both sides, as found in the battle log."""

    model_config = ConfigDict(frozen=True)

    p1: Optional[Any] = None
    p2: Optional[Any] = None


class TeamSlot(BaseModel):
    """One side of a battle: the player and the team they brought."""

    model_config = ConfigDict(frozen=True)

    player: Optional[str] = None
    # Decoded team list, shape is checked during extraction
    team: Optional[Any] = None


class BattleRecord(BaseModel):
    """A single battle log, reduced to the fields the aggregation needs."""

    model_config = ConfigDict(frozen=True)

    ratings: RatingPair = Field(default_factory=RatingPair)
    p1: TeamSlot = Field(default_factory=TeamSlot)
    p2: TeamSlot = Field(default_factory=TeamSlot)
    winner: Optional[str] = None
    # Where the record came from (file path), used in error messages
    source: Optional[str] = None

    def slot(self, side: Side) -> TeamSlot:
        return self.p1 if side == Side.P1 else self.p2

    @classmethod
    def from_log(
        cls, document: Mapping[str, Any], source: Optional[str] = None
    ) -> "BattleRecord":
        """Builds a record from a decoded battle log.

        Reads ``p1rating.elo``, ``p1team``, ``p1`` and the same for p2, plus
        ``winner``. Missing keys become None.
        """
        if not isinstance(document, Mapping):
            raise ValueError(
                f"Battle log must be a JSON object, got {type(document).__name__}"
            )

        def elo(side: Side) -> Any:
            rating = document.get(f"{side.value}rating")
            return rating.get("elo") if isinstance(rating, Mapping) else None

        return cls(
            ratings=RatingPair(p1=elo(Side.P1), p2=elo(Side.P2)),
            p1=TeamSlot(player=document.get("p1"), team=document.get("p1team")),
            p2=TeamSlot(player=document.get("p2"), team=document.get("p2team")),
            winner=document.get("winner"),
            source=source,
        )
