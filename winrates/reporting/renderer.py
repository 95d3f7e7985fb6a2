import csv
import io
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from rich import box
from rich.console import Console
from rich.measure import Measurement
from rich.table import Table
from rich.text import Text

from winrates.aggregation.store import AggregateStats
from winrates.config.settings import settings
from winrates.models.stats import RankedEntry
from winrates.ranking.ranker import rank

HUMAN_READABLE_HEADER = ["Rank", "Pokemon", "Deviations", "Winrate", "Games", "Wins"]

# Upper bound used when measuring the natural width of a table
_UNBOUNDED_WIDTH = 100_000


class RenderedReport(BaseModel):
    """Both output forms of a finished run."""

    model_config = ConfigDict(frozen=True)

    serialized: str
    human_readable: str


def to_serialized(ranked: List[RankedEntry]) -> str:
    """CSV with one line per species: "species",games,wins,winrate,deviations."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for entry in ranked:
        writer.writerow(
            [entry.species, entry.games, entry.wins, entry.winrate, entry.deviations]
        )
    return buffer.getvalue().rstrip("\n")


def _format_winrate(winrate: float) -> str:
    return f"{round(winrate, 2):g}%"


def to_human_readable(ranked: List[RankedEntry], width: Optional[int] = None) -> str:
    """Bordered text table of the ranking.

    ``width`` (default ``settings.table_width``) is a minimum: the table
    grows past it instead of truncating any cell.
    """
    table = Table(box=box.ASCII, show_lines=True)
    for column in HUMAN_READABLE_HEADER:
        table.add_column(column, no_wrap=True, overflow="fold")

    for entry in ranked:
        table.add_row(
            str(entry.rank),
            Text(entry.species),  # Never read names as console markup
            f"{entry.deviations:.6f}",
            _format_winrate(entry.winrate),
            str(entry.games),
            str(entry.wins),
        )

    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=width or settings.table_width,
        color_system=None,
        force_terminal=False,
        highlight=False,
        markup=False,
        emoji=False,
    )
    natural = Measurement.get(
        console, console.options.update(max_width=_UNBOUNDED_WIDTH), table
    )
    console.width = max(console.width, natural.maximum)
    console.print(table)
    return buffer.getvalue()


def render_ranking(ranked: List[RankedEntry]) -> RenderedReport:
    return RenderedReport(
        serialized=to_serialized(ranked),
        human_readable=to_human_readable(ranked),
    )


def render(store: AggregateStats) -> RenderedReport:
    return render_ranking(rank(store))
