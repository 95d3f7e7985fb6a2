import json
from functools import partial
from pathlib import Path
from typing import Callable, Iterator, Optional

from loguru import logger

from winrates.extraction.extractor import StatsError
from winrates.models.record import BattleRecord

RecordLoader = Callable[[], BattleRecord]


class CorpusError(StatsError):
    """Raised when a battle log cannot be read or decoded."""

    pass


def load_battle_log(path: Path) -> BattleRecord:
    """Reads one battle log file into a BattleRecord."""
    try:
        document = json.loads(Path(path).read_text(encoding="utf-8"))
        return BattleRecord.from_log(document, source=str(path))
    except OSError as e:
        raise CorpusError(f"error reading file {path}: {e}") from e
    except ValueError as e:  # Bad JSON, bad encoding, or fields of the wrong type
        raise CorpusError(f"error processing JSON in {path}: {e}") from e


def iter_battle_logs(
    format_dir: Path, exclusion: Optional[str] = None
) -> Iterator[RecordLoader]:
    """Yields a loader for every battle log under a format directory.

    The format directory holds one subdirectory per day; battle logs are the
    ``.json`` files inside those. Day directories whose name contains
    ``exclusion`` are skipped.
    """
    format_dir = Path(format_dir)
    if not format_dir.is_dir():
        raise CorpusError(f"Format directory not found: {format_dir}")

    for day_dir in sorted(p for p in format_dir.iterdir() if p.is_dir()):
        if exclusion and exclusion in day_dir.name:
            logger.info(f"Ignoring {day_dir.name}")
            continue

        logger.info(f"Analyzing {day_dir.name}...")
        count = 0
        for path in sorted(day_dir.iterdir()):
            if path.suffix != ".json" or not path.is_file():
                continue
            count += 1
            yield partial(load_battle_log, path)
        logger.debug(f"Queued {count} battle logs from {day_dir.name}")
