"""Shared test factories for aggregation tests.

Provides factory functions for building decoded battle logs, BattleRecords
and on-disk corpora with sensible defaults and easy overrides.
"""

import json
from pathlib import Path

from winrates.models.record import BattleRecord

TEAM_A = ["Rotom-Fan", "Regirock", "Conkeldurr", "Reuniclus", "Incineroar", "Miltank"]
TEAM_B = ["Drednaw", "Pinsir", "Pikachu", "Latios", "Entei", "Exeggutor-Alola"]


def make_team(species_list):
    """Build a decoded team list; only the species field matters."""
    return [
        {"name": species, "species": species, "item": "Leftovers", "level": 80}
        for species in species_list
    ]


# ─── Decoded Battle Log Factory ──────────────────────────────────

def make_log(**overrides):
    """Build a decoded battle log dict. Override any top-level field via kwargs.

    The default log is a battle between two 1500-rated players where p1
    (Alice, TEAM_A) beats p2 (Bob, TEAM_B). Shortcuts:
        p1elo / p2elo: replace the rating's elo value
        p1species / p2species: replace the team with these species
    """
    p1elo = overrides.pop("p1elo", 1500)
    p2elo = overrides.pop("p2elo", 1500)
    p1species = overrides.pop("p1species", TEAM_A)
    p2species = overrides.pop("p2species", TEAM_B)

    log = {
        "winner": "Alice",
        "turns": 30,
        "p1": "Alice",
        "p2": "Bob",
        "p1team": make_team(p1species),
        "p2team": make_team(p2species),
        "score": [0, 2],
        "p1rating": {"elo": p1elo, "gxe": 70.1},
        "p2rating": {"elo": p2elo, "gxe": 65.3},
        "roomid": "battle-gen8randombattle-1",
        "format": "gen8randombattle",
    }
    log.update(overrides)
    return log


def make_record(source=None, **overrides):
    """Build a BattleRecord from make_log() output."""
    return BattleRecord.from_log(make_log(**overrides), source=source)


def make_records(n, **overrides):
    return [make_record(**overrides) for _ in range(n)]


# ─── Corpus Factory ──────────────────────────────────────────────

def write_corpus(format_dir, days):
    """Write battle logs to ``format_dir/<day>/<n>.json``.

    ``days`` maps a day directory name to a list of logs. A log given as a
    string is written verbatim (for malformed-file tests).
    """
    format_dir = Path(format_dir)
    for day, logs in days.items():
        day_dir = format_dir / day
        day_dir.mkdir(parents=True, exist_ok=True)
        for i, log in enumerate(logs):
            text = log if isinstance(log, str) else json.dumps(log)
            (day_dir / f"{i}.json").write_text(text, encoding="utf-8")
    return format_dir
