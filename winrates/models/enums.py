from enum import Enum


class MatchKind(str, Enum):
    PREFIX = "PREFIX"
    EXACT = "EXACT"


class ErrorPolicy(str, Enum):
    ABORT = "abort"  # First malformed record fails the whole run
    SKIP = "skip"  # Log the record and keep going


class Side(str, Enum):
    P1 = "p1"
    P2 = "p2"
