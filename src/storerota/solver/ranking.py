"""
Candidate Ranking
=================
Lexicographic comparison of (person, template) candidates. The precedence
is an explicit ordered list so each field can be audited and tested alone.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from storerota.models.person import Person, Role
from storerota.models.shift import ShiftTemplate

LOWER, HIGHER = "lower", "higher"

# (field, better direction), evaluated left to right
RANK_ORDER: Tuple[Tuple[str, str], ...] = (
    ("hours", LOWER),       # Shorter shifts first
    ("penalty", LOWER),     # 1 = opening right after closing yesterday
    ("balance", LOWER),     # Morning/evening balance
    ("efficiency", HIGHER), # Gain per hour
    ("gain", HIGHER),       # Raw gain
    ("start", LOWER),       # Earlier start (minutes)
)


@dataclass(frozen=True)
class CandidateRank:
    hours: float
    penalty: int
    balance: int
    efficiency: float
    gain: int
    start: int


@dataclass
class Candidate:
    person: Person
    role: Role
    code: str
    template: ShiftTemplate
    rank: CandidateRank


def is_better(challenger: CandidateRank, incumbent: Optional[CandidateRank]) -> bool:
    """
    True if ``challenger`` strictly beats ``incumbent``.

    Full ties return False, so the first candidate scanned keeps its place.
    """
    if incumbent is None:
        return True
    for name, direction in RANK_ORDER:
        a, b = getattr(challenger, name), getattr(incumbent, name)
        if a != b:
            return a < b if direction == LOWER else a > b
    return False
