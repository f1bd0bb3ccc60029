"""
Fairness and Recency Tracking
=============================
Running morning/evening counters for one generation run, plus the "closed
last night" lookback used to avoid close-then-open pairs.
"""
from dataclasses import dataclass, field
from typing import Dict, Sequence

from storerota.models.constraints import EngineConfig
from storerota.models.schedule import Day
from storerota.models.shift import ShiftKind, classify_shift, clock_to_minutes


@dataclass
class ShiftCounts:
    morning: int = 0
    evening: int = 0


@dataclass
class FairnessState:
    """
    Per-person counters owned by a single scheduling run.

    Never shared between runs and never written back to Person records.
    """
    config: EngineConfig = field(default_factory=EngineConfig)
    counts: Dict[str, ShiftCounts] = field(default_factory=dict)

    def counts_for(self, person_id: str) -> ShiftCounts:
        if person_id not in self.counts:
            self.counts[person_id] = ShiftCounts()
        return self.counts[person_id]

    def kind_of(self, shift) -> ShiftKind:
        cfg = self.config
        return classify_shift(shift, cfg.open_time, cfg.close_time, cfg.long_shift_hours)

    def record(self, person_id: str, shift) -> None:
        """Count a placed morning or evening shift."""
        kind = self.kind_of(shift)
        cnt = self.counts_for(person_id)
        if kind == ShiftKind.MORNING:
            cnt.morning += 1
        elif kind == ShiftKind.EVENING:
            cnt.evening += 1

    def balance(self, person_id: str, shift) -> int:
        """
        Same-type minus opposite-type count for the shift's classification.

        Smaller is better: a morning shift prefers people who have mostly
        worked evenings, and vice versa. Other kinds are neutral.
        """
        kind = self.kind_of(shift)
        cnt = self.counts_for(person_id)
        if kind == ShiftKind.MORNING:
            return cnt.morning - cnt.evening
        if kind == ShiftKind.EVENING:
            return cnt.evening - cnt.morning
        return 0

    def is_opening(self, shift) -> bool:
        return clock_to_minutes(shift.start) == clock_to_minutes(self.config.open_time)


def worked_closing_shift_yesterday(
    days: Sequence[Day],
    person_id: str,
    day_index: int,
    close_time: str = "22:00",
) -> bool:
    """True if the person had a block ending exactly at closing on the previous day."""
    if day_index <= 0:
        return False
    close_t = clock_to_minutes(close_time)
    yesterday = days[day_index - 1]
    return any(
        b.id == person_id and clock_to_minutes(b.end) == close_t
        for b in yesterday.all_blocks
    )
