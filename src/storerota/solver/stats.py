"""
Centralized Person Statistics
=============================
Single source of truth for per-person shift counts and paid-hour totals.
Used by the engine result, the override recompute, JSON export and the CLI.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from storerota.models.constraints import EngineConfig
from storerota.models.overrides import OverrideKind, OverrideMap
from storerota.models.person import Person
from storerota.models.schedule import Day, ShiftStats
from storerota.models.shift import ShiftKind, classify_shift, round1
from storerota.utils.logging_setup import get_logger

logger = get_logger("storerota.solver.stats")


@dataclass
class PersonHours:
    """Paid-hour totals for a single person over the horizon."""
    id: str
    name: str
    role: str
    base: float = 0.0       # Sum of per-day hours capped at base_hours_cap
    overtime: float = 0.0   # Sum of per-day hours above the cap
    expected: float = 160.0
    daily: Dict[str, float] = field(default_factory=dict)  # {iso date: hours}

    @property
    def total(self) -> float:
        return round1(self.base + self.overtime)

    @property
    def diff(self) -> float:
        """Expected minus base; positive means under target."""
        return round1(self.expected - self.base)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "base": self.base,
            "overtime": self.overtime,
            "total": self.total,
            "expected": self.expected,
            "diff": self.diff,
        }


def calculate_shift_stats(
    days: Sequence[Day],
    people: Iterable[Person],
    config: Optional[EngineConfig] = None,
) -> List[ShiftStats]:
    """
    Count morning / evening / full / other blocks per person.

    Args:
        days: Roster days (any block list order)
        people: Roster, one ShiftStats row per person in this order
        config: Supplies opening/closing times and the long-shift threshold

    Returns:
        List of ShiftStats
    """
    config = config or EngineConfig()
    stats = {p.id: ShiftStats(id=p.id, name=p.name, role=p.role.value) for p in people}

    for day in days:
        for b in day.all_blocks:
            row = stats.get(b.id)
            if row is None:
                continue
            kind = classify_shift(b, config.open_time, config.close_time, config.long_shift_hours)
            if kind == ShiftKind.FULL:
                row.full += 1
            elif kind == ShiftKind.MORNING:
                row.morning += 1
            elif kind == ShiftKind.EVENING:
                row.evening += 1
            else:
                row.other += 1

    logger.debug(f"Calculated shift stats for {len(stats)} people over {len(days)} days")
    return list(stats.values())


def _mark_hours_on(person: Person, date_str: str, overrides: OverrideMap) -> float:
    """Leave hours for one cell; an override for the cell replaces the person's own mark."""
    rule = overrides.get(date_str, {}).get(person.id)
    if rule is not None:
        if rule.kind == OverrideKind.MARK and rule.mark_type is not None and rule.mark_type.carries_hours:
            return float(rule.hours or 0)
        return 0.0
    return person.mark_on(date_str).paid_hours


def calculate_hours(
    days: Sequence[Day],
    people: Iterable[Person],
    overrides: Optional[OverrideMap] = None,
    expected_hours: Optional[float] = None,
    config: Optional[EngineConfig] = None,
) -> List[PersonHours]:
    """
    Per-person base and overtime hours.

    Daily hours are block hours plus leave-mark hours. The part up to
    ``base_hours_cap`` is base; anything above is overtime, rounded to one
    decimal per day.
    """
    config = config or EngineConfig()
    overrides = overrides or {}
    expected = config.expected_hours if expected_hours is None else float(expected_hours)
    cap = config.base_hours_cap

    result = []
    for p in people:
        row = PersonHours(id=p.id, name=p.name, role=p.role.value, expected=expected)
        for day in days:
            ds = day.date_str
            h = sum(b.hours for b in day.all_blocks if b.id == p.id)
            h += _mark_hours_on(p, ds, overrides)
            if not h:
                continue
            row.daily[ds] = h
            row.base += min(h, cap)
            row.overtime += max(0.0, round1(h - cap))
        row.base = round1(row.base)
        row.overtime = round1(row.overtime)
        result.append(row)
    return result


def stats_to_dict_list(stats: List[ShiftStats], hours: Optional[List[PersonHours]] = None) -> List[Dict]:
    """Merge shift counts and (optionally) hours into rows for a DataFrame or export."""
    by_id = {h.id: h for h in (hours or [])}
    rows = []
    for s in stats:
        row = s.to_dict()
        row["total"] = s.total
        h = by_id.get(s.id)
        if h is not None:
            row.update({"base": h.base, "overtime": h.overtime, "diff": h.diff})
        rows.append(row)
    return rows
