"""Day roster and schedule result models."""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from .person import Role
from .shift import Block


@dataclass
class KeyCheck:
    """Key-holder status at opening or closing."""
    ok: bool
    holder: Optional[str] = None   # Person id holding the key
    suggest: Optional[str] = None  # Person id a key should be transferred to

    def to_dict(self) -> Dict:
        d: Dict[str, Any] = {"ok": self.ok}
        if self.ok:
            d["holder"] = self.holder
        else:
            d["suggest"] = self.suggest
        return d


@dataclass
class KeyState:
    open: Optional[KeyCheck] = None
    close: Optional[KeyCheck] = None
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "open": self.open.to_dict() if self.open else None,
            "close": self.close.to_dict() if self.close else None,
            "notes": list(self.notes),
        }


@dataclass
class Day:
    """Roster for one calendar date."""
    date: date
    pharmacists: List[Block] = field(default_factory=list)
    clerks: List[Block] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    key: KeyState = field(default_factory=KeyState)

    @property
    def date_str(self) -> str:
        return self.date.isoformat()

    @property
    def weekday(self) -> int:
        return self.date.weekday()

    @property
    def store_blocks(self) -> List[Block]:
        """Clerks first, then pharmacists."""
        return [*self.clerks, *self.pharmacists]

    @property
    def all_blocks(self) -> List[Block]:
        """Pharmacists first, then clerks."""
        return [*self.pharmacists, *self.clerks]

    def has_shift(self, person_id: str) -> bool:
        """True if the person already has any block today, in either list."""
        return any(b.id == person_id for b in self.pharmacists) or any(b.id == person_id for b in self.clerks)

    def role_of(self, person_id: str) -> Optional[Role]:
        """Role list holding the person's block today, if any."""
        if any(b.id == person_id for b in self.pharmacists):
            return Role.PHARMACIST
        if any(b.id == person_id for b in self.clerks):
            return Role.CLERK
        return None

    def remove_person(self, person_id: str) -> None:
        self.pharmacists = [b for b in self.pharmacists if b.id != person_id]
        self.clerks = [b for b in self.clerks if b.id != person_id]

    def reset_checks(self) -> None:
        self.warnings = []
        self.key = KeyState()

    def to_dict(self) -> Dict:
        return {
            "date": self.date_str,
            "pharmacists": [b.to_dict() for b in self.pharmacists],
            "clerks": [b.to_dict() for b in self.clerks],
            "warnings": list(self.warnings),
            "key": self.key.to_dict(),
        }


def listed_role(days: Sequence[Day], person_id: str, date_str: Optional[str] = None) -> Optional[Role]:
    """
    Role list holding the person's blocks: ``date_str`` first, then any day.

    None if the person has no block anywhere in ``days``.
    """
    for day in sorted(days, key=lambda d: d.date_str != date_str):
        role = day.role_of(person_id)
        if role is not None:
            return role
    return None


@dataclass
class ShiftStats:
    """Per-person shift-type counts over the horizon."""
    id: str
    name: str
    role: str
    morning: int = 0
    evening: int = 0
    full: int = 0
    other: int = 0

    @property
    def total(self) -> int:
        return self.morning + self.evening + self.full + self.other

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "morning": self.morning,
            "evening": self.evening,
            "full": self.full,
            "other": self.other,
        }


@dataclass
class ScheduleResult:
    """Complete output of a generation or override recompute."""

    days: List[Day] = field(default_factory=list)
    shift_stats: List[ShiftStats] = field(default_factory=list)

    def day_for(self, date_str: str) -> Optional[Day]:
        for d in self.days:
            if d.date_str == date_str:
                return d
        return None

    @property
    def warning_count(self) -> int:
        return sum(len(d.warnings) for d in self.days)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per placed block."""
        columns = ["date", "role", "id", "name", "code", "start", "end", "hours"]
        rows = []
        for d in self.days:
            for role, blocks in (("pharmacist", d.pharmacists), ("clerk", d.clerks)):
                for b in blocks:
                    rows.append({
                        "date": d.date_str,
                        "role": role,
                        "id": b.id,
                        "name": b.name,
                        "code": b.code,
                        "start": b.start,
                        "end": b.end,
                        "hours": b.hours,
                    })
        if not rows:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame(rows, columns=columns)

    def to_matrix(self) -> pd.DataFrame:
        """Person × date matrix of shift codes."""
        df = self.to_dataframe()
        if df.empty:
            return pd.DataFrame()
        return df.pivot_table(
            index="name",
            columns="date",
            values="code",
            aggfunc=lambda x: "/".join(sorted(set(str(v) for v in x))),
            fill_value="",
        )

    def stats_dataframe(self) -> pd.DataFrame:
        """Shift statistics as a DataFrame."""
        columns = ["id", "name", "role", "morning", "evening", "full", "other"]
        if not self.shift_stats:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame([s.to_dict() for s in self.shift_stats], columns=columns)

    def summary(self) -> Dict[str, Any]:
        """Get summary dictionary for display."""
        return {
            "start": self.days[0].date_str if self.days else None,
            "end": self.days[-1].date_str if self.days else None,
            "days": len(self.days),
            "blocks": sum(len(d.pharmacists) + len(d.clerks) for d in self.days),
            "warnings": self.warning_count,
            "days_with_warnings": sum(1 for d in self.days if d.warnings),
        }

    def to_dict(self) -> Dict:
        return {
            "days": [d.to_dict() for d in self.days],
            "shift_stats": [s.to_dict() for s in self.shift_stats],
        }
