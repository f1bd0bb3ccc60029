"""Shift templates, placed blocks and clock helpers."""
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict

from storerota.errors import InvalidInputError


def clock_to_minutes(hhmm: str) -> int:
    """Parse an ``HH:MM`` clock string into minutes after midnight."""
    try:
        h_str, m_str = str(hhmm).strip().split(":")
        h, m = int(h_str), int(m_str)
    except (ValueError, AttributeError):
        raise InvalidInputError(f"Malformed clock time {hhmm!r}, expected HH:MM") from None
    if not (0 <= h <= 24 and 0 <= m < 60) or (h == 24 and m != 0):
        raise InvalidInputError(f"Clock time out of range: {hhmm!r}")
    return h * 60 + m


def minutes_to_clock(mins: int) -> str:
    """Format minutes after midnight as ``HH:MM``."""
    return f"{mins // 60:02d}:{mins % 60:02d}"


def round1(x: float) -> float:
    """Round to one decimal place, halves away from zero."""
    x = float(x)
    sign = -1 if x < 0 else 1
    return sign * int(abs(x) * 10 + 0.5) / 10


class ShiftKind(str, Enum):
    """Statistical classification of a shift."""
    MORNING = "morning"
    EVENING = "evening"
    FULL = "full"
    OTHER = "other"


@dataclass(frozen=True)
class ShiftTemplate:
    """Catalog entry: clock span and paid hours (break excluded)."""
    start: str
    end: str
    hours: float

    @property
    def start_minutes(self) -> int:
        return clock_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return clock_to_minutes(self.end)

    def covers(self, hour: str) -> bool:
        """True if the half-open span [start, end) contains ``hour``."""
        t = clock_to_minutes(hour)
        return self.start_minutes <= t < self.end_minutes

    def overlaps(self, start: str, end: str) -> bool:
        return max(self.start_minutes, clock_to_minutes(start)) < min(self.end_minutes, clock_to_minutes(end))


@dataclass
class Block:
    """A template placed for one person on one day."""
    id: str
    name: str
    start: str
    end: str
    hours: float
    code: str

    @classmethod
    def place(cls, person_id: str, name: str, template: ShiftTemplate, code: str) -> "Block":
        return cls(
            id=person_id,
            name=name,
            start=template.start,
            end=template.end,
            hours=template.hours,
            code=code,
        )

    @property
    def start_minutes(self) -> int:
        return clock_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return clock_to_minutes(self.end)

    def covers(self, hour: str) -> bool:
        t = clock_to_minutes(hour)
        return self.start_minutes <= t < self.end_minutes

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict) -> "Block":
        return cls(
            id=str(d["id"]),
            name=str(d.get("name", d["id"])),
            start=str(d["start"]),
            end=str(d["end"]),
            hours=float(d.get("hours", 0)),
            code=str(d.get("code", "")),
        )


def classify_shift(
    shift,
    open_time: str = "09:00",
    close_time: str = "22:00",
    long_shift_hours: float = 10,
) -> ShiftKind:
    """
    Classify a template or block by its fixed start/end and paid hours.

    Only shifts longer than ``long_shift_hours`` count as full; otherwise a
    shift starting at opening is a morning shift and one ending at closing
    is an evening shift.
    """
    if float(shift.hours or 0) > long_shift_hours:
        return ShiftKind.FULL
    if clock_to_minutes(shift.start) == clock_to_minutes(open_time):
        return ShiftKind.MORNING
    if clock_to_minutes(shift.end) == clock_to_minutes(close_time):
        return ShiftKind.EVENING
    return ShiftKind.OTHER
