"""Person model for store staff and their per-date marks."""
import copy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional


class Role(str, Enum):
    """Staff category. Pharmacists carry the strict coverage rule."""
    PHARMACIST = "pharmacist"
    CLERK = "clerk"

    @classmethod
    def from_string(cls, s: str) -> "Role":
        """Parse role from various string formats."""
        mapping = {
            "pharmacist": cls.PHARMACIST, "pharm": cls.PHARMACIST, "p": cls.PHARMACIST, "a": cls.PHARMACIST,
            "clerk": cls.CLERK, "store": cls.CLERK, "c": cls.CLERK, "s": cls.CLERK, "b": cls.CLERK,
        }
        key = str(s).strip().lower()
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown role: {s!r}")


class StaffType(str, Enum):
    MANAGER = "manager"
    GENERAL = "general"


class MarkType(str, Enum):
    """Non-working status of a person on a date."""
    NONE = "NONE"
    OFF = "OFF"
    PUBLIC = "PUBLIC"      # Public holiday
    ANNUAL = "ANNUAL"      # Annual leave
    COMP = "COMP"          # Compensatory leave
    SUPPORT = "SUPPORT"    # Seconded to another store

    @property
    def carries_hours(self) -> bool:
        """True if the mark contributes paid hours."""
        return self in PAID_MARKS


PAID_MARKS = frozenset({MarkType.PUBLIC, MarkType.ANNUAL, MarkType.COMP, MarkType.SUPPORT})


@dataclass
class Mark:
    """Leave or support mark for one date."""
    type: MarkType = MarkType.NONE
    hours: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.type, str):
            self.type = MarkType(self.type.strip().upper())
        if self.hours is not None:
            self.hours = float(self.hours)

    @property
    def paid_hours(self) -> float:
        """Hours this mark adds to the paid total (0 for NONE/OFF)."""
        if self.type.carries_hours:
            return float(self.hours or 0)
        return 0.0

    def to_dict(self) -> dict:
        d = {"type": self.type.value}
        if self.hours is not None:
            d["hours"] = self.hours
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Mark":
        return cls(type=d.get("type", MarkType.NONE), hours=d.get("hours"))


NO_MARK = Mark()


@dataclass
class Person:
    """A member of the store roster."""

    id: str
    name: str
    role: Role = Role.CLERK
    staff_type: StaffType = StaffType.GENERAL
    score: int = 1  # Staffing weight summed per hour
    has_key: bool = False
    marks: Dict[str, Mark] = field(default_factory=dict)  # {iso date: Mark}

    def __post_init__(self):
        """Validate and normalize fields."""
        self.id = str(self.id).strip()
        self.name = str(self.name).strip() or self.id
        if isinstance(self.role, str) and not isinstance(self.role, Role):
            self.role = Role.from_string(self.role)
        if isinstance(self.staff_type, str) and not isinstance(self.staff_type, StaffType):
            self.staff_type = StaffType(self.staff_type.strip().lower())
        self.score = int(self.score or 1)
        if self.score < 1:
            self.score = 1
        self.marks = {
            str(ds): (m if isinstance(m, Mark) else Mark.from_dict(m))
            for ds, m in (self.marks or {}).items()
        }

    @property
    def is_manager(self) -> bool:
        return self.staff_type == StaffType.MANAGER

    def mark_on(self, date_str: str) -> Mark:
        """Mark for a date; NONE when absent."""
        return self.marks.get(date_str, NO_MARK)

    def is_available(self, date_str: str) -> bool:
        """Only unmarked people can be assigned a shift."""
        return self.mark_on(date_str).type == MarkType.NONE

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "staff_type": self.staff_type.value,
            "score": self.score,
            "has_key": self.has_key,
            "marks": {ds: m.to_dict() for ds, m in sorted(self.marks.items())},
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Person":
        """Create from dictionary."""
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            role=d.get("role", Role.CLERK),
            staff_type=d.get("staff_type", StaffType.GENERAL),
            score=int(d.get("score", 1)),
            has_key=bool(d.get("has_key", False)),
            marks=dict(d.get("marks") or {}),
        )


def default_people(n: int, role: Role, prefix: str = "") -> list:
    """Roster of ``n`` people with default attributes, ids ``<prefix>-1`` …"""
    prefix = prefix or role.value
    return [Person(id=f"{prefix}-{i + 1}", name=f"{prefix}{i + 1}", role=role) for i in range(n)]


def tag_role(people: Iterable[Person], role: Role) -> List[Person]:
    """
    Private copies of ``people`` with ``role`` set from the list they came in.

    Roster lists decide the role; a record's own ``role`` field is ignored.
    The caller's records are left untouched.
    """
    return [replace(copy.deepcopy(p), role=role) for p in people]
