"""Manual per-cell override rules."""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .person import MarkType, Role


class OverrideKind(str, Enum):
    SHIFT = "SHIFT"  # Force this exact template
    MARK = "MARK"    # Force a leave/support mark for the day
    NONE = "NONE"    # Force unassigned and unmarked


@dataclass(frozen=True)
class OverrideRule:
    """One cell's forced state."""
    kind: OverrideKind
    role: Optional[Role] = None
    code: Optional[str] = None
    mark_type: Optional[MarkType] = None
    hours: Optional[float] = None

    @classmethod
    def shift(cls, code: str, role: Optional[Role] = None) -> "OverrideRule":
        return cls(kind=OverrideKind.SHIFT, role=role, code=code)

    @classmethod
    def mark(cls, mark_type: MarkType, hours: Optional[float] = None, role: Optional[Role] = None) -> "OverrideRule":
        return cls(kind=OverrideKind.MARK, role=role, mark_type=MarkType(mark_type), hours=hours)

    @classmethod
    def none(cls, role: Optional[Role] = None) -> "OverrideRule":
        return cls(kind=OverrideKind.NONE, role=role)

    @property
    def state(self) -> str:
        """Cycle state name: the shift code, the mark type or NONE."""
        if self.kind == OverrideKind.SHIFT and self.code:
            return self.code
        if self.kind == OverrideKind.MARK and self.mark_type:
            return self.mark_type.value
        return MarkType.NONE.value

    def to_dict(self) -> Dict:
        d: Dict = {"kind": self.kind.value}
        if self.role is not None:
            d["role"] = self.role.value
        if self.code is not None:
            d["code"] = self.code
        if self.mark_type is not None:
            d["mark_type"] = self.mark_type.value
        if self.hours is not None:
            d["hours"] = self.hours
        return d

    @classmethod
    def from_dict(cls, d: Dict) -> "OverrideRule":
        role = d.get("role")
        mark_type = d.get("mark_type")
        hours = d.get("hours")
        return cls(
            kind=OverrideKind(str(d.get("kind", "NONE")).upper()),
            role=Role.from_string(role) if role else None,
            code=d.get("code"),
            mark_type=MarkType(mark_type) if mark_type else None,
            hours=float(hours) if hours is not None else None,
        )


# {iso date: {person id: rule}}
OverrideMap = Dict[str, Dict[str, OverrideRule]]


def overrides_from_dict(raw: Dict) -> OverrideMap:
    """Parse a nested plain-dict override payload."""
    return {
        str(ds): {str(pid): r if isinstance(r, OverrideRule) else OverrideRule.from_dict(r) for pid, r in cells.items()}
        for ds, cells in (raw or {}).items()
    }


def overrides_to_dict(overrides: OverrideMap) -> Dict:
    return {ds: {pid: r.to_dict() for pid, r in cells.items()} for ds, cells in overrides.items()}
