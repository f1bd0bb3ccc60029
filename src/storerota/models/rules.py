"""
Business Rules and Constants
============================
Shift-template catalog per role, edit cycle and leave defaults.
"""
from typing import Dict, List, Optional, Tuple

from storerota.errors import UnknownTemplateError
from .person import MarkType, Role
from .shift import ShiftTemplate

# Shift Definitions (hours exclude break)
TEMPLATES: Dict[Role, Dict[str, ShiftTemplate]] = {
    Role.PHARMACIST: {
        "P6A": ShiftTemplate("09:00", "15:30", 6),
        "P6B": ShiftTemplate("15:30", "22:00", 6),
        "P8A": ShiftTemplate("09:00", "17:30", 8),
        "P8B": ShiftTemplate("12:30", "21:00", 8),
        "P10A": ShiftTemplate("09:00", "20:00", 10),
        "P10B": ShiftTemplate("11:00", "22:00", 10),
        "P12": ShiftTemplate("09:00", "22:00", 12),
    },
    Role.CLERK: {
        "S6A": ShiftTemplate("09:00", "15:30", 6),
        "S6B": ShiftTemplate("15:30", "22:00", 6),
        "S8A": ShiftTemplate("09:00", "17:30", 8),
        "S8B": ShiftTemplate("13:30", "22:00", 8),
        "S10": ShiftTemplate("11:00", "22:00", 10),
        "S12": ShiftTemplate("09:00", "22:00", 12),
    },
}

# Last-resort templates, never picked by the ordinary fill passes
FALLBACK_CODES: Dict[Role, str] = {
    Role.PHARMACIST: "P12",
    Role.CLERK: "S12",
}

# Ordered fill candidates: 6h → 8h → 10h
FILL_ORDER: Dict[Role, List[str]] = {
    Role.PHARMACIST: ["P6A", "P6B", "P8A", "P8B", "P10A", "P10B"],
    Role.CLERK: ["S6A", "S6B", "S8A", "S8B", "S10"],
}

# (morning half, afternoon half) short templates for mandatory presence
HALF_DAY_CODES: Dict[Role, Tuple[str, str]] = {
    Role.PHARMACIST: ("P6A", "P6B"),
    Role.CLERK: ("S6A", "S6B"),
}

LEAVE_CYCLE: List[MarkType] = [
    MarkType.OFF, MarkType.PUBLIC, MarkType.ANNUAL, MarkType.COMP, MarkType.SUPPORT,
]

MARK_DEFAULT_HOURS: Dict[MarkType, float] = {
    MarkType.PUBLIC: 8,
    MarkType.ANNUAL: 8,
    MarkType.COMP: 8,
    MarkType.SUPPORT: 8,
}


def shift_cycle(role: Role) -> List[str]:
    """Click-to-advance order of cell states for one role."""
    return [MarkType.NONE.value] + FILL_ORDER[role] + [m.value for m in LEAVE_CYCLE]


def get_template(role: Role, code: str) -> ShiftTemplate:
    """Look up a template by code, raising ``UnknownTemplateError`` if absent."""
    try:
        return TEMPLATES[role][code]
    except KeyError:
        raise UnknownTemplateError(code, getattr(role, "value", str(role))) from None


def fill_templates(role: Role) -> List[Tuple[str, ShiftTemplate]]:
    """(code, template) pairs for the ordinary fill passes, shortest first."""
    return [(code, TEMPLATES[role][code]) for code in FILL_ORDER[role]]


def fallback_template(role: Role) -> Tuple[str, ShiftTemplate]:
    code = FALLBACK_CODES[role]
    return code, TEMPLATES[role][code]


def code_for_span(role: Role, start: str, end: str, hours: float) -> Optional[str]:
    """Catalog code whose start, end and hours all match, if any."""
    for code, tpl in TEMPLATES[role].items():
        if tpl.start == start and tpl.end == end and float(tpl.hours) == float(hours):
            return code
    return None
