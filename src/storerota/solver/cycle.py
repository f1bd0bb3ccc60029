"""
Cell Editing
============
Click-to-advance cycling and two-person swaps on the override map. Every
function returns a new map; the input map is never modified.
"""
from typing import Optional, Sequence

from storerota.models.overrides import OverrideKind, OverrideMap, OverrideRule
from storerota.models.person import MarkType, Person, Role
from storerota.models.rules import MARK_DEFAULT_HOURS, TEMPLATES, code_for_span, shift_cycle
from storerota.models.schedule import Day, listed_role
from storerota.utils.logging_setup import get_logger

from .overrides import effective_overrides

logger = get_logger("storerota.solver.cycle")


def _day_for(days: Sequence[Day], date_str: str) -> Optional[Day]:
    return next((d for d in days if d.date_str == date_str), None)


def _role_blocks(day: Day, role: Role):
    return day.pharmacists if role == Role.PHARMACIST else day.clerks


def _cell_role(overrides: OverrideMap, days: Sequence[Day], date_str: str, person: Person, role: Optional[Role]) -> Role:
    if role is not None:
        return role
    rule = overrides.get(date_str, {}).get(person.id)
    if rule is not None and rule.role is not None:
        return rule.role
    return listed_role(days, person.id, date_str) or person.role


def cell_state(
    overrides: OverrideMap,
    days: Sequence[Day],
    date_str: str,
    person: Person,
    role: Optional[Role] = None,
) -> str:
    """
    Effective state of one cell.

    The override wins; then the baseline block code; then the person's own
    mark; otherwise NONE.
    """
    rule = overrides.get(date_str, {}).get(person.id)
    if rule is not None:
        return rule.state

    role = _cell_role(overrides, days, date_str, person, role)
    day = _day_for(days, date_str)
    if day is not None:
        for b in _role_blocks(day, role):
            if b.id == person.id:
                return b.code or code_for_span(role, b.start, b.end, b.hours) or MarkType.NONE.value

    return person.mark_on(date_str).type.value


def next_cycle(state: str, role: Role) -> OverrideRule:
    """
    Rule for the state after ``state`` in the role's cycle.

    Unknown states (including the 12h fallback codes) restart the cycle.
    """
    seq = shift_cycle(role)
    try:
        idx = seq.index(state)
    except ValueError:
        idx = 0
    nxt = seq[(idx + 1) % len(seq)]

    if nxt == MarkType.NONE.value:
        return OverrideRule.none(role)
    if nxt in TEMPLATES[role]:
        return OverrideRule.shift(nxt, role)
    mark = MarkType(nxt)
    return OverrideRule.mark(mark, MARK_DEFAULT_HOURS.get(mark), role)


def cycle_cell(
    overrides: OverrideMap,
    days: Sequence[Day],
    date_str: str,
    person: Person,
    role: Optional[Role] = None,
) -> OverrideMap:
    """
    Advance one cell; a NONE result removes the cell's override.

    Without ``role`` the cell keeps the role of the list the person is
    rostered in, falling back to ``person.role``.
    """
    role = _cell_role(overrides, days, date_str, person, role)
    current = cell_state(overrides, days, date_str, person, role)
    rule = next_cycle(current, role)

    updated = {ds: dict(cells) for ds, cells in overrides.items()}
    cells = updated.setdefault(date_str, {})
    if rule.kind == OverrideKind.NONE:
        cells.pop(person.id, None)
    else:
        cells[person.id] = rule
    logger.debug(f"{date_str} {person.id}: {current} -> {rule.state}")
    return effective_overrides(updated)


def swap_cells(
    overrides: OverrideMap,
    days: Sequence[Day],
    date_str: str,
    role: Role,
    person_a: str,
    person_b: str,
) -> OverrideMap:
    """
    Exchange the shifts of two people in the same role list on one date.

    Both must hold a block there whose span matches a catalog template;
    otherwise the map is returned unchanged.
    """
    day = _day_for(days, date_str)
    if day is None or person_a == person_b:
        return overrides

    blocks = _role_blocks(day, role)
    a = next((b for b in blocks if b.id == person_a), None)
    b = next((b for b in blocks if b.id == person_b), None)
    if a is None or b is None:
        return overrides

    code_a = code_for_span(role, a.start, a.end, a.hours)
    code_b = code_for_span(role, b.start, b.end, b.hours)
    if not code_a or not code_b:
        logger.warning(f"Cannot swap {person_a}/{person_b} on {date_str}: block outside the template catalog")
        return overrides

    updated = {ds: dict(cells) for ds, cells in overrides.items()}
    cells = updated.setdefault(date_str, {})
    cells[person_a] = OverrideRule.shift(code_b, role)
    cells[person_b] = OverrideRule.shift(code_a, role)
    return updated
