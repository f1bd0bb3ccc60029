"""
Override & Recompute
====================
Applies manual per-cell rules to a baseline roster. The baseline is deep
copied; overridden cells lose their blocks (a SHIFT rule adds the forced
template back) and then every day's warnings and key state are rebuilt by
the same checks the engine runs.
"""
import copy
from typing import Any, Dict, List, Mapping, Optional, Sequence

from storerota.errors import InvalidInputError, UnknownPersonError
from storerota.models.constraints import EngineConfig, RequirementModel
from storerota.models.overrides import OverrideKind, OverrideMap, OverrideRule
from storerota.models.person import Person, Role, tag_role
from storerota.models.rules import get_template
from storerota.models.schedule import Day, ScheduleResult
from storerota.models.shift import Block
from storerota.utils.logging_setup import get_logger
from storerota.utils.structured_logging import get_structured_logger

from .checks import verify_day
from .coverage import index_people
from .stats import calculate_shift_stats

logger = get_logger("storerota.solver.overrides")


def _as_rule(raw: Any) -> OverrideRule:
    """Accept an OverrideRule or its plain-dict payload form."""
    if isinstance(raw, OverrideRule):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidInputError(f"Override rule must be an OverrideRule or a mapping, got {type(raw).__name__}")
    try:
        return OverrideRule.from_dict(dict(raw))
    except (ValueError, TypeError) as exc:
        raise InvalidInputError(f"Malformed override rule {dict(raw)!r}: {exc}") from None


def _apply_cell(day: Day, person: Person, rule: OverrideRule) -> None:
    """
    Force one cell. Raises before touching the day if the rule is unusable.
    """
    role = rule.role or person.role
    block = None
    if rule.kind == OverrideKind.SHIFT:
        if not rule.code:
            raise InvalidInputError(f"SHIFT override for {person.id} on {day.date_str} has no code")
        tpl = get_template(role, rule.code)
        block = Block.place(person.id, person.name, tpl, rule.code)

    day.remove_person(person.id)
    if block is not None:
        (day.pharmacists if role == Role.PHARMACIST else day.clerks).append(block)


def apply_overrides(
    baseline_days: Sequence[Day],
    overrides: Optional[Mapping[str, Mapping[str, Any]]],
    pharmacists: Sequence[Person],
    clerks: Sequence[Person],
    requirements: RequirementModel,
    config: Optional[EngineConfig] = None,
) -> ScheduleResult:
    """
    Recompute a roster with overrides applied.

    Pure: ``baseline_days`` is never modified, and applying the same
    overrides to the same baseline always gives the same result.

    Args:
        baseline_days: Days from ``build_schedule``
        overrides: {iso date: {person id: OverrideRule or its dict form}}
        pharmacists: Pharmacist roster (role taken from this list)
        clerks: Clerk roster (role taken from this list)
        requirements: Requirement model used for the checks
        config: Engine configuration

    Returns:
        ScheduleResult with rebuilt warnings, key state and shift stats
    """
    config = config or EngineConfig()
    overrides = overrides or {}
    roster: List[Person] = [*tag_role(pharmacists, Role.PHARMACIST), *tag_role(clerks, Role.CLERK)]
    index: Dict[str, Person] = index_people(roster)

    days: List[Day] = copy.deepcopy(list(baseline_days))
    by_date = {d.date_str: d for d in days}

    applied = skipped = 0
    for ds, cells in overrides.items():
        day = by_date.get(ds)
        if day is None:
            logger.debug(f"Override date {ds} outside the horizon, ignored")
            continue
        for pid, raw in cells.items():
            try:
                person = index.get(pid)
                if person is None:
                    raise UnknownPersonError(pid)
                _apply_cell(day, person, _as_rule(raw))
                applied += 1
            except InvalidInputError as exc:
                skipped += 1
                logger.warning(f"Skipping override {ds}/{pid}: {exc}")

    for day in days:
        verify_day(day, index, requirements, config)

    result = ScheduleResult(days=days, shift_stats=calculate_shift_stats(days, roster, config))
    get_structured_logger("storerota.solver").info("overrides_applied", applied=applied, skipped=skipped, warnings=result.warning_count)
    return result


def effective_overrides(overrides: Mapping[str, Mapping[str, OverrideRule]]) -> OverrideMap:
    """Drop empty date entries."""
    return {ds: dict(cells) for ds, cells in overrides.items() if cells}
