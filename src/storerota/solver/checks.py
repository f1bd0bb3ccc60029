"""
Day Verification Passes
=======================
Detect-only checks run after assignment and after every override recompute:
supervisor presence, key-holder continuity, strict pharmacist coverage,
store coverage and per-hour staffing score. They never add blocks; every
failure becomes a warning string on the Day.
"""
from typing import Dict, List, Optional

from storerota.models.constraints import WEEKDAY_NAMES, EngineConfig, RequirementModel
from storerota.models.person import Person
from storerota.models.schedule import Day, KeyCheck, KeyState
from storerota.models.shift import clock_to_minutes
from storerota.utils.logging_setup import get_logger, log_constraint

from .coverage import ensures_coverage, has_manager_at_hour, hour_score

logger = get_logger("storerota.solver.checks")

KEY_WARNING_PREFIX = "Key reminder: "


def check_supervisor(day: Day, people: Dict[str, Person], config: EngineConfig) -> Optional[str]:
    """Warning for the first tracked hour with no manager on shift, if any."""
    blocks = day.store_blocks
    for h in config.tracked_hours:
        if not has_manager_at_hour(blocks, people, h):
            return f"{h} no manager on duty (managers are not added automatically)."
    return None


def check_keys(day: Day, people: Dict[str, Person], config: EngineConfig) -> KeyState:
    """
    Opening and closing key-holder status.

    Opening needs a key holder on shift at the opening instant; closing needs
    one whose block ends at or after closing. When missing, the earliest
    starter (opening) or latest finisher (closing) is suggested.
    """
    blocks = day.store_blocks
    open_t = clock_to_minutes(config.open_time)
    close_t = clock_to_minutes(config.close_time)

    def holds_key(b) -> bool:
        p = people.get(b.id)
        return bool(p and p.has_key)

    holders_open = [b for b in blocks if holds_key(b) and b.start_minutes <= open_t < b.end_minutes]
    holders_close = [b for b in blocks if holds_key(b) and b.end_minutes >= close_t]

    state = KeyState()
    if holders_open:
        state.open = KeyCheck(ok=True, holder=holders_open[0].id)
    elif blocks:
        earliest = min(blocks, key=lambda b: b.start_minutes)
        state.open = KeyCheck(ok=False, suggest=earliest.id)
        state.notes.append(
            f"{config.open_time} no key holder on shift: transfer a key to the earliest starter ({earliest.name})"
        )
    else:
        state.open = KeyCheck(ok=False, suggest=None)
        state.notes.append(f"{config.open_time} nobody on shift: no key transfer possible")

    if holders_close:
        state.close = KeyCheck(ok=True, holder=holders_close[0].id)
    elif blocks:
        latest = max(blocks, key=lambda b: b.end_minutes)
        state.close = KeyCheck(ok=False, suggest=latest.id)
        state.notes.append(
            f"{config.close_time} no key holder on shift: transfer a key to the latest finisher ({latest.name})"
        )
    else:
        state.close = KeyCheck(ok=False, suggest=None)
        state.notes.append(f"{config.close_time} nobody on shift: no key transfer possible")

    return state


def check_coverage(day: Day, requirements: RequirementModel, config: EngineConfig) -> List[str]:
    """Strict pharmacist window (if enabled) then the combined store window."""
    warnings = []
    window = requirements.coverage_for(day.weekday)
    if window and window.enabled:
        ok = ensures_coverage(day.pharmacists, window.start, window.end)
        log_constraint(logger, "pharmacist_coverage", ok, f"{day.date_str} {window.start}-{window.end}")
        if not ok:
            warnings.append(
                f"Pharmacist coverage short: {WEEKDAY_NAMES[day.weekday]} "
                f"{window.start}-{window.end} not fully covered."
            )
    ok = ensures_coverage(day.store_blocks, config.open_time, config.close_time)
    log_constraint(logger, "store_coverage", ok, day.date_str)
    if not ok:
        warnings.append(f"Store staffing short: {config.open_time}-{config.close_time} not fully covered.")
    return warnings


def check_hourly_scores(
    day: Day,
    people: Dict[str, Person],
    requirements: RequirementModel,
    config: EngineConfig,
) -> List[str]:
    warnings = []
    blocks = day.store_blocks
    for h in config.tracked_hours:
        need = requirements.need_at(h)
        if not need:
            continue
        actual = hour_score(blocks, people, h)
        if actual < need:
            warnings.append(f"{h} staffing score short: need {need}, have {actual}.")
    return warnings


def verify_day(
    day: Day,
    people: Dict[str, Person],
    requirements: RequirementModel,
    config: EngineConfig,
) -> Day:
    """
    Discard and rebuild the Day's warnings and key state.

    Order: supervisor, key holders, coverage, hourly score.
    """
    day.reset_checks()

    supervisor = check_supervisor(day, people, config)
    if supervisor:
        day.warnings.append(supervisor)

    day.key = check_keys(day, people, config)
    if day.key.notes:
        day.warnings.append(KEY_WARNING_PREFIX + "; ".join(day.key.notes))

    day.warnings.extend(check_coverage(day, requirements, config))
    day.warnings.extend(check_hourly_scores(day, people, requirements, config))

    if day.warnings:
        logger.debug(f"{day.date_str}: {len(day.warnings)} warning(s)")
    return day
