"""
Greedy Daily Assignment Engine
==============================
Builds the 28-day roster one day at a time. Each day runs strictly ordered
passes that only add blocks:

    1. Pharmacist strict coverage (weekday window, if enabled)
    2. Clerk store coverage (opening to closing)
    3. Residual fill against the hourly score table
    4. Mandatory minimum presence (one half-day shift for anyone unplaced)
    5-7. Detect-only checks (supervisor, keys, coverage, hourly score)

Placement is greedy and never backtracks. Loop guards bound every pass;
running out of guard or candidates leaves the constraint unmet and the
checks report it as a warning.
"""
from datetime import date, datetime, timedelta
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from storerota.errors import InvalidInputError
from storerota.models.constraints import (
    DEFAULT_HOURLY_REQUIREMENTS,
    CoverageWindow,
    EngineConfig,
    RequirementModel,
    ScheduleMode,
)
from storerota.models.person import Person, Role, tag_role
from storerota.models.rules import HALF_DAY_CODES, TEMPLATES, fallback_template, fill_templates
from storerota.models.schedule import Day, ScheduleResult
from storerota.models.shift import Block, ShiftTemplate
from storerota.models.validated import validate_config, validate_requirements
from storerota.utils.logging_setup import RunTrace, get_logger, log_function_call
from storerota.utils.structured_logging import get_structured_logger

from .checks import verify_day
from .coverage import (
    can_place,
    covered_hours,
    ensures_coverage,
    index_people,
    segment_shortage,
    shortage_gain,
    total_shortage,
    window_requirement,
)
from .fairness import FairnessState, worked_closing_shift_yesterday
from .ranking import Candidate, CandidateRank, is_better
from .stats import calculate_shift_stats

logger = get_logger("storerota.solver.engine")


def parse_start_date(value: Union[str, date, datetime]) -> date:
    """Accept a date, datetime or ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise InvalidInputError(f"Malformed start date {value!r}, expected YYYY-MM-DD") from None


def horizon(start: date, days: int = 28) -> List[date]:
    return [start + timedelta(days=i) for i in range(days)]


class SchedulingRun:
    """
    State of one generation run: the Day records, the fairness counters
    and the resolved inputs. Nothing here outlives the run.
    """

    def __init__(
        self,
        start: date,
        pharmacists: List[Person],
        clerks: List[Person],
        requirements: RequirementModel,
        config: EngineConfig,
    ):
        self.config = config
        self.requirements = requirements
        self.pharmacists = pharmacists
        self.clerks = clerks
        self.people: Dict[str, Person] = index_people([*pharmacists, *clerks])
        self.pools: Dict[Role, Dict[str, Person]] = {
            Role.PHARMACIST: index_people(pharmacists),
            Role.CLERK: index_people(clerks),
        }
        self.days: List[Day] = [Day(date=d) for d in horizon(start, config.horizon_days)]
        self.fairness = FairnessState(config=config)
        self.trace = RunTrace("storerota.solver.engine")

    # ========== Helpers ==========

    @staticmethod
    def blocks(day: Day, role: Role) -> List[Block]:
        return day.pharmacists if role == Role.PHARMACIST else day.clerks

    def place(self, day: Day, role: Role, person: Person, code: str, template: ShiftTemplate) -> Block:
        block = Block.place(person.id, person.name, template, code)
        self.blocks(day, role).append(block)
        self.fairness.record(person.id, template)
        self.trace.placed(person.name, code, template.start, template.end, template.hours)
        return block

    def closed_yesterday(self, person_id: str, day_index: int) -> bool:
        return worked_closing_shift_yesterday(self.days, person_id, day_index, self.config.close_time)

    def rank(
        self,
        person: Person,
        template: ShiftTemplate,
        gain: int,
        day_index: int,
        per_tracked_hour: bool,
    ) -> CandidateRank:
        penalty = 1 if (self.fairness.is_opening(template) and self.closed_yesterday(person.id, day_index)) else 0
        if per_tracked_hour:
            divisor = len(covered_hours(template, self.config.tracked_hours))
        else:
            divisor = template.hours
        return CandidateRank(
            hours=template.hours,
            penalty=penalty,
            balance=self.fairness.balance(person.id, template),
            efficiency=gain / (divisor or 1),
            gain=gain,
            start=template.start_minutes,
        )

    def best_candidate(
        self,
        day: Day,
        day_index: int,
        pools: Sequence[Tuple[Role, Sequence[Person]]],
        gain_blocks: Sequence[Block],
        gain_people: Mapping[str, Person],
        requirement: Mapping[str, int],
        per_tracked_hour: bool = False,
    ) -> Optional[Candidate]:
        """
        Best (person, non-fallback template) across ``pools``.

        People already placed today are skipped, as are templates that
        overlap the person's blocks and candidates with no positive gain.
        """
        hours = self.config.tracked_hours
        best: Optional[Candidate] = None
        for role, available in pools:
            for person in available:
                if day.has_shift(person.id):
                    continue
                for code, tpl in fill_templates(role):
                    if not can_place(self.blocks(day, role), person.id, tpl):
                        continue
                    gain = shortage_gain(gain_blocks, gain_people, requirement, tpl, person.id, hours)
                    if gain <= 0:
                        continue
                    rank = self.rank(person, tpl, gain, day_index, per_tracked_hour)
                    if is_better(rank, best.rank if best else None):
                        best = Candidate(person=person, role=role, code=code, template=tpl, rank=rank)
        return best

    # ========== Passes ==========

    def cover_role(self, day: Day, day_index: int, role: Role, available: List[Person], start: str, end: str) -> bool:
        """
        Tile ``[start, end]`` with blocks of one role.

        A lone available, unplaced person gets the role's 12h fallback.
        Otherwise short templates are stacked greedily against a pseudo
        requirement of 1 per tracked hour in the window.
        """
        pool = self.pools[role]

        def covered() -> bool:
            return ensures_coverage(self.blocks(day, role), start, end)

        if not covered() and len(available) == 1 and not day.has_shift(available[0].id):
            only = available[0]
            code, tpl = fallback_template(role)
            if can_place(self.blocks(day, role), only.id, tpl):
                logger.info(f"{day.date_str}: {only.name} is the only available {role.value}, placing {code}")
                self.place(day, role, only, code, tpl)

        requirement = window_requirement(self.config.tracked_hours, start, end)
        guard = 0
        while not covered() and guard < self.config.coverage_guard:
            guard += 1
            best = self.best_candidate(
                day, day_index, [(role, available)],
                gain_blocks=list(self.blocks(day, role)),
                gain_people=pool,
                requirement=requirement,
            )
            if best is None:
                break
            self.place(day, role, best.person, best.code, best.template)

        ok = covered()
        self.trace.check(f"{role.value}_coverage", ok, f"{day.date_str} {start}-{end} after {guard} placement round(s)")
        return ok

    def fill_residual(self, day: Day, day_index: int, p_avail: List[Person], c_avail: List[Person]) -> None:
        """Place short shifts while any tracked hour is below its required score."""
        hourly = self.requirements.hourly_requirements
        hours = self.config.tracked_hours

        def shortage() -> int:
            return total_shortage(day.all_blocks, self.people, hourly, hours)

        guard = 0
        while shortage() > 0 and guard < self.config.residual_guard:
            guard += 1
            best = self.best_candidate(
                day, day_index, [(Role.CLERK, c_avail), (Role.PHARMACIST, p_avail)],
                gain_blocks=day.all_blocks,
                gain_people=self.people,
                requirement=hourly,
                per_tracked_hour=True,
            )
            if best is None:
                break
            self.place(day, best.role, best.person, best.code, best.template)

        if shortage() > 0:
            free_clerk = next((c for c in c_avail if not day.has_shift(c.id)), None)
            code, tpl = fallback_template(Role.CLERK)
            if free_clerk and can_place(day.clerks, free_clerk.id, tpl):
                logger.info(f"{day.date_str}: score still short, placing {code} on {free_clerk.name}")
                self.place(day, Role.CLERK, free_clerk, code, tpl)

    def ensure_presence(self, day: Day, day_index: int, p_avail: List[Person], c_avail: List[Person]) -> None:
        """
        Every available person still without a block gets one 6h shift,
        on the half of the day with the larger unmet score.
        """
        cfg = self.config
        hourly = self.requirements.hourly_requirements
        for role, available in ((Role.CLERK, c_avail), (Role.PHARMACIST, p_avail)):
            am_code, pm_code = HALF_DAY_CODES[role]
            for person in available:
                if day.has_shift(person.id):
                    continue
                blocks = day.all_blocks
                lack_am = segment_shortage(blocks, self.people, hourly, cfg.tracked_hours, cfg.open_time, cfg.midday_split)
                lack_pm = segment_shortage(blocks, self.people, hourly, cfg.tracked_hours, cfg.midday_split, cfg.close_time)
                first, alt = (am_code, pm_code) if lack_am >= lack_pm else (pm_code, am_code)
                if first == am_code and self.closed_yesterday(person.id, day_index):
                    first, alt = alt, first
                for code in (first, alt):
                    tpl = TEMPLATES[role][code]
                    if can_place(self.blocks(day, role), person.id, tpl):
                        self.place(day, role, person, code, tpl)
                        break

    def assign_day(self, day_index: int) -> Day:
        day = self.days[day_index]
        ds = day.date_str
        with self.trace.scope(f"{ds} ({day.date.strftime('%a')})"):
            p_avail = [p for p in self.pharmacists if p.is_available(ds)]
            c_avail = [c for c in self.clerks if c.is_available(ds)]
            self.trace.note("available", f"{len(p_avail)} pharmacist(s), {len(c_avail)} clerk(s)")

            window: Optional[CoverageWindow] = self.requirements.coverage_for(day.weekday)
            if window and window.enabled:
                with self.trace.scope("pharmacist coverage"):
                    self.cover_role(day, day_index, Role.PHARMACIST, p_avail, window.start, window.end)

            with self.trace.scope("store coverage"):
                self.cover_role(day, day_index, Role.CLERK, c_avail, self.config.open_time, self.config.close_time)
            with self.trace.scope("residual fill"):
                self.fill_residual(day, day_index, p_avail, c_avail)
            with self.trace.scope("presence"):
                self.ensure_presence(day, day_index, p_avail, c_avail)

            verify_day(day, self.people, self.requirements, self.config)
            self.trace.note("blocks", f"{len(day.pharmacists)} pharmacist, {len(day.clerks)} clerk")
        return day


@log_function_call
def build_schedule(
    start_date: Union[str, date, datetime],
    pharmacists: Sequence[Person],
    clerks: Sequence[Person],
    hourly_requirements: Optional[Mapping[str, int]] = None,
    coverage_by_weekday: Optional[Mapping] = None,
    schedule_mode: ScheduleMode = ScheduleMode.MULTI,
    config: Optional[EngineConfig] = None,
) -> ScheduleResult:
    """
    Generate the roster for the horizon starting at ``start_date``.

    Args:
        start_date: First day of the horizon
        pharmacists: Pharmacist roster (role taken from this list)
        clerks: Clerk roster (role taken from this list)
        hourly_requirements: {"HH:MM": minimum score}; defaults to the store table
        coverage_by_weekday: {weekday: CoverageWindow or dict}, keyed by
            ``date.weekday()``: 0 = Monday .. 6 = Sunday. Sunday-first
            tables must be shifted by one. Defaults to the table of
            ``schedule_mode``.
        schedule_mode: Preset used only when ``coverage_by_weekday`` is None
        config: Engine configuration

    Returns:
        ScheduleResult with one Day per date and per-person shift stats

    Raises:
        InvalidInputError: malformed dates, clock strings, tables or
            duplicate person ids. Infeasibility is never raised; it is
            reported through each Day's warnings.
    """
    config = validate_config(config)
    if hourly_requirements is None:
        hourly_requirements = DEFAULT_HOURLY_REQUIREMENTS
    requirements = validate_requirements(
        dict(hourly_requirements),
        dict(coverage_by_weekday) if coverage_by_weekday is not None else None,
        schedule_mode,
    )
    start = parse_start_date(start_date)

    ph = tag_role(pharmacists, Role.PHARMACIST)
    cl = tag_role(clerks, Role.CLERK)
    ids = [p.id for p in (*ph, *cl)]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise InvalidInputError(f"Duplicate person ids in roster: {duplicates}")

    logger.info(f"Scheduling {len(ph)} pharmacist(s), {len(cl)} clerk(s) from {start} for {config.horizon_days} days")

    run = SchedulingRun(start, ph, cl, requirements, config)
    run.trace.banner(f"Building schedule from {start}")
    for day_index in range(len(run.days)):
        run.assign_day(day_index)

    result = ScheduleResult(
        days=run.days,
        shift_stats=calculate_shift_stats(run.days, [*ph, *cl], config),
    )
    get_structured_logger("storerota.solver").info("schedule_built", **result.summary())
    return result
