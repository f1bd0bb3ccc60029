"""
Coverage and Demand Arithmetic
==============================
Interval tiling, per-hour staffing score and the marginal-gain metric used
to rank every greedy placement.
"""
from typing import Dict, Iterable, List, Mapping, Sequence, Union

from storerota.models.person import Person
from storerota.models.shift import Block, ShiftTemplate, clock_to_minutes

People = Union[Mapping[str, Person], Iterable[Person]]


def index_people(people: People) -> Dict[str, Person]:
    """Return ``{id: Person}`` for a list or an existing mapping."""
    if isinstance(people, Mapping):
        return dict(people)
    return {p.id: p for p in people}


def ensures_coverage(blocks: Sequence, window_start: str, window_end: str) -> bool:
    """
    True if ``blocks`` tile ``[window_start, window_end]`` without a gap.

    Overlapping and redundant blocks are allowed. Any object with ``start``
    and ``end`` clock strings counts as a block.
    """
    segs = sorted(
        ((clock_to_minutes(b.start), clock_to_minutes(b.end)) for b in blocks),
        key=lambda seg: seg[0],
    )
    cur = clock_to_minutes(window_start)
    goal = clock_to_minutes(window_end)
    for s, e in segs:
        if e <= cur:
            continue
        if s > cur:
            return False  # gap
        cur = max(cur, e)
        if cur >= goal:
            return True
    return cur >= goal


def hour_score(blocks: Iterable[Block], people: People, hour: str) -> int:
    """
    Sum of scores of the distinct people on shift at ``hour``.

    A person with several blocks covering the hour is counted once.
    """
    index = index_people(people)
    t = clock_to_minutes(hour)
    covered = {b.id for b in blocks if clock_to_minutes(b.start) <= t < clock_to_minutes(b.end)}
    return sum(index[pid].score or 1 for pid in covered if pid in index)


def has_manager_at_hour(blocks: Iterable[Block], people: People, hour: str) -> bool:
    index = index_people(people)
    t = clock_to_minutes(hour)
    for b in blocks:
        person = index.get(b.id)
        if person and person.is_manager and clock_to_minutes(b.start) <= t < clock_to_minutes(b.end):
            return True
    return False


def hour_shortage(blocks: Sequence[Block], people: People, requirement: Mapping[str, int], hour: str) -> int:
    """Unmet score at one hour (never negative)."""
    need = requirement.get(hour, 0) or 0
    return max(0, need - hour_score(blocks, people, hour))


def total_shortage(
    blocks: Sequence[Block],
    people: People,
    requirement: Mapping[str, int],
    hours: Sequence[str],
) -> int:
    index = index_people(people)
    return sum(hour_shortage(blocks, index, requirement, h) for h in hours)


def segment_shortage(
    blocks: Sequence[Block],
    people: People,
    requirement: Mapping[str, int],
    hours: Sequence[str],
    start: str,
    end: str,
) -> int:
    """Unmet score summed over the tracked hours inside ``[start, end)``."""
    index = index_people(people)
    s, e = clock_to_minutes(start), clock_to_minutes(end)
    return sum(
        hour_shortage(blocks, index, requirement, h)
        for h in hours
        if s <= clock_to_minutes(h) < e
    )


def shortage_gain(
    blocks: Sequence[Block],
    people: People,
    requirement: Mapping[str, int],
    template: ShiftTemplate,
    person_id: str,
    hours: Sequence[str],
) -> int:
    """
    Reduction in total unmet score if ``person_id`` works ``template``.

    Hours the template does not cover contribute nothing. A result <= 0
    means the placement is useless against this requirement vector.
    """
    index = index_people(people)
    person = index.get(person_id)
    score = (person.score if person else 1) or 1
    gain = 0
    for h in hours:
        if not template.covers(h):
            continue
        need = requirement.get(h, 0) or 0
        cur = hour_score(blocks, index, h)
        before = max(0, need - cur)
        after = max(0, need - (cur + score))
        gain += before - after
    return gain


def window_requirement(hours: Sequence[str], start: str, end: str) -> Dict[str, int]:
    """Pseudo requirement of 1 for every tracked hour inside ``[start, end)``."""
    s, e = clock_to_minutes(start), clock_to_minutes(end)
    return {h: (1 if s <= clock_to_minutes(h) < e else 0) for h in hours}


def covered_hours(template: ShiftTemplate, hours: Sequence[str]) -> List[str]:
    return [h for h in hours if template.covers(h)]


def can_place(blocks: Iterable[Block], person_id: str, template: ShiftTemplate) -> bool:
    """False if the template overlaps any block the person already holds."""
    for b in blocks:
        if b.id != person_id:
            continue
        if template.overlaps(b.start, b.end):
            return False
    return True
