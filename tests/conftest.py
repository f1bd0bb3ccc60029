"""Pytest configuration and fixtures."""
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
import structlog

from storerota.models.constraints import DEFAULT_TRACKED_HOURS, EngineConfig, ScheduleMode
from storerota.models.person import Person, Role, StaffType
from storerota.models.schedule import Day
from storerota.models.shift import Block
from storerota.models.rules import TEMPLATES
from storerota.models.validated import validate_requirements

MONDAY = "2024-01-01"


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Handlers bound to captured streams must not leak between tests."""
    yield
    logging.getLogger("storerota").handlers.clear()
    structlog.reset_defaults()


def make_block(person_id: str, start: str, end: str, hours: float = 0, code: str = "", name: str = "") -> Block:
    return Block(id=person_id, name=name or person_id, start=start, end=end, hours=hours, code=code)


def place(person: Person, code: str) -> Block:
    return Block.place(person.id, person.name, TEMPLATES[person.role][code], code)


@pytest.fixture
def pharmacists():
    """Two managers, the first holds a key."""
    return [
        Person(id="p1", name="Alice", role=Role.PHARMACIST, staff_type=StaffType.MANAGER, has_key=True),
        Person(id="p2", name="Bob", role=Role.PHARMACIST, staff_type=StaffType.MANAGER, has_key=True),
    ]


@pytest.fixture
def clerks():
    return [
        Person(id="c1", name="Carol", role=Role.CLERK, staff_type=StaffType.MANAGER, has_key=True),
        Person(id="c2", name="Dan", role=Role.CLERK, staff_type=StaffType.MANAGER, has_key=True),
    ]


@pytest.fixture
def team(pharmacists, clerks):
    return [*pharmacists, *clerks]


@pytest.fixture
def flat_requirements():
    """Requirement of 2 at every tracked hour."""
    return {h: 2 for h in DEFAULT_TRACKED_HOURS}


@pytest.fixture
def requirements(flat_requirements):
    return validate_requirements(flat_requirements, None, ScheduleMode.MULTI)


@pytest.fixture
def default_config():
    return EngineConfig()


@pytest.fixture
def empty_day():
    from datetime import date
    return Day(date=date(2024, 1, 1))
