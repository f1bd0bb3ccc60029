# storerota/models - Data models for the scheduling engine
from .constraints import (
    DEFAULT_HOURLY_REQUIREMENTS,
    DEFAULT_TRACKED_HOURS,
    CoverageWindow,
    EngineConfig,
    RequirementModel,
    ScheduleMode,
    default_coverage,
)
from .overrides import OverrideKind, OverrideMap, OverrideRule
from .person import Mark, MarkType, Person, Role, StaffType, tag_role
from .schedule import Day, KeyCheck, KeyState, ScheduleResult, ShiftStats
from .shift import Block, ShiftKind, ShiftTemplate

__all__ = [
    "Person", "Mark", "MarkType", "Role", "StaffType", "tag_role",
    "ShiftTemplate", "Block", "ShiftKind",
    "Day", "KeyCheck", "KeyState", "ScheduleResult", "ShiftStats",
    "OverrideRule", "OverrideKind", "OverrideMap",
    "EngineConfig", "RequirementModel", "CoverageWindow", "ScheduleMode",
    "default_coverage", "DEFAULT_HOURLY_REQUIREMENTS", "DEFAULT_TRACKED_HOURS",
]
