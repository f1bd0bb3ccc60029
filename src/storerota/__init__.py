"""Store Rota - 28-day pharmacy and retail staff roster generator."""
from .errors import InvalidInputError, StoreRotaError, UnknownPersonError, UnknownTemplateError
from .models import (
    CoverageWindow,
    EngineConfig,
    OverrideRule,
    Person,
    Role,
    ScheduleMode,
    ScheduleResult,
)
from .solver import apply_overrides, build_schedule, cycle_cell, swap_cells

__version__ = "0.1.0"

__all__ = [
    "build_schedule",
    "apply_overrides",
    "cycle_cell",
    "swap_cells",
    "Person",
    "Role",
    "OverrideRule",
    "EngineConfig",
    "CoverageWindow",
    "ScheduleMode",
    "ScheduleResult",
    "StoreRotaError",
    "InvalidInputError",
    "UnknownTemplateError",
    "UnknownPersonError",
]
