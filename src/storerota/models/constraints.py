"""Engine configuration and demand model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

DEFAULT_TRACKED_HOURS: List[str] = [
    "09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00",
    "16:00", "17:00", "18:00", "19:00", "20:00", "21:00",
]

DEFAULT_HOURLY_REQUIREMENTS: Dict[str, int] = {
    "09:00": 2, "10:00": 2, "11:00": 2, "12:00": 3, "13:00": 3, "14:00": 3,
    "15:00": 3, "16:00": 3, "17:00": 3, "18:00": 3, "19:00": 3, "20:00": 3, "21:00": 2,
}

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class ScheduleMode(str, Enum):
    """Preset pharmacist coverage profiles."""
    MULTI = "multi"    # Several pharmacists: every day 09:00-21:00
    SINGLE = "single"  # One pharmacist: weekdays 09:00-17:30


@dataclass
class CoverageWindow:
    """Strict pharmacist coverage rule for one weekday."""
    enabled: bool = False
    start: str = "09:00"
    end: str = "21:00"

    def to_dict(self) -> Dict:
        return {"enabled": self.enabled, "start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, d: Dict) -> "CoverageWindow":
        return cls(
            enabled=bool(d.get("enabled", False)),
            start=str(d.get("start", "09:00")),
            end=str(d.get("end", "21:00")),
        )


def default_coverage(mode: ScheduleMode = ScheduleMode.MULTI) -> Dict[int, CoverageWindow]:
    """
    Default coverage table for a schedule mode.

    Keys are ``date.weekday()`` indices (0 = Monday).
    """
    mode = ScheduleMode(mode)
    if mode == ScheduleMode.MULTI:
        return {wd: CoverageWindow(True, "09:00", "21:00") for wd in range(7)}
    return {wd: CoverageWindow(wd < 5, "09:00", "17:30") for wd in range(7)}


@dataclass
class RequirementModel:
    """Externally supplied demand: per-hour minimum score and per-weekday coverage."""
    hourly_requirements: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_HOURLY_REQUIREMENTS))
    coverage_by_weekday: Dict[int, CoverageWindow] = field(default_factory=default_coverage)

    def need_at(self, hour: str) -> int:
        return int(self.hourly_requirements.get(hour, 0) or 0)

    def coverage_for(self, weekday: int) -> Optional[CoverageWindow]:
        """Window for a ``date.weekday()`` index (0 = Monday)."""
        return self.coverage_by_weekday.get(weekday)

    def to_dict(self) -> Dict:
        return {
            "hourly_requirements": dict(self.hourly_requirements),
            "coverage_by_weekday": {str(k): v.to_dict() for k, v in sorted(self.coverage_by_weekday.items())},
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "RequirementModel":
        cov = d.get("coverage_by_weekday")
        return cls(
            hourly_requirements={str(k): int(v) for k, v in (d.get("hourly_requirements") or {}).items()},
            coverage_by_weekday=(
                {int(k): v if isinstance(v, CoverageWindow) else CoverageWindow.from_dict(v) for k, v in cov.items()}
                if cov is not None else default_coverage()
            ),
        )


@dataclass
class EngineConfig:
    """Configuration for the assignment engine."""

    # Horizon
    horizon_days: int = 28

    # Store hours
    open_time: str = "09:00"
    close_time: str = "22:00"
    midday_split: str = "15:30"  # Boundary between the two half-day 6h shifts
    tracked_hours: List[str] = field(default_factory=lambda: list(DEFAULT_TRACKED_HOURS))

    # Loop guards; exhausting one leaves a warning, never an error
    coverage_guard: int = 8
    residual_guard: int = 24

    # Hours accounting
    long_shift_hours: float = 10  # Strictly longer counts as a full shift
    base_hours_cap: float = 10    # Daily hours above this are overtime
    expected_hours: float = 160   # Expected base hours over the horizon

    def to_dict(self) -> Dict:
        """Serialize to dictionary."""
        return {
            "horizon_days": self.horizon_days,
            "open_time": self.open_time,
            "close_time": self.close_time,
            "midday_split": self.midday_split,
            "tracked_hours": list(self.tracked_hours),
            "coverage_guard": self.coverage_guard,
            "residual_guard": self.residual_guard,
            "long_shift_hours": self.long_shift_hours,
            "base_hours_cap": self.base_hours_cap,
            "expected_hours": self.expected_hours,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "EngineConfig":
        """Create from dictionary, ignoring unknown keys."""
        cfg = cls()
        for key, value in d.items():
            if hasattr(cfg, key):
                if key == "tracked_hours":
                    value = list(value)
                setattr(cfg, key, value)
        return cfg
