"""
Pydantic Validated Models
=========================
Validation layer for the engine's externally supplied inputs.

Usage:
    from storerota.models.validated import validate_requirements

    model = validate_requirements(hourly, coverage)   # -> RequirementModel

Malformed clock strings, negative requirements or weekday keys outside 0-6
raise ``InvalidInputError`` before any Day is built.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from storerota.errors import InvalidInputError
from .constraints import CoverageWindow, EngineConfig, RequirementModel, ScheduleMode, default_coverage
from .shift import clock_to_minutes


def _check_clock(v: str) -> str:
    clock_to_minutes(v)  # raises InvalidInputError (a ValueError)
    return v


class ValidatedCoverageWindow(BaseModel):
    """Strict coverage window for one weekday."""
    model_config = ConfigDict(validate_assignment=True)

    enabled: bool = False
    start: str = "09:00"
    end: str = "21:00"

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, v: str) -> str:
        return _check_clock(v)

    @model_validator(mode="after")
    def validate_order(self):
        """An enabled window must not end before it starts."""
        if self.enabled and clock_to_minutes(self.end) < clock_to_minutes(self.start):
            raise ValueError(f"coverage window ends before it starts: {self.start}-{self.end}")
        return self

    def to_dataclass(self) -> CoverageWindow:
        return CoverageWindow(enabled=self.enabled, start=self.start, end=self.end)


class ValidatedRequirements(BaseModel):
    """Hourly score table plus per-weekday coverage."""

    hourly_requirements: Dict[str, int] = Field(default_factory=dict)
    coverage_by_weekday: Dict[int, ValidatedCoverageWindow] = Field(default_factory=dict)

    @field_validator("hourly_requirements")
    @classmethod
    def validate_hourly(cls, v: Dict[str, int]) -> Dict[str, int]:
        for hour, need in v.items():
            _check_clock(hour)
            if need < 0:
                raise ValueError(f"requirement at {hour} must be >= 0, got {need}")
        return v

    @field_validator("coverage_by_weekday")
    @classmethod
    def validate_weekdays(cls, v: Dict[int, ValidatedCoverageWindow]) -> Dict[int, ValidatedCoverageWindow]:
        bad = [k for k in v if not 0 <= k <= 6]
        if bad:
            raise ValueError(f"weekday keys must be 0-6, got {bad}")
        return v

    def to_dataclass(self) -> RequirementModel:
        return RequirementModel(
            hourly_requirements=dict(self.hourly_requirements),
            coverage_by_weekday={k: w.to_dataclass() for k, w in self.coverage_by_weekday.items()},
        )


class ValidatedEngineConfig(BaseModel):
    """
    Pydantic-validated engine configuration.

    Use this for strict validation at API boundaries.
    Can be converted to/from the dataclass EngineConfig.
    """
    model_config = ConfigDict(validate_assignment=True)

    horizon_days: int = Field(default=28, ge=1, le=28)
    open_time: str = "09:00"
    close_time: str = "22:00"
    midday_split: str = "15:30"
    tracked_hours: List[str] = Field(default_factory=lambda: EngineConfig().tracked_hours)
    coverage_guard: int = Field(default=8, ge=1, le=100, description="Max placements per coverage pass")
    residual_guard: int = Field(default=24, ge=1, le=200, description="Max placements in the residual fill")
    long_shift_hours: float = Field(default=10, gt=0, le=24)
    base_hours_cap: float = Field(default=10, gt=0, le=24)
    expected_hours: float = Field(default=160, ge=0)

    @field_validator("open_time", "close_time", "midday_split")
    @classmethod
    def validate_clock(cls, v: str) -> str:
        return _check_clock(v)

    @field_validator("tracked_hours")
    @classmethod
    def validate_tracked(cls, v: List[str]) -> List[str]:
        for h in v:
            _check_clock(h)
        return v

    @model_validator(mode="after")
    def validate_model(self):
        """Cross-field validation."""
        o, m, c = (clock_to_minutes(t) for t in (self.open_time, self.midday_split, self.close_time))
        if not o < m < c:
            raise ValueError("open_time < midday_split < close_time must hold")
        return self

    def to_dataclass(self) -> EngineConfig:
        return EngineConfig(**self.model_dump())

    @classmethod
    def from_dataclass(cls, config: EngineConfig) -> "ValidatedEngineConfig":
        return cls(**config.to_dict())


def _raise_invalid(exc: ValidationError, what: str):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    raise InvalidInputError(f"Invalid {what}: {details}") from exc


def validate_requirements(
    hourly_requirements: Optional[Dict[str, int]],
    coverage_by_weekday: Optional[Dict] = None,
    mode: ScheduleMode = ScheduleMode.MULTI,
) -> RequirementModel:
    """
    Validate raw requirement inputs into a ``RequirementModel``.

    ``coverage_by_weekday`` values may be ``CoverageWindow`` instances or
    plain dicts; when omitted, the table of ``mode`` is used.

    Raises:
        InvalidInputError: on any malformed entry
    """
    if coverage_by_weekday is None:
        coverage_by_weekday = default_coverage(mode)
    raw_cov = {
        k: (v.to_dict() if isinstance(v, CoverageWindow) else v)
        for k, v in coverage_by_weekday.items()
    }
    try:
        model = ValidatedRequirements(
            hourly_requirements=dict(hourly_requirements or {}),
            coverage_by_weekday=raw_cov,
        )
    except ValidationError as exc:
        _raise_invalid(exc, "requirements")
    return model.to_dataclass()


def validate_config(config: Optional[EngineConfig]) -> EngineConfig:
    """Round-trip an ``EngineConfig`` through pydantic validation."""
    config = config or EngineConfig()
    try:
        return ValidatedEngineConfig.from_dataclass(config).to_dataclass()
    except ValidationError as exc:
        _raise_invalid(exc, "engine configuration")
