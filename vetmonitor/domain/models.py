"""
Domain models for veterinary patient monitoring.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation and are frozen: observations are append-only
and schemas change only through an explicit revision.
"""

import uuid
from datetime import UTC, date, datetime, timedelta
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _new_id() -> str:
    return str(uuid.uuid4())


class SymptomDataType(str, Enum):
    """Types of data a symptom schema can describe."""

    NUMERIC = "NUMERIC"
    BOOLEAN = "BOOLEAN"
    SCALE = "SCALE"
    ENUMERATION = "ENUMERATION"
    TEXT = "TEXT"
    IMAGE = "IMAGE"


NUMERIC_TYPES = frozenset({SymptomDataType.NUMERIC, SymptomDataType.SCALE})


class SymptomSchema(BaseModel):
    """Typed definition of what is being measured for a monitoring plan."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    monitoring_plan_id: str | None = None
    name: str = Field(min_length=1, max_length=100)
    category: str | None = Field(None, max_length=50)
    description: str | None = Field(None, max_length=500)
    data_type: SymptomDataType
    units: str | None = Field(None, max_length=20)
    min_value: float | None = None
    max_value: float | None = None
    options: tuple[str, ...] = ()
    version: int = Field(default=1, ge=1)

    # Reporting hints
    lower_is_better: bool | None = Field(
        None, description="Explicit inverted-metric flag; falls back to a name heuristic"
    )
    target_value: float | None = Field(None, description="Goal value for progress reports")

    @property
    def column_header(self) -> str:
        return f"{self.name} ({self.units})" if self.units else self.name


# Observation value variants, one per data type.


class NumericValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["numeric"] = "numeric"
    value: float

    def as_number(self) -> float | None:
        return self.value

    def display(self) -> str:
        return _format_number(self.value)


class ScaleValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["scale"] = "scale"
    value: float

    def as_number(self) -> float | None:
        return self.value

    def display(self) -> str:
        return _format_number(self.value)


class BooleanValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["boolean"] = "boolean"
    value: bool

    def as_number(self) -> float | None:
        return 1.0 if self.value else 0.0

    def display(self) -> str:
        return "true" if self.value else "false"


class EnumerationValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["enumeration"] = "enumeration"
    value: str

    def as_number(self) -> float | None:
        return None

    def display(self) -> str:
        return self.value


class TextValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str

    def as_number(self) -> float | None:
        return None

    def display(self) -> str:
        return self.value


class ImageValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    reference: str = Field(min_length=1, description="Stored-file identifier or URL")

    def as_number(self) -> float | None:
        return None

    def display(self) -> str:
        return self.reference


ObservationValue = Annotated[
    NumericValue | ScaleValue | BooleanValue | EnumerationValue | TextValue | ImageValue,
    Field(discriminator="kind"),
]


def _format_number(value: float) -> str:
    """Render integral floats without a trailing '.0'."""
    if value == int(value):
        return str(int(value))
    return str(value)


class Observation(BaseModel):
    """One recorded data point against a symptom schema for a patient."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    patient_id: str
    monitoring_plan_id: str | None = None
    symptom_schema_id: str
    schema_version: int = Field(default=1, ge=1)
    recorded_at: datetime
    recorded_by: str | None = None
    value: ObservationValue
    notes: str | None = Field(None, max_length=1000)


class WindowPreset(str, Enum):
    """Named relative time ranges."""

    LAST_7_DAYS = "7days"
    LAST_14_DAYS = "14days"
    LAST_30_DAYS = "30days"
    LAST_90_DAYS = "90days"
    ALL = "all"

    @property
    def days(self) -> int | None:
        return {
            WindowPreset.LAST_7_DAYS: 7,
            WindowPreset.LAST_14_DAYS: 14,
            WindowPreset.LAST_30_DAYS: 30,
            WindowPreset.LAST_90_DAYS: 90,
        }.get(self)


class TimeWindow(BaseModel):
    """Either a named preset or an explicit (start, end) pair."""

    model_config = ConfigDict(frozen=True)

    preset: WindowPreset | None = None
    start: datetime | None = None
    end: datetime | None = None

    @model_validator(mode="after")
    def preset_or_explicit_range(self) -> "TimeWindow":
        if self.preset is not None and (self.start is not None or self.end is not None):
            raise ValueError("time window takes either a preset or an explicit range, not both")
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError("time window start must not be after its end")
        return self

    @classmethod
    def named(cls, preset: WindowPreset | str) -> "TimeWindow":
        return cls(preset=WindowPreset(preset))

    @classmethod
    def between(cls, start: datetime | None, end: datetime | None) -> "TimeWindow":
        return cls(start=start, end=end)


class Direction(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    UNCHANGED = "unchanged"


class Outcome(str, Enum):
    IMPROVEMENT = "improvement"
    DECLINE = "decline"
    UNCHANGED = "unchanged"


class ProgressThresholds(BaseModel):
    """Percentage-change tiers for progress labelling."""

    model_config = ConfigDict(frozen=True)

    moderate: float = Field(default=5.0, ge=0.0)
    significant: float = Field(default=15.0, ge=0.0)

    @model_validator(mode="after")
    def moderate_below_significant(self) -> "ProgressThresholds":
        if self.moderate > self.significant:
            raise ValueError("moderate threshold must not exceed significant threshold")
        return self


class ProgressSnapshot(BaseModel):
    """Change between two readings and, optionally, progress toward a target."""

    model_config = ConfigDict(frozen=True)

    current: float
    previous: float
    target: float | None = None
    unit: str | None = None
    is_inverted: bool = False

    change_value: float
    change_percent: int = Field(ge=0)
    direction: Direction
    outcome: Outcome
    status: str
    progress_to_target: int | None = Field(None, ge=0, le=100)
    target_difference: float | None = None
    target_percent: int | None = None

    @property
    def target_reached(self) -> bool:
        return self.progress_to_target == 100


class EventType(str, Enum):
    OBSERVATION = "observation"
    MEDICATION = "medication"
    TREATMENT = "treatment"
    NOTE = "note"


class EventSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TimelineEvent(BaseModel):
    """Read-side projection of an observation or an adjacent clinical record."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    date: datetime
    value: float | bool | str
    type: EventType = EventType.OBSERVATION
    severity: EventSeverity | None = None
    category: str | None = None
    notes: str | None = None
    source: str | None = None


class MonitoringPlan(BaseModel):
    """A monitoring plan's schedule, used for elapsed-plan progress."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    title: str
    start_date: datetime | None = None
    end_date: datetime | None = None


class AlertSeverity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class AlertThreshold(BaseModel):
    """Condition on a symptom's value that should raise an alert, e.g. '> 39.5'."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    symptom_schema_id: str
    condition: str = Field(min_length=1)
    severity: AlertSeverity = AlertSeverity.WARNING
    message: str


class Alert(BaseModel):
    """An alert threshold met by a recorded observation."""

    model_config = ConfigDict(frozen=True)

    threshold_id: str
    observation_id: str
    patient_id: str
    severity: AlertSeverity
    message: str
    triggered_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


def days_between(start: datetime | date, end: datetime | date) -> float:
    """Fractional days from start to end (negative when end precedes start)."""
    delta: timedelta = end - start  # type: ignore[operator]
    return delta.total_seconds() / 86400
