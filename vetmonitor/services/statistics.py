"""
Statistics and progress engine.

Two independent calculations over already-windowed data:
- window statistics (latest / average / min / max) for numeric series
- progress between two readings, with inversion for metrics where lower is better
"""

import math
from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from vetmonitor.domain.models import (
    NUMERIC_TYPES,
    Direction,
    MonitoringPlan,
    Observation,
    ObservationValue,
    Outcome,
    ProgressSnapshot,
    ProgressThresholds,
    SymptomDataType,
    SymptomSchema,
)

NOT_AVAILABLE = "N/A"
UNCHANGED_LABEL = "Unchanged"

_KIND_TO_TYPE = {
    "numeric": SymptomDataType.NUMERIC,
    "scale": SymptomDataType.SCALE,
    "boolean": SymptomDataType.BOOLEAN,
    "enumeration": SymptomDataType.ENUMERATION,
    "text": SymptomDataType.TEXT,
    "image": SymptomDataType.IMAGE,
}


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, matching the figures shown in charts."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


class SeriesStatistics(BaseModel):
    """Summary panel for a numeric or scale series."""

    model_config = ConfigDict(frozen=True)

    latest: float | None
    average: float | None
    min: float | None
    max: float | None
    count: int = Field(ge=0)

    def display(self, units: str | None = None) -> dict[str, str]:
        """Render each figure for presentation, 'N/A' where the series is empty."""

        def fmt(value: float | None) -> str:
            if value is None:
                return NOT_AVAILABLE
            text = f"{value:g}"
            return f"{text} {units}" if units else text

        return {
            "latest": fmt(self.latest),
            "average": fmt(self.average),
            "min": fmt(self.min),
            "max": fmt(self.max),
        }


def _series_type(series: Sequence[Observation]) -> SymptomDataType | None:
    if not series:
        return None
    return _KIND_TO_TYPE[series[0].value.kind]


def compute_statistics(
    series: Sequence[Observation], data_type: SymptomDataType | None = None
) -> SeriesStatistics | None:
    """
    Latest, average (one decimal), min and max over a windowed series.

    Returns None for data types that get no statistics panel (BOOLEAN,
    ENUMERATION, TEXT, IMAGE). An empty series yields all-None figures.
    """
    data_type = data_type or _series_type(series) or SymptomDataType.NUMERIC
    if data_type not in NUMERIC_TYPES:
        return None

    ordered = sorted(series, key=lambda observation: observation.recorded_at)
    numbers = [n for n in (o.value.as_number() for o in ordered) if n is not None]
    if not numbers:
        return SeriesStatistics(latest=None, average=None, min=None, max=None, count=0)

    latest = ordered[-1].value.as_number()
    return SeriesStatistics(
        latest=latest if latest is not None else numbers[-1],
        average=round_half_up(sum(numbers) / len(numbers), 1),
        min=min(numbers),
        max=max(numbers),
        count=len(numbers),
    )


def _status_label(outcome: Outcome, change_percent: int, thresholds: ProgressThresholds) -> str:
    if outcome == Outcome.UNCHANGED:
        return UNCHANGED_LABEL
    noun = "Improvement" if outcome == Outcome.IMPROVEMENT else "Decline"
    if change_percent >= thresholds.significant:
        return f"Significant {noun}"
    if change_percent >= thresholds.moderate:
        return f"Moderate {noun}"
    return f"Slight {noun}"


def _progress_to_target(current: float, previous: float, target: float, is_inverted: bool) -> int:
    if is_inverted:
        initial_gap = previous - target
        current_gap = current - target
    else:
        initial_gap = target - previous
        current_gap = target - current

    # Already at or past the target before this period
    if initial_gap <= 0:
        return 100
    progress = (initial_gap - current_gap) / initial_gap * 100
    return int(round_half_up(max(0.0, min(100.0, progress))))


def compute_progress(
    current: float,
    previous: float,
    target: float | None = None,
    is_inverted: bool = False,
    thresholds: ProgressThresholds | None = None,
    unit: str | None = None,
) -> ProgressSnapshot:
    """
    Compare two readings and, when a target is given, measure progress toward it.

    Zero `previous` gives a 0% change rather than an error.
    """
    thresholds = thresholds or ProgressThresholds()

    change_value = current - previous
    change_percent = int(round_half_up(abs(change_value / previous) * 100)) if previous != 0 else 0

    if change_value > 0:
        direction = Direction.INCREASE
    elif change_value < 0:
        direction = Direction.DECREASE
    else:
        direction = Direction.UNCHANGED

    improving = Direction.DECREASE if is_inverted else Direction.INCREASE
    if direction == Direction.UNCHANGED:
        outcome = Outcome.UNCHANGED
    elif direction == improving:
        outcome = Outcome.IMPROVEMENT
    else:
        outcome = Outcome.DECLINE

    progress_to_target = None
    target_difference = None
    target_percent = None
    if target is not None:
        progress_to_target = _progress_to_target(current, previous, target, is_inverted)
        target_difference = current - target
        target_percent = (
            int(round_half_up(abs(target_difference / target) * 100)) if target != 0 else 0
        )

    return ProgressSnapshot(
        current=current,
        previous=previous,
        target=target,
        unit=unit,
        is_inverted=is_inverted,
        change_value=change_value,
        change_percent=change_percent,
        direction=direction,
        outcome=outcome,
        status=_status_label(outcome, change_percent, thresholds),
        progress_to_target=progress_to_target,
        target_difference=target_difference,
        target_percent=target_percent,
    )


def is_inverted_metric(
    schema: SymptomSchema, keywords: Sequence[str] = ("pain", "fever", "swelling")
) -> bool:
    """Whether lower readings mean improvement for this symptom."""
    if schema.lower_is_better is not None:
        return schema.lower_is_better
    name = schema.name.lower()
    return any(keyword.lower() in name for keyword in keywords)


class SymptomSummary(BaseModel):
    """Per-symptom report row: latest two readings, change and statistics."""

    model_config = ConfigDict(frozen=True)

    symptom_schema_id: str
    name: str
    data_type: SymptomDataType
    units: str | None = None
    count: int = Field(ge=0)
    latest: ObservationValue | None = None
    previous: ObservationValue | None = None
    change: float | None = None
    statistics: SeriesStatistics | None = None


def summarize_series(schema: SymptomSchema, series: Sequence[Observation]) -> SymptomSummary:
    """Summarize one symptom's windowed series for a report."""
    newest_first = sorted(series, key=lambda observation: observation.recorded_at, reverse=True)
    latest = newest_first[0].value if newest_first else None
    previous = newest_first[1].value if len(newest_first) > 1 else None

    change = None
    if schema.data_type in NUMERIC_TYPES and latest is not None and previous is not None:
        latest_number, previous_number = latest.as_number(), previous.as_number()
        if latest_number is not None and previous_number is not None:
            change = latest_number - previous_number

    return SymptomSummary(
        symptom_schema_id=schema.id,
        name=schema.name,
        data_type=schema.data_type,
        units=schema.units,
        count=len(newest_first),
        latest=latest,
        previous=previous,
        change=change,
        statistics=compute_statistics(newest_first, schema.data_type),
    )


def plan_progress(plan: MonitoringPlan, now: datetime) -> int:
    """Percentage of a monitoring plan's schedule that has elapsed at `now`."""
    if plan.start_date is None or plan.end_date is None:
        return 0
    if now < plan.start_date:
        return 0
    if now > plan.end_date:
        return 100

    total = (plan.end_date - plan.start_date).total_seconds()
    if total <= 0:
        return 100
    elapsed = (now - plan.start_date).total_seconds()
    return int(round_half_up(elapsed / total * 100))
