"""
Timeline layout engine.

Places heterogeneous dated events (observations, medications, treatments,
notes) on a zoomable horizontal axis: percentage positions, adaptive date
ticks, and same-day stacking groups.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

from vetmonitor.domain.models import (
    BooleanValue,
    EventSeverity,
    EventType,
    ImageValue,
    Observation,
    SymptomSchema,
    TimelineEvent,
    days_between,
)
from vetmonitor.services.windowing import calendar_day

DEFAULT_MIN_TIME_RANGE = 7.0
DEFAULT_MAX_TIME_RANGE = 365.0


class PositionedEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    event: TimelineEvent
    position: float = Field(ge=0.0, le=100.0, description="Percent along the axis")
    stack_index: int = Field(ge=0, description="Row within the event's same-day group")


class TimelineTick(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: datetime
    position: float = Field(ge=0.0, le=100.0)


class TimelineLayout(BaseModel):
    """Everything a renderer needs to draw one timeline frame."""

    model_config = ConfigDict(frozen=True)

    window_start: datetime
    window_end: datetime
    time_range: float
    positions: list[PositionedEvent]
    ticks: list[TimelineTick]
    groups: dict[str, list[TimelineEvent]]


def matches_search(event: TimelineEvent, search_term: str) -> bool:
    """Case-insensitive substring match on notes, category or a text value."""
    needle = search_term.lower()
    if event.notes and needle in event.notes.lower():
        return True
    if event.category and needle in event.category.lower():
        return True
    return isinstance(event.value, str) and needle in event.value.lower()


def tick_interval_days(window_days: float) -> int:
    if window_days <= 60:
        return 1
    if window_days <= 180:
        return 7
    return 30


def _position(moment: datetime, window_start: datetime, total_days: float) -> float:
    return max(0.0, min(100.0, days_between(window_start, moment) / total_days * 100))


def layout_timeline(
    events: Iterable[TimelineEvent],
    reference_date: datetime,
    time_range: float,
    search_term: str | None = None,
) -> TimelineLayout:
    """
    Lay out events over the `time_range` days ending at `reference_date`.

    The divisor is at least one day, so a zero-length window still lays out.
    """
    if time_range < 0:
        raise ValueError("time_range must not be negative")

    candidates = list(events)
    if search_term:
        candidates = [event for event in candidates if matches_search(event, search_term)]
    candidates.sort(key=lambda event: event.date)

    window_start = reference_date - timedelta(days=time_range)
    window_end = reference_date
    total_days = max(days_between(window_start, window_end), 1.0)

    visible = [event for event in candidates if window_start <= event.date <= window_end]

    groups: dict[str, list[TimelineEvent]] = {}
    positions: list[PositionedEvent] = []
    for event in visible:
        day_group = groups.setdefault(calendar_day(event.date).isoformat(), [])
        positions.append(
            PositionedEvent(
                event=event,
                position=_position(event.date, window_start, total_days),
                stack_index=len(day_group),
            )
        )
        day_group.append(event)

    interval = timedelta(days=tick_interval_days(days_between(window_start, window_end)))
    ticks: list[TimelineTick] = []
    tick = window_start
    while tick <= window_end:
        ticks.append(TimelineTick(date=tick, position=_position(tick, window_start, total_days)))
        tick += interval

    return TimelineLayout(
        window_start=window_start,
        window_end=window_end,
        time_range=time_range,
        positions=positions,
        ticks=ticks,
        groups=groups,
    )


def zoom_in(time_range: float, min_time_range: float = DEFAULT_MIN_TIME_RANGE) -> float:
    """Halve the visible range, never below the minimum."""
    return max(time_range / 2, min_time_range)


def zoom_out(time_range: float, max_time_range: float = DEFAULT_MAX_TIME_RANGE) -> float:
    """Double the visible range, never above the maximum."""
    return min(time_range * 2, max_time_range)


class TimelineView(BaseModel):
    """Zoom state of one timeline; each zoom returns a new view."""

    model_config = ConfigDict(frozen=True)

    reference_date: datetime
    time_range: float = Field(default=30.0, ge=0.0)
    min_time_range: float = Field(default=DEFAULT_MIN_TIME_RANGE, gt=0.0)
    max_time_range: float = Field(default=DEFAULT_MAX_TIME_RANGE, gt=0.0)

    def zoom_in(self) -> "TimelineView":
        return self.model_copy(update={"time_range": zoom_in(self.time_range, self.min_time_range)})

    def zoom_out(self) -> "TimelineView":
        return self.model_copy(
            update={"time_range": zoom_out(self.time_range, self.max_time_range)}
        )

    def layout(
        self, events: Iterable[TimelineEvent], search_term: str | None = None
    ) -> TimelineLayout:
        return layout_timeline(events, self.reference_date, self.time_range, search_term)


def severity_for(value: float | None) -> EventSeverity:
    """Severity band of a reading: above 7 is high, above 4 medium."""
    if value is None:
        return EventSeverity.MEDIUM
    if value > 7:
        return EventSeverity.HIGH
    if value > 4:
        return EventSeverity.MEDIUM
    return EventSeverity.LOW


def event_from_observation(
    observation: Observation, schema: SymptomSchema | None = None, source: str | None = None
) -> TimelineEvent:
    """Project an observation onto the timeline."""
    value = observation.value
    event_value: float | bool | str
    if isinstance(value, BooleanValue):
        event_value = value.value
        number = None
    elif isinstance(value, ImageValue):
        event_value = value.reference
        number = None
    else:
        number = value.as_number()
        event_value = number if number is not None else value.display()

    return TimelineEvent(
        id=observation.id,
        date=observation.recorded_at,
        value=event_value,
        type=EventType.OBSERVATION,
        severity=severity_for(number),
        category=schema.name if schema else None,
        notes=observation.notes,
        source=source,
    )
