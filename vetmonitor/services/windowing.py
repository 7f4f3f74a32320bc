"""
Time-series windowing.

Every function here takes "now" as a parameter instead of reading the clock,
so the same inputs always produce the same window.
"""

from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta

from vetmonitor.domain.models import Observation, TimeWindow, WindowPreset


def resolve_window(
    time_window: TimeWindow | WindowPreset | str, now: datetime
) -> tuple[datetime | None, datetime | None]:
    """
    Resolve a window to absolute (start, end) bounds.

    Presets end at `now` and start N days earlier; `all` and missing explicit
    bounds resolve to None (unbounded on that side).
    """
    if not isinstance(time_window, TimeWindow):
        time_window = TimeWindow.named(time_window)

    if time_window.preset is None:
        return time_window.start, time_window.end

    days = time_window.preset.days
    if days is None:
        return None, None
    return now - timedelta(days=days), now


def window_series(
    observations: Iterable[Observation],
    time_window: TimeWindow | WindowPreset | str,
    now: datetime,
) -> list[Observation]:
    """
    Observations inside the window, oldest first.

    Bounds are inclusive. The sort is stable, so readings sharing a timestamp
    keep their input order. An empty result is not an error.
    """
    start, end = resolve_window(time_window, now)
    inside = [
        observation
        for observation in observations
        if (start is None or observation.recorded_at >= start)
        and (end is None or observation.recorded_at <= end)
    ]
    return sorted(inside, key=lambda observation: observation.recorded_at)


def calendar_day(moment: datetime) -> date:
    """Calendar date of a timestamp; aware timestamps are read in UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.date()
