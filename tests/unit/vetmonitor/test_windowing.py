"""Tests for time-series windowing in `vetmonitor/services/windowing.py`."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from vetmonitor.domain.models import NumericValue, Observation, TimeWindow, WindowPreset
from vetmonitor.services.windowing import calendar_day, resolve_window, window_series

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


def _reading(days_ago: float, value: float = 38.5) -> Observation:
    return Observation(
        patient_id="max",
        symptom_schema_id="temperature",
        recorded_at=NOW - timedelta(days=days_ago),
        value=NumericValue(value=value),
    )


class TestResolveWindow:
    def test_preset_ends_at_now(self) -> None:
        start, end = resolve_window(WindowPreset.LAST_7_DAYS, NOW)
        assert start == NOW - timedelta(days=7)
        assert end == NOW

    def test_preset_accepts_plain_string(self) -> None:
        assert resolve_window("90days", NOW) == (NOW - timedelta(days=90), NOW)

    def test_all_is_unbounded(self) -> None:
        assert resolve_window(WindowPreset.ALL, NOW) == (None, None)

    def test_explicit_range_is_used_as_is(self) -> None:
        window = TimeWindow.between(NOW - timedelta(days=3), None)
        assert resolve_window(window, NOW) == (NOW - timedelta(days=3), None)

    def test_unknown_preset_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            resolve_window("fortnight", NOW)


class TestTimeWindow:
    def test_preset_and_range_are_exclusive(self) -> None:
        with pytest.raises(ValueError, match="not both"):
            TimeWindow(preset=WindowPreset.ALL, start=NOW)

    def test_start_after_end_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="start must not be after"):
            TimeWindow.between(NOW, NOW - timedelta(days=1))


class TestWindowSeries:
    def test_filters_to_window_oldest_first(self) -> None:
        series = [_reading(1), _reading(10), _reading(3)]

        windowed = window_series(series, WindowPreset.LAST_7_DAYS, NOW)

        assert [o.recorded_at for o in windowed] == [
            NOW - timedelta(days=3),
            NOW - timedelta(days=1),
        ]

    def test_bounds_are_inclusive(self) -> None:
        series = [_reading(7), _reading(0)]
        assert len(window_series(series, WindowPreset.LAST_7_DAYS, NOW)) == 2

    def test_all_returns_everything(self) -> None:
        series = [_reading(400), _reading(1)]
        assert len(window_series(series, "all", NOW)) == 2

    def test_future_readings_fall_outside_presets(self) -> None:
        assert window_series([_reading(-1)], WindowPreset.LAST_30_DAYS, NOW) == []

    def test_empty_window_is_not_an_error(self) -> None:
        assert window_series([_reading(100)], WindowPreset.LAST_7_DAYS, NOW) == []

    def test_equal_timestamps_keep_input_order(self) -> None:
        first, second = _reading(2, value=38.0), _reading(2, value=39.0)
        windowed = window_series([first, second], WindowPreset.LAST_7_DAYS, NOW)
        assert windowed == [first, second]

    def test_explicit_window(self) -> None:
        window = TimeWindow.between(NOW - timedelta(days=5), NOW - timedelta(days=2))
        windowed = window_series([_reading(1), _reading(3), _reading(6)], window, NOW)
        assert [o.recorded_at for o in windowed] == [NOW - timedelta(days=3)]

    @given(
        days_ago=st.lists(st.floats(min_value=-30, max_value=120), max_size=20),
        preset=st.sampled_from(list(WindowPreset)),
    )
    def test_windowing_is_idempotent(self, days_ago: list[float], preset: WindowPreset) -> None:
        series = [_reading(d) for d in days_ago]
        once = window_series(series, preset, NOW)
        assert window_series(once, preset, NOW) == once


class TestCalendarDay:
    def test_naive_timestamp_keeps_its_date(self) -> None:
        assert calendar_day(datetime(2024, 3, 15, 23, 30)) == date(2024, 3, 15)

    def test_aware_timestamp_is_read_in_utc(self) -> None:
        evening_in_new_york = datetime(2024, 3, 15, 21, 0, tzinfo=timezone(timedelta(hours=-4)))
        assert calendar_day(evening_in_new_york) == date(2024, 3, 16)
