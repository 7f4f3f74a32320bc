"""
Tests for the timeline layout engine in `vetmonitor/services/timeline.py`.

Covers:
- Percentage positions at and between the window edges
- Zero-length windows, search filtering and same-day stacking
- Adaptive tick spacing
- Zoom clamping
- Projection of observations onto timeline events
"""

from datetime import UTC, datetime, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st

from vetmonitor.domain.models import (
    BooleanValue,
    EnumerationValue,
    EventSeverity,
    EventType,
    ImageValue,
    NumericValue,
    Observation,
    SymptomDataType,
    SymptomSchema,
    TimelineEvent,
)
from vetmonitor.services.timeline import (
    TimelineView,
    event_from_observation,
    layout_timeline,
    matches_search,
    severity_for,
    tick_interval_days,
    zoom_in,
    zoom_out,
)

REFERENCE = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


def _event(days_ago: float, **kwargs: object) -> TimelineEvent:
    fields: dict[str, object] = {"value": 5.0, **kwargs}
    moment = REFERENCE - timedelta(days=days_ago)
    return TimelineEvent(date=moment, **fields)  # type: ignore[arg-type]


class TestLayoutPositions:
    def test_window_edges_map_to_zero_and_hundred(self) -> None:
        layout = layout_timeline([_event(30), _event(0)], REFERENCE, 30)
        assert [p.position for p in layout.positions] == [0.0, 100.0]

    def test_midpoint(self) -> None:
        layout = layout_timeline([_event(15)], REFERENCE, 30)
        assert layout.positions[0].position == pytest.approx(50.0)

    def test_events_outside_window_are_hidden(self) -> None:
        layout = layout_timeline([_event(31), _event(-1), _event(3)], REFERENCE, 30)
        assert len(layout.positions) == 1

    def test_positions_are_in_date_order(self) -> None:
        layout = layout_timeline([_event(2), _event(20), _event(9)], REFERENCE, 30)
        positions = [p.position for p in layout.positions]
        assert positions == sorted(positions)

    def test_window_bounds_are_reported(self) -> None:
        layout = layout_timeline([], REFERENCE, 7)
        assert layout.window_start == REFERENCE - timedelta(days=7)
        assert layout.window_end == REFERENCE
        assert layout.positions == []

    def test_zero_range_still_lays_out(self) -> None:
        layout = layout_timeline([_event(0)], REFERENCE, 0)

        assert layout.positions[0].position == 0.0
        assert [tick.date for tick in layout.ticks] == [REFERENCE]

    def test_sub_day_range_divides_by_one_day(self) -> None:
        layout = layout_timeline([_event(0.25)], REFERENCE, 0.5)
        assert layout.positions[0].position == pytest.approx(25.0)

    def test_negative_range_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            layout_timeline([], REFERENCE, -1)

    @given(
        days_ago=st.lists(st.floats(min_value=-10, max_value=400), max_size=25),
        time_range=st.floats(min_value=0, max_value=365),
    )
    def test_positions_always_within_bounds(self, days_ago: list[float], time_range: float) -> None:
        layout = layout_timeline([_event(d) for d in days_ago], REFERENCE, time_range)
        assert all(0 <= p.position <= 100 for p in layout.positions)
        assert all(0 <= t.position <= 100 for t in layout.ticks)


class TestSearchAndGroups:
    def test_search_matches_notes_category_and_text_value(self) -> None:
        events = [
            _event(1, notes="Limping after walk"),
            _event(2, category="Mobility"),
            _event(3, value="Walked well"),
            _event(4, notes="Ate breakfast"),
        ]

        layout = layout_timeline(events, REFERENCE, 30, search_term="WALK")

        assert len(layout.positions) == 2
        assert {p.event.notes for p in layout.positions} == {"Limping after walk", None}

    def test_search_is_case_insensitive(self) -> None:
        assert matches_search(_event(1, category="Mobility"), "mobil")
        assert not matches_search(_event(1, value=7.0), "7")

    def test_same_day_events_stack(self) -> None:
        morning = TimelineEvent(date=datetime(2024, 3, 10, 8, tzinfo=UTC), value=4.0)
        evening = TimelineEvent(date=datetime(2024, 3, 10, 20, tzinfo=UTC), value=6.0)
        next_day = TimelineEvent(date=datetime(2024, 3, 11, 8, tzinfo=UTC), value=3.0)

        layout = layout_timeline([evening, next_day, morning], REFERENCE, 30)

        assert [p.stack_index for p in layout.positions] == [0, 1, 0]
        assert layout.groups["2024-03-10"] == [morning, evening]
        assert layout.groups["2024-03-11"] == [next_day]


class TestTicks:
    @pytest.mark.parametrize(
        ("window_days", "interval"), [(7, 1), (60, 1), (61, 7), (180, 7), (181, 30), (365, 30)]
    )
    def test_interval_grows_with_window(self, window_days: float, interval: int) -> None:
        assert tick_interval_days(window_days) == interval

    def test_daily_ticks_for_a_week(self) -> None:
        layout = layout_timeline([], REFERENCE, 7)
        assert len(layout.ticks) == 8
        assert layout.ticks[0].position == 0.0
        assert layout.ticks[-1].position == 100.0

    def test_monthly_ticks_for_a_year(self) -> None:
        layout = layout_timeline([], REFERENCE, 365)
        assert len(layout.ticks) == 13
        assert layout.ticks[1].date - layout.ticks[0].date == timedelta(days=30)


class TestZoom:
    def test_zoom_in_halves(self) -> None:
        assert zoom_in(30) == 15

    def test_zoom_in_stops_at_minimum(self) -> None:
        assert zoom_in(10) == 7

    def test_zoom_out_doubles_and_stops_at_maximum(self) -> None:
        assert zoom_out(90) == 180
        assert zoom_out(300) == 365

    def test_repeated_zoom_in_converges_to_minimum(self) -> None:
        view = TimelineView(reference_date=REFERENCE, time_range=365)
        for _ in range(10):
            view = view.zoom_in()
        assert view.time_range == 7

    def test_view_is_immutable(self) -> None:
        view = TimelineView(reference_date=REFERENCE)
        zoomed = view.zoom_out()
        assert view.time_range == 30
        assert zoomed.time_range == 60

    def test_view_layout_uses_its_range(self) -> None:
        view = TimelineView(reference_date=REFERENCE, time_range=14)
        layout = view.layout([_event(20), _event(10)])
        assert len(layout.positions) == 1
        assert layout.time_range == 14


class TestEventProjection:
    @pytest.mark.parametrize(
        ("value", "severity"),
        [
            (8, EventSeverity.HIGH),
            (7, EventSeverity.MEDIUM),
            (5, EventSeverity.MEDIUM),
            (4, EventSeverity.LOW),
            (None, EventSeverity.MEDIUM),
        ],
    )
    def test_severity_bands(self, value: float | None, severity: EventSeverity) -> None:
        assert severity_for(value) == severity

    def test_numeric_observation(self) -> None:
        schema = SymptomSchema(
            id="temperature", name="Temperature", data_type=SymptomDataType.NUMERIC, units="°C"
        )
        observation = Observation(
            patient_id="max",
            symptom_schema_id="temperature",
            recorded_at=REFERENCE,
            value=NumericValue(value=39.5),
            notes="Warm ears",
        )

        event = event_from_observation(observation, schema)

        assert event.id == observation.id
        assert event.type == EventType.OBSERVATION
        assert event.value == 39.5
        assert event.severity == EventSeverity.HIGH
        assert event.category == "Temperature"
        assert event.notes == "Warm ears"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (BooleanValue(value=True), True),
            (EnumerationValue(value="GOOD"), "GOOD"),
            (ImageValue(reference="uploads/incision.jpg"), "uploads/incision.jpg"),
        ],
    )
    def test_non_numeric_observations_are_medium(
        self, value: BooleanValue | EnumerationValue | ImageValue, expected: object
    ) -> None:
        observation = Observation(
            patient_id="max", symptom_schema_id="x", recorded_at=REFERENCE, value=value
        )

        event = event_from_observation(observation)

        assert event.value == expected
        assert event.severity == EventSeverity.MEDIUM
        assert event.category is None
