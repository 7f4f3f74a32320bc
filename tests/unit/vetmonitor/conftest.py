"""Shared fixtures for the observation engine tests."""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta

import pytest

from vetmonitor.config import get_config
from vetmonitor.domain.models import (
    NumericValue,
    Observation,
    ObservationValue,
    ScaleValue,
    SymptomDataType,
    SymptomSchema,
)

ObservationFactory = Callable[..., Observation]


@pytest.fixture(autouse=True)
def clear_config_cache() -> Iterator[None]:
    """Keep environment changes in one test from leaking through the config cache."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def pain_schema() -> SymptomSchema:
    return SymptomSchema(
        id="pain",
        monitoring_plan_id="plan-1",
        name="Pain Level",
        category="Pain Assessment",
        data_type=SymptomDataType.SCALE,
        min_value=0,
        max_value=10,
    )


@pytest.fixture
def temperature_schema() -> SymptomSchema:
    return SymptomSchema(
        id="temperature",
        monitoring_plan_id="plan-1",
        name="Temperature",
        data_type=SymptomDataType.NUMERIC,
        units="°C",
        min_value=35,
        max_value=43,
    )


@pytest.fixture
def make_observation(now: datetime) -> ObservationFactory:
    """Build observations `days_ago` before the test's fixed now."""

    def _make(
        value: float | ObservationValue,
        days_ago: float = 0,
        symptom_schema_id: str = "temperature",
        patient_id: str = "max",
        **kwargs: object,
    ) -> Observation:
        if isinstance(value, (int, float)):
            if symptom_schema_id == "pain":
                value = ScaleValue(value=value)
            else:
                value = NumericValue(value=value)
        return Observation(
            patient_id=patient_id,
            symptom_schema_id=symptom_schema_id,
            recorded_at=now - timedelta(days=days_ago),
            value=value,
            **kwargs,
        )

    return _make
