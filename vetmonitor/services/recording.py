"""
Observation recording against an external observation store.

Key patterns:
- Protocol-based dependency injection for the persistence collaborator
- Generic Result type for expected failures (invalid input is not exceptional)
- Structured logging for every accepted or rejected recording
"""

import asyncio
from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Generic, Protocol, TypeVar

import structlog

from vetmonitor.config import AnalyticsConfig, get_config
from vetmonitor.domain.errors import UnknownSchemaError, ValidationError
from vetmonitor.domain.models import Alert, AlertThreshold, Observation, SymptomSchema
from vetmonitor.services.alerts import evaluate_thresholds, parse_condition
from vetmonitor.services.schema import check_schema
from vetmonitor.services.validator import RawValue, build_observation

logger = structlog.get_logger(__name__)

ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """
    Explicit error handling without exceptions for expected failures.

    A rejected recording is ordinary business logic: the caller shows the
    validation message and moves on, so it is returned rather than raised.
    """

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value: ValueT | None = value
        self._error: ErrorT | None = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error


class ObservationStore(Protocol):
    """
    Persistence collaborator that supplies schemas and observations.

    Transport and storage are out of scope; failures and latency here are the
    collaborator's concern and are propagated untouched.
    """

    async def get_observations(self, patient_id: str, symptom_schema_id: str) -> list[Observation]:
        ...

    async def get_symptom_schemas(self, monitoring_plan_id: str) -> list[SymptomSchema]:
        ...

    async def get_symptom_schema(self, symptom_schema_id: str) -> SymptomSchema | None:
        ...

    async def get_alert_thresholds(self, symptom_schema_id: str) -> list[AlertThreshold]:
        ...

    async def save_observation(self, observation: Observation) -> Observation:
        ...


class InMemoryObservationStore:
    """
    Dictionary-backed store for tests, demos and local tooling.

    In production this would be backed by the application's database layer.
    """

    def __init__(self) -> None:
        self._schemas: dict[str, SymptomSchema] = {}
        self._observations: list[Observation] = []
        self._thresholds: list[AlertThreshold] = []
        self._lock = asyncio.Lock()

    def add_schema(self, schema: SymptomSchema) -> SymptomSchema:
        """Register (or replace with a revision) a schema after checking it."""
        self._schemas[schema.id] = check_schema(schema)
        return schema

    def add_threshold(self, threshold: AlertThreshold) -> AlertThreshold:
        """Register a threshold; an unreadable condition raises ConfigurationError."""
        parse_condition(threshold.condition)
        self._thresholds.append(threshold)
        return threshold

    async def get_observations(self, patient_id: str, symptom_schema_id: str) -> list[Observation]:
        return [
            o
            for o in self._observations
            if o.patient_id == patient_id and o.symptom_schema_id == symptom_schema_id
        ]

    async def get_symptom_schemas(self, monitoring_plan_id: str) -> list[SymptomSchema]:
        return [s for s in self._schemas.values() if s.monitoring_plan_id == monitoring_plan_id]

    async def get_symptom_schema(self, symptom_schema_id: str) -> SymptomSchema | None:
        return self._schemas.get(symptom_schema_id)

    async def get_alert_thresholds(self, symptom_schema_id: str) -> list[AlertThreshold]:
        return [t for t in self._thresholds if t.symptom_schema_id == symptom_schema_id]

    async def save_observation(self, observation: Observation) -> Observation:
        async with self._lock:
            self._observations.append(observation)
        return observation


class ObservationRecorder:
    """
    Validates raw recordings and appends them to the store.

    Design principles:
    - Invalid values come back as Result.err, never as a stored observation
    - Unknown schemas and inconsistent schemas raise (caller or authoring bug)
    - Alert thresholds are checked for every accepted observation
    """

    def __init__(
        self,
        store: ObservationStore,
        config: AnalyticsConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        alert_handlers: list[Callable[[Alert], None]] | None = None,
    ) -> None:
        self.store = store
        self.config = config or get_config().analytics
        self.clock = clock or (lambda: datetime.now(UTC))
        self.alert_handlers = alert_handlers or []
        self.alert_history: deque[Alert] = deque(maxlen=1000)
        self.logger = logger.bind(component="observation_recorder")

    async def record_observation(
        self,
        patient_id: str,
        symptom_schema_id: str,
        raw_value: RawValue,
        notes: str | None = None,
        recorded_by: str | None = None,
    ) -> Result[Observation, ValidationError]:
        """Validate and store one observation."""
        schema = await self.store.get_symptom_schema(symptom_schema_id)
        if schema is None:
            raise UnknownSchemaError(f"Symptom schema {symptom_schema_id} not found")

        now = self.clock()
        try:
            observation = build_observation(
                schema,
                raw_value,
                patient_id=patient_id,
                recorded_at=now,
                notes=notes,
                recorded_by=recorded_by,
                max_text_length=self.config.notes_max_length,
                scale_default_min=self.config.scale_default_min,
                scale_default_max=self.config.scale_default_max,
            )
        except ValidationError as e:
            self.logger.warning(
                "observation_rejected",
                patient_id=patient_id,
                symptom_schema_id=symptom_schema_id,
                rule=e.rule.value,
                field=e.field,
            )
            return Result.err(e)

        # A malformed threshold must raise before the observation is stored.
        thresholds = await self.store.get_alert_thresholds(schema.id)
        alerts = evaluate_thresholds(observation, thresholds, now)

        saved = await self.store.save_observation(observation)
        self.logger.info(
            "observation_recorded",
            observation_id=saved.id,
            patient_id=patient_id,
            symptom_schema_id=symptom_schema_id,
            data_type=schema.data_type.value,
        )
        self.alert_history.extend(alerts)
        self._dispatch_alerts(alerts)

        return Result.ok(saved)

    def _dispatch_alerts(self, alerts: list[Alert]) -> None:
        for alert in alerts:
            for handler in self.alert_handlers:
                try:
                    handler(alert)
                except Exception as e:
                    self.logger.error(
                        "alert_dispatch_failed", error=str(e), threshold_id=alert.threshold_id
                    )
