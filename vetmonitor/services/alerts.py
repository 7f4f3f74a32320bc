"""
Alert threshold evaluation.

Thresholds are authored as short conditions such as "> 39.5", "<= 2" or
"= SEVERE". A recorded observation that satisfies a condition produces an
Alert carrying the threshold's severity and message.
"""

import operator
import re
from collections.abc import Callable, Iterable
from datetime import datetime

import structlog
from pydantic import BaseModel, ConfigDict

from vetmonitor.domain.errors import ConfigurationError
from vetmonitor.domain.models import Alert, AlertThreshold, Observation

logger = structlog.get_logger(__name__)

_CONDITION = re.compile(r"^\s*(>=|<=|!=|==|=|>|<)\s*(.+?)\s*$")

_OPERATORS: dict[str, Callable[[object, object], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "=": operator.eq,
    "==": operator.eq,
    "!=": operator.ne,
}
_ORDERING = {">", ">=", "<", "<="}


class Condition(BaseModel):
    """Parsed threshold condition."""

    model_config = ConfigDict(frozen=True)

    op: str
    operand: float | str

    def matches(self, value: float | str | None) -> bool:
        if value is None:
            return False
        compare = _OPERATORS[self.op]
        if isinstance(self.operand, float):
            if isinstance(value, str):
                return False
            return compare(float(value), self.operand)
        if self.op in _ORDERING:
            return False
        return compare(str(value), self.operand)


def parse_condition(condition: str) -> Condition:
    """Parse "<op> <operand>"; raises ConfigurationError for anything else."""
    match = _CONDITION.match(condition)
    if match is None:
        raise ConfigurationError(f"Unreadable alert condition: {condition!r}")

    op, raw_operand = match.groups()
    try:
        operand: float | str = float(raw_operand)
    except ValueError:
        if op in _ORDERING:
            raise ConfigurationError(
                f"Alert condition {condition!r} orders against a non-numeric operand"
            ) from None
        operand = raw_operand.strip("\"'")
    return Condition(op=op, operand=operand)


def _comparable(observation: Observation) -> float | str | None:
    # Booleans compare as "true"/"false" so "= true" reads naturally
    if observation.value.kind == "boolean":
        return observation.value.display()
    number = observation.value.as_number()
    if number is not None:
        return number
    return observation.value.display()


def evaluate_thresholds(
    observation: Observation,
    thresholds: Iterable[AlertThreshold],
    now: datetime,
) -> list[Alert]:
    """Alerts raised by an observation against its symptom's thresholds."""
    value = _comparable(observation)
    alerts: list[Alert] = []
    for threshold in thresholds:
        if threshold.symptom_schema_id != observation.symptom_schema_id:
            continue
        if not parse_condition(threshold.condition).matches(value):
            continue

        alerts.append(
            Alert(
                threshold_id=threshold.id,
                observation_id=observation.id,
                patient_id=observation.patient_id,
                severity=threshold.severity,
                message=threshold.message,
                triggered_at=now,
            )
        )
        logger.info(
            "alert_triggered",
            threshold_id=threshold.id,
            observation_id=observation.id,
            patient_id=observation.patient_id,
            severity=threshold.severity.value,
        )
    return alerts
