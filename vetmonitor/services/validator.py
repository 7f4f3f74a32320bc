"""
Observation validation.

Takes a raw value as received from the outer boundary (string, number or
boolean), checks it against a symptom schema and produces the normalized,
tagged value that gets stored.
"""

import math
from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from vetmonitor.domain.errors import ValidationError, ValidationRule
from vetmonitor.domain.models import (
    BooleanValue,
    EnumerationValue,
    ImageValue,
    NumericValue,
    Observation,
    ObservationValue,
    ScaleValue,
    SymptomDataType,
    SymptomSchema,
    TextValue,
)
from vetmonitor.services.schema import (
    SCALE_DEFAULT_MAX,
    SCALE_DEFAULT_MIN,
    check_schema,
    effective_bounds,
)

NOTES_MAX_LENGTH = 1000

RawValue = str | int | float | bool | None

_TRUE_STRINGS = {"true", "1"}
_FALSE_STRINGS = {"false", "0"}


def _is_blank(raw: RawValue) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _parse_number(raw: RawValue, field: str) -> float:
    if isinstance(raw, bool):
        raise ValidationError(ValidationRule.TYPE_MISMATCH, field, "Value must be a number")
    if isinstance(raw, (int, float)):
        try:
            number = float(raw)
        except OverflowError:
            raise ValidationError(
                ValidationRule.TYPE_MISMATCH, field, "Value must be a finite number"
            ) from None
    elif isinstance(raw, str):
        try:
            number = float(raw.strip())
        except ValueError:
            raise ValidationError(
                ValidationRule.TYPE_MISMATCH, field, f"'{raw}' is not a number"
            ) from None
    else:
        raise ValidationError(ValidationRule.TYPE_MISMATCH, field, "Value must be a number")

    if not math.isfinite(number):
        raise ValidationError(ValidationRule.TYPE_MISMATCH, field, "Value must be a finite number")
    return number


def _check_bounds(number: float, low: float | None, high: float | None, field: str) -> None:
    if low is not None and number < low:
        raise ValidationError(
            ValidationRule.OUT_OF_RANGE, field, f"Value must be at least {low:g}"
        )
    if high is not None and number > high:
        raise ValidationError(
            ValidationRule.OUT_OF_RANGE, field, f"Value must be at most {high:g}"
        )


def _parse_boolean(raw: RawValue, field: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValidationError(ValidationRule.TYPE_MISMATCH, field, "Value must be true or false")


def validate_value(
    schema: SymptomSchema,
    raw: RawValue,
    *,
    field: str = "value",
    max_text_length: int = NOTES_MAX_LENGTH,
    scale_default_min: float = SCALE_DEFAULT_MIN,
    scale_default_max: float = SCALE_DEFAULT_MAX,
) -> ObservationValue:
    """
    Validate a raw value against a schema and return the normalized value.

    Raises:
        ValidationError: the value breaks one of the schema's rules.
        ConfigurationError: the schema itself is inconsistent.
    """
    check_schema(schema)
    data_type = schema.data_type

    if data_type == SymptomDataType.TEXT:
        if raw is None:
            raise ValidationError(ValidationRule.REQUIRED, field, "A value is required")
        if not isinstance(raw, str):
            raise ValidationError(ValidationRule.TYPE_MISMATCH, field, "Value must be text")
        if len(raw) > max_text_length:
            raise ValidationError(
                ValidationRule.OUT_OF_RANGE,
                field,
                f"Text must be at most {max_text_length} characters",
            )
        return TextValue(value=raw)

    if _is_blank(raw):
        raise ValidationError(ValidationRule.REQUIRED, field, "A value is required")

    if data_type in (SymptomDataType.NUMERIC, SymptomDataType.SCALE):
        number = _parse_number(raw, field)
        low, high = effective_bounds(schema, scale_default_min, scale_default_max)
        _check_bounds(number, low, high, field)
        if data_type == SymptomDataType.SCALE:
            return ScaleValue(value=number)
        return NumericValue(value=number)

    if data_type == SymptomDataType.BOOLEAN:
        return BooleanValue(value=_parse_boolean(raw, field))

    if data_type == SymptomDataType.ENUMERATION:
        if not isinstance(raw, str) or raw not in schema.options:
            raise ValidationError(
                ValidationRule.NOT_IN_OPTIONS,
                field,
                f"Value must be one of: {', '.join(schema.options)}",
            )
        return EnumerationValue(value=raw)

    if data_type == SymptomDataType.IMAGE:
        if not isinstance(raw, str):
            raise ValidationError(
                ValidationRule.TYPE_MISMATCH, field, "Value must be an image reference"
            )
        return ImageValue(reference=raw.strip())

    raise ValidationError(
        ValidationRule.TYPE_MISMATCH, field, f"Unsupported data type: {data_type}"
    )


def validate_notes(notes: str | None, max_length: int = NOTES_MAX_LENGTH) -> str | None:
    if notes is not None and len(notes) > max_length:
        raise ValidationError(
            ValidationRule.OUT_OF_RANGE, "notes", f"Notes must be at most {max_length} characters"
        )
    return notes


def build_observation(
    schema: SymptomSchema,
    raw: RawValue,
    *,
    patient_id: str,
    recorded_at: datetime,
    notes: str | None = None,
    recorded_by: str | None = None,
    max_text_length: int = NOTES_MAX_LENGTH,
    scale_default_min: float = SCALE_DEFAULT_MIN,
    scale_default_max: float = SCALE_DEFAULT_MAX,
) -> Observation:
    """Validate a raw recording and wrap it into an Observation."""
    value = validate_value(
        schema,
        raw,
        max_text_length=max_text_length,
        scale_default_min=scale_default_min,
        scale_default_max=scale_default_max,
    )
    return Observation(
        patient_id=patient_id,
        monitoring_plan_id=schema.monitoring_plan_id,
        symptom_schema_id=schema.id,
        schema_version=schema.version,
        recorded_at=recorded_at,
        recorded_by=recorded_by,
        value=value,
        notes=validate_notes(notes, max_text_length),
    )


class HistoryIssue(BaseModel):
    """A stored observation that no longer conforms to its schema's current rules."""

    model_config = ConfigDict(frozen=True)

    observation_id: str
    schema_version: int
    current_version: int
    rule: str
    message: str


def _stored_raw(value: ObservationValue) -> RawValue:
    if isinstance(value, ImageValue):
        return value.reference
    return value.value


def audit_history(
    schema: SymptomSchema,
    observations: Iterable[Observation],
    max_text_length: int = NOTES_MAX_LENGTH,
    scale_default_min: float = SCALE_DEFAULT_MIN,
    scale_default_max: float = SCALE_DEFAULT_MAX,
) -> list[HistoryIssue]:
    """
    Re-validate stored observations against the schema as it stands now.

    Stored history is never rejected or modified; non-conforming observations
    are reported so the caller can flag them.
    """
    issues: list[HistoryIssue] = []
    for observation in observations:
        if observation.symptom_schema_id != schema.id:
            continue
        try:
            validate_value(
                schema,
                _stored_raw(observation.value),
                max_text_length=max_text_length,
                scale_default_min=scale_default_min,
                scale_default_max=scale_default_max,
            )
        except ValidationError as e:
            issues.append(
                HistoryIssue(
                    observation_id=observation.id,
                    schema_version=observation.schema_version,
                    current_version=schema.version,
                    rule=e.rule.value,
                    message=e.message,
                )
            )
    return issues
