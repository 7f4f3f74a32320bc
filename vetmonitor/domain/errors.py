"""
Domain errors raised by the observation engine.

Only two error kinds originate in the core. Everything else (empty series,
absent targets, zero baselines) is a defined edge case with a concrete result.
"""

from enum import Enum


class VetMonitorError(Exception):
    """Base class for all errors raised by vetmonitor."""


class ValidationRule(str, Enum):
    """Schema rule an observation value can violate."""

    OUT_OF_RANGE = "out_of_range"
    TYPE_MISMATCH = "type_mismatch"
    NOT_IN_OPTIONS = "not_in_options"
    REQUIRED = "required"


class ValidationError(VetMonitorError):
    """
    A raw value failed a schema rule.

    Deterministic and non-transient: the input itself is invalid, so callers
    surface the message to the user verbatim and never retry.
    """

    def __init__(self, rule: ValidationRule, field: str, message: str) -> None:
        super().__init__(message)
        self.rule = rule
        self.field = field
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"rule": self.rule.value, "field": self.field, "message": self.message}

    def __repr__(self) -> str:
        return (
            f"ValidationError(rule={self.rule.value!r}, field={self.field!r}, "
            f"message={self.message!r})"
        )


class ConfigurationError(VetMonitorError):
    """A symptom schema or alert threshold is internally inconsistent."""


class UnknownSchemaError(VetMonitorError, LookupError):
    """The requested symptom schema does not exist in the store."""
