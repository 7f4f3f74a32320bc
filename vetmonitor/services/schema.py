"""
Symptom schema vocabulary.

`describe` tells validators and form-rendering collaborators what each data
type needs. `check_schema` is the authoring boundary: a schema that passes it
is internally consistent, so downstream code never has to guess.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict

from vetmonitor.domain.errors import ConfigurationError
from vetmonitor.domain.models import SymptomDataType, SymptomSchema

SCALE_DEFAULT_MIN = 1.0
SCALE_DEFAULT_MAX = 10.0


class SchemaRequirements(BaseModel):
    """What a data type needs from its schema definition."""

    model_config = ConfigDict(frozen=True)

    requires_units: bool
    requires_range: bool
    requires_options: bool


_REQUIREMENTS: dict[SymptomDataType, SchemaRequirements] = {
    SymptomDataType.NUMERIC: SchemaRequirements(
        requires_units=True, requires_range=False, requires_options=False
    ),
    SymptomDataType.SCALE: SchemaRequirements(
        requires_units=False, requires_range=True, requires_options=False
    ),
    SymptomDataType.ENUMERATION: SchemaRequirements(
        requires_units=False, requires_range=False, requires_options=True
    ),
    SymptomDataType.BOOLEAN: SchemaRequirements(
        requires_units=False, requires_range=False, requires_options=False
    ),
    SymptomDataType.TEXT: SchemaRequirements(
        requires_units=False, requires_range=False, requires_options=False
    ),
    SymptomDataType.IMAGE: SchemaRequirements(
        requires_units=False, requires_range=False, requires_options=False
    ),
}


def describe(data_type: SymptomDataType | str) -> SchemaRequirements:
    """Return the configuration a data type requires."""
    return _REQUIREMENTS[SymptomDataType(data_type)]


def effective_bounds(
    schema: SymptomSchema,
    scale_default_min: float = SCALE_DEFAULT_MIN,
    scale_default_max: float = SCALE_DEFAULT_MAX,
) -> tuple[float | None, float | None]:
    """
    Bounds the validator enforces for a schema.

    SCALE bounds are always enforced and fall back to the defaults per side;
    NUMERIC bounds apply only where set; other types have none.
    """
    if schema.data_type == SymptomDataType.SCALE:
        low = schema.min_value if schema.min_value is not None else scale_default_min
        high = schema.max_value if schema.max_value is not None else scale_default_max
        return low, high
    if schema.data_type == SymptomDataType.NUMERIC:
        return schema.min_value, schema.max_value
    return None, None


def check_schema(schema: SymptomSchema) -> SymptomSchema:
    """Raise ConfigurationError if the schema is internally inconsistent."""
    if (
        schema.min_value is not None
        and schema.max_value is not None
        and schema.min_value > schema.max_value
    ):
        raise ConfigurationError(
            f"Symptom '{schema.name}': min_value {schema.min_value} "
            f"exceeds max_value {schema.max_value}"
        )

    if schema.data_type == SymptomDataType.SCALE:
        low, high = effective_bounds(schema)
        if low is not None and high is not None and low > high:
            raise ConfigurationError(
                f"Symptom '{schema.name}': scale bounds resolve to an empty range [{low}, {high}]"
            )

    if describe(schema.data_type).requires_options and not schema.options:
        raise ConfigurationError(
            f"Symptom '{schema.name}': ENUMERATION schemas need at least one option"
        )
    if len(set(schema.options)) != len(schema.options):
        raise ConfigurationError(f"Symptom '{schema.name}': options must be unique")

    return schema


def revise_schema(schema: SymptomSchema, **changes: Any) -> SymptomSchema:
    """
    Return an edited copy of a schema with its version bumped.

    Observations keep the version they were validated against, so history
    recorded under older rules stays explainable.
    """
    changes.pop("id", None)
    changes.pop("version", None)
    revised = SymptomSchema.model_validate(
        {**schema.model_dump(), **changes, "version": schema.version + 1}
    )
    return check_schema(revised)
