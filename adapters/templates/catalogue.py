"""
Monitoring-plan templates for common veterinary cases.

This shows how a practice builds on the core observation engine:
- Ready-made symptom schemas per case type
- Alert thresholds that go with them
- Conventions such as lower-is-better pain scores and target values

Key clinical conventions:
- Pain and swelling are scored 0-10, where lower is better
- Rectal temperature for dogs and cats is normally 38.0-39.2 C
- Mobility uses a four-step owner-friendly scale
"""

from collections.abc import Callable

from vetmonitor.domain.models import (
    AlertSeverity,
    AlertThreshold,
    SymptomDataType,
    SymptomSchema,
)
from vetmonitor.services.schema import check_schema

MOBILITY_OPTIONS = ("POOR", "FAIR", "GOOD", "EXCELLENT")
APPETITE_OPTIONS = ("NONE", "REDUCED", "NORMAL", "INCREASED")


def create_arthritis_schemas(monitoring_plan_id: str) -> list[SymptomSchema]:
    """Create symptom schemas for a chronic arthritis plan."""

    schemas = [
        SymptomSchema(
            monitoring_plan_id=monitoring_plan_id,
            name="Pain Level",
            description="Observed pain level during activity",
            category="Pain Assessment",
            data_type=SymptomDataType.SCALE,
            min_value=0,
            max_value=10,
            lower_is_better=True,
            target_value=2,
        ),
        SymptomSchema(
            monitoring_plan_id=monitoring_plan_id,
            name="Mobility Score",
            description="Overall mobility assessment",
            category="Mobility",
            data_type=SymptomDataType.ENUMERATION,
            options=MOBILITY_OPTIONS,
        ),
        SymptomSchema(
            monitoring_plan_id=monitoring_plan_id,
            name="Limping",
            description="Visible limp on a short walk",
            category="Mobility",
            data_type=SymptomDataType.BOOLEAN,
        ),
        SymptomSchema(
            monitoring_plan_id=monitoring_plan_id,
            name="Daily Walk",
            description="Distance walked comfortably",
            category="Activity",
            data_type=SymptomDataType.NUMERIC,
            units="km",
            min_value=0,
            max_value=30,
            target_value=3,
        ),
    ]
    return [check_schema(schema) for schema in schemas]


def create_post_surgical_schemas(monitoring_plan_id: str) -> list[SymptomSchema]:
    """Create symptom schemas for post-operative recovery at home."""

    schemas = [
        SymptomSchema(
            monitoring_plan_id=monitoring_plan_id,
            name="Body Temperature",
            description="Rectal temperature",
            category="Vitals",
            data_type=SymptomDataType.NUMERIC,
            units="°C",
            min_value=35,
            max_value=43,
            lower_is_better=False,
            target_value=38.5,
        ),
        SymptomSchema(
            monitoring_plan_id=monitoring_plan_id,
            name="Incision Swelling",
            description="Swelling around the incision site",
            category="Wound Care",
            data_type=SymptomDataType.SCALE,
            min_value=0,
            max_value=10,
            target_value=0,
        ),
        SymptomSchema(
            monitoring_plan_id=monitoring_plan_id,
            name="Appetite",
            category="General",
            data_type=SymptomDataType.ENUMERATION,
            options=APPETITE_OPTIONS,
        ),
        SymptomSchema(
            monitoring_plan_id=monitoring_plan_id,
            name="Incision Photo",
            category="Wound Care",
            data_type=SymptomDataType.IMAGE,
        ),
        SymptomSchema(
            monitoring_plan_id=monitoring_plan_id,
            name="Owner Notes",
            category="General",
            data_type=SymptomDataType.TEXT,
        ),
    ]
    return [check_schema(schema) for schema in schemas]


def create_post_surgical_thresholds(schemas: list[SymptomSchema]) -> list[AlertThreshold]:
    """Create alert thresholds for the post-surgical schemas that have them."""

    by_name = {schema.name: schema for schema in schemas}
    thresholds: list[AlertThreshold] = []

    if "Body Temperature" in by_name:
        schema_id = by_name["Body Temperature"].id
        thresholds += [
            AlertThreshold(
                symptom_schema_id=schema_id,
                condition="> 39.5",
                severity=AlertSeverity.WARNING,
                message="Temperature above normal range",
            ),
            AlertThreshold(
                symptom_schema_id=schema_id,
                condition=">= 40.5",
                severity=AlertSeverity.CRITICAL,
                message="High fever, contact the clinic",
            ),
        ]
    if "Incision Swelling" in by_name:
        thresholds.append(
            AlertThreshold(
                symptom_schema_id=by_name["Incision Swelling"].id,
                condition=">= 7",
                severity=AlertSeverity.WARNING,
                message="Marked swelling at the incision",
            )
        )
    if "Appetite" in by_name:
        thresholds.append(
            AlertThreshold(
                symptom_schema_id=by_name["Appetite"].id,
                condition="= NONE",
                severity=AlertSeverity.INFO,
                message="Patient is not eating",
            )
        )
    return thresholds


TEMPLATES: dict[str, Callable[[str], list[SymptomSchema]]] = {
    "arthritis": create_arthritis_schemas,
    "post_surgical": create_post_surgical_schemas,
}


def create_schemas(template: str, monitoring_plan_id: str) -> list[SymptomSchema]:
    """Create the symptom schemas of a named template."""
    try:
        factory = TEMPLATES[template]
    except KeyError:
        raise LookupError(
            f"Unknown template {template!r}; expected one of {sorted(TEMPLATES)}"
        ) from None
    return factory(monitoring_plan_id)
