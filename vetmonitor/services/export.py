"""
Export serializer.

Flattens several symptom series for one patient into a date-aligned table,
one row per calendar day and one column per symptom.
"""

import csv
import io
from collections.abc import Sequence
from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict

from vetmonitor.domain.models import Observation, SymptomSchema
from vetmonitor.services.windowing import calendar_day

DATE_HEADER = "Date"


class DuplicatePolicy(str, Enum):
    """Which reading fills a cell when a symptom has several on the same day."""

    FIRST = "first"  # earliest reading of the day
    LAST = "last"  # latest reading of the day


class ExportTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    header: list[str]
    rows: list[list[str]]


def _pick_by_day(
    observations: Sequence[Observation], policy: DuplicatePolicy
) -> dict[date, Observation]:
    picked: dict[date, Observation] = {}
    for observation in sorted(observations, key=lambda o: o.recorded_at):
        day = calendar_day(observation.recorded_at)
        if policy == DuplicatePolicy.LAST or day not in picked:
            picked[day] = observation
    return picked


def serialize_for_export(
    pairs: Sequence[tuple[SymptomSchema, Sequence[Observation]]],
    duplicate_policy: DuplicatePolicy | str = DuplicatePolicy.LAST,
) -> ExportTable:
    """
    Build the export table for one patient's symptom series.

    Rows cover the union of observation dates across all series, ascending.
    A symptom with no reading on a date leaves an empty cell.
    """
    policy = DuplicatePolicy(duplicate_policy)
    by_schema = [(schema, _pick_by_day(observations, policy)) for schema, observations in pairs]

    all_days = sorted({day for _, picked in by_schema for day in picked})

    header = [DATE_HEADER] + [schema.column_header for schema, _ in by_schema]
    rows = []
    for day in all_days:
        row = [day.isoformat()]
        for _, picked in by_schema:
            observation = picked.get(day)
            row.append(observation.value.display() if observation else "")
        rows.append(row)

    return ExportTable(header=header, rows=rows)


def to_csv(table: ExportTable) -> str:
    """Render the table as CSV text with standard quoting."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(table.header)
    writer.writerows(table.rows)
    return buffer.getvalue()


def to_records(table: ExportTable) -> list[dict[str, str]]:
    """One dict per row keyed by column header, for JSON export."""
    return [dict(zip(table.header, row, strict=True)) for row in table.rows]
