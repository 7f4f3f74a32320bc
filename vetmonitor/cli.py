"""
Console demo of the full observation pipeline.

This script:
1. Seeds an in-memory store from the arthritis plan template
2. Records a week of observations (including one invalid reading)
3. Builds a patient report against a fixed "now"
4. Renders summaries, timeline, export table and alerts with rich

Run with: uv run vetmonitor-demo
"""

import asyncio
from datetime import UTC, datetime, timedelta

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adapters.templates.catalogue import create_arthritis_schemas
from vetmonitor.config import get_config
from vetmonitor.domain.models import (
    Alert,
    AlertSeverity,
    AlertThreshold,
    MonitoringPlan,
    WindowPreset,
)
from vetmonitor.log import configure_logging
from vetmonitor.services.export import to_csv
from vetmonitor.services.recording import InMemoryObservationStore, ObservationRecorder
from vetmonitor.services.reporting import PatientReport, PatientReportService
from vetmonitor.services.statistics import NOT_AVAILABLE

DEMO_PATIENT_ID = "max"

_SEVERITY_STYLES = {
    AlertSeverity.INFO: "cyan",
    AlertSeverity.WARNING: "yellow",
    AlertSeverity.CRITICAL: "red",
}

# (days before now, symptom name, raw value, notes)
_DEMO_READINGS: list[tuple[int, str, object, str | None]] = [
    (7, "Pain Level", 7, "Discomfort during examination"),
    (7, "Mobility Score", "POOR", "Difficulty walking, especially on inclines"),
    (7, "Limping", True, None),
    (7, "Daily Walk", 0.5, None),
    (5, "Pain Level", 6, None),
    (5, "Daily Walk", 1.0, None),
    (3, "Pain Level", 4, "Started arthritis medication"),
    (3, "Mobility Score", "FAIR", None),
    (3, "Limping", "false", None),
    (2, "Pain Level", 12, "Typo on the owner app"),
    (1, "Pain Level", 3, None),
    (1, "Mobility Score", "GOOD", "Climbed the stairs unaided"),
    (1, "Daily Walk", 2.5, None),
]


class _DemoClock:
    """Clock the demo moves by hand so readings land on past days."""

    def __init__(self, moment: datetime) -> None:
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment


async def seed_demo_store(
    now: datetime, console: Console | None = None
) -> tuple[InMemoryObservationStore, MonitoringPlan, list[Alert]]:
    """Create the demo plan and record its readings; returns the store, plan and alerts."""
    plan = MonitoringPlan(
        title="Canine arthritis management",
        start_date=now - timedelta(days=7),
        end_date=now + timedelta(days=77),
    )
    store = InMemoryObservationStore()
    schemas = {
        schema.name: store.add_schema(schema) for schema in create_arthritis_schemas(plan.id)
    }
    store.add_threshold(
        AlertThreshold(
            symptom_schema_id=schemas["Pain Level"].id,
            condition=">= 7",
            severity=AlertSeverity.CRITICAL,
            message="Severe pain reported",
        )
    )

    clock = _DemoClock(now)
    recorder = ObservationRecorder(store, clock=clock)
    for days_ago, name, raw_value, notes in _DEMO_READINGS:
        clock.moment = now - timedelta(days=days_ago)
        result = await recorder.record_observation(
            DEMO_PATIENT_ID,
            schemas[name].id,
            raw_value,  # type: ignore[arg-type]
            notes=notes,
            recorded_by="owner",
        )
        if result.is_err() and console is not None:
            error = result.unwrap_err()
            console.print(f"Rejected {name} reading {raw_value!r}: {error.message}", style="yellow")

    return store, plan, list(recorder.alert_history)


def render_report(
    report: PatientReport, console: Console, alerts: list[Alert] | None = None
) -> None:
    """Print a patient report as rich panels and tables."""
    window = report.time_window.preset.value if report.time_window.preset else "custom"
    header = f"Patient {report.patient_id}  |  window {window}"
    if report.plan_progress is not None:
        header += f"  |  plan {report.plan_progress}% elapsed"
    console.print(Panel(header, title="Patient Report", style="blue"))

    summary_table = Table(title="Symptoms")
    summary_table.add_column("Symptom", style="cyan")
    summary_table.add_column("Latest", style="green")
    summary_table.add_column("Previous")
    summary_table.add_column("Change")
    summary_table.add_column("Average")
    summary_table.add_column("Min")
    summary_table.add_column("Max")
    summary_table.add_column("Status", style="magenta")
    summary_table.add_column("Readings", justify="right")

    for symptom_report in report.symptoms:
        summary = symptom_report.summary
        figures = (
            summary.statistics.display(summary.units)
            if summary.statistics is not None
            else dict.fromkeys(("average", "min", "max"), NOT_AVAILABLE)
        )
        progress = symptom_report.progress
        summary_table.add_row(
            summary.name,
            summary.latest.display() if summary.latest is not None else NOT_AVAILABLE,
            summary.previous.display() if summary.previous is not None else NOT_AVAILABLE,
            f"{summary.change:+g}" if summary.change is not None else NOT_AVAILABLE,
            figures["average"],
            figures["min"],
            figures["max"],
            progress.status if progress is not None else NOT_AVAILABLE,
            str(summary.count),
        )
    console.print(summary_table)

    timeline_table = Table(title=f"Timeline (last {report.timeline.time_range:g} days)")
    timeline_table.add_column("Date", style="cyan")
    timeline_table.add_column("Symptom")
    timeline_table.add_column("Value", style="green")
    timeline_table.add_column("Severity")
    timeline_table.add_column("Position", justify="right")
    for positioned in report.timeline.positions:
        event = positioned.event
        timeline_table.add_row(
            event.date.date().isoformat(),
            event.category or "",
            str(event.value),
            event.severity.value if event.severity else "",
            f"{positioned.position:.1f}%",
        )
    console.print(timeline_table)

    export_table = Table(title="Export")
    for column in report.export.header:
        export_table.add_column(column)
    for row in report.export.rows:
        export_table.add_row(*row)
    console.print(export_table)

    for symptom_report in report.symptoms:
        for issue in symptom_report.history_issues:
            console.print(
                f"{symptom_report.summary.name}: observation {issue.observation_id} "
                f"no longer conforms ({issue.message})",
                style="yellow",
            )

    if alerts:
        for alert in alerts:
            console.print(
                f"[{alert.severity.value}] {alert.message} "
                f"(patient {alert.patient_id}, {alert.triggered_at.date().isoformat()})",
                style=_SEVERITY_STYLES[alert.severity],
                markup=False,
            )
    else:
        console.print("No alerts raised", style="green")


async def run_demo(
    console: Console, now: datetime | None = None, show_csv: bool = False
) -> PatientReport:
    """Seed, record, report and render; returns the built report."""
    now = now or datetime.now(UTC)
    store, plan, alerts = await seed_demo_store(now, console)

    service = PatientReportService(store)
    report = await service.build_report(
        DEMO_PATIENT_ID, plan.id, now, time_window=WindowPreset.LAST_30_DAYS, plan=plan
    )
    render_report(report, console, alerts)
    if show_csv:
        console.print(to_csv(report.export), markup=False, highlight=False)
    return report


def main() -> None:
    config = get_config()
    configure_logging(config.logging)
    asyncio.run(run_demo(Console(), show_csv=config.debug))


if __name__ == "__main__":
    main()
