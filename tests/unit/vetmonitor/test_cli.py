"""Tests for the rich console demo in `vetmonitor/cli.py`."""

from datetime import datetime

from rich.console import Console

from vetmonitor.cli import DEMO_PATIENT_ID, render_report, run_demo, seed_demo_store
from vetmonitor.domain.models import AlertSeverity


def _console() -> Console:
    return Console(record=True, width=160, color_system=None)


async def test_seeded_store_skips_the_invalid_reading(now: datetime) -> None:
    console = _console()

    store, plan, alerts = await seed_demo_store(now, console)

    schemas = await store.get_symptom_schemas(plan.id)
    pain = next(s for s in schemas if s.name == "Pain Level")
    assert len(await store.get_observations(DEMO_PATIENT_ID, pain.id)) == 4
    assert "Rejected Pain Level reading 12" in console.export_text()
    assert [a.severity for a in alerts] == [AlertSeverity.CRITICAL]


async def test_demo_report_renders_every_section(now: datetime) -> None:
    console = _console()

    report = await run_demo(console, now=now, show_csv=True)

    text = console.export_text()
    assert "Patient Report" in text
    assert "Symptoms" in text
    assert "Timeline" in text
    assert "Export" in text
    assert "Severe pain reported" in text
    assert "Significant Improvement" in text
    assert "Date,Pain Level,Mobility Score,Limping,Daily Walk (km)" in text
    assert report.plan_progress == 8


async def test_render_without_alerts(now: datetime) -> None:
    console = _console()
    report = await run_demo(_console(), now=now)

    render_report(report, console)

    assert "No alerts raised" in console.export_text()
