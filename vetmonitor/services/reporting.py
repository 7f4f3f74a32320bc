"""
Patient report service that combines the analytics engine end to end.

Pipeline for one patient on one monitoring plan:
1. Fetch the plan's symptom schemas and each symptom's observations
2. Window every series against an explicit "now"
3. Summarize, compute progress, and audit history against current rules
4. Lay out a timeline and build the export table
"""

import asyncio
import time
from datetime import datetime

import structlog
from pydantic import BaseModel, ConfigDict, Field

from vetmonitor.config import AnalyticsConfig, get_config
from vetmonitor.domain.models import (
    NUMERIC_TYPES,
    MonitoringPlan,
    Observation,
    ProgressSnapshot,
    SymptomSchema,
    TimelineEvent,
    TimeWindow,
    WindowPreset,
)
from vetmonitor.services.export import ExportTable, serialize_for_export
from vetmonitor.services.recording import ObservationStore
from vetmonitor.services.statistics import (
    SymptomSummary,
    compute_progress,
    is_inverted_metric,
    plan_progress,
    summarize_series,
)
from vetmonitor.services.timeline import TimelineLayout, TimelineView, event_from_observation
from vetmonitor.services.validator import HistoryIssue, audit_history
from vetmonitor.services.windowing import window_series

logger = structlog.get_logger(__name__)


class SymptomReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    symptom: SymptomSchema
    summary: SymptomSummary
    progress: ProgressSnapshot | None = None
    history_issues: list[HistoryIssue] = Field(default_factory=list)


class PatientReport(BaseModel):
    """Everything presentation collaborators need for one patient's plan."""

    model_config = ConfigDict(frozen=True)

    patient_id: str
    monitoring_plan_id: str
    generated_at: datetime
    time_window: TimeWindow
    symptoms: list[SymptomReport]
    timeline: TimelineLayout
    export: ExportTable
    plan_progress: int | None = None


class PatientReportService:
    """Builds patient reports from an observation store."""

    def __init__(self, store: ObservationStore, config: AnalyticsConfig | None = None) -> None:
        self.store = store
        self.config = config or get_config().analytics
        self.logger = logger.bind(component="patient_report")

    def progress_for(
        self, schema: SymptomSchema, summary: SymptomSummary
    ) -> ProgressSnapshot | None:
        """Progress between the two most recent numeric readings, if there are two."""
        if schema.data_type not in NUMERIC_TYPES:
            return None
        if summary.latest is None or summary.previous is None:
            return None
        current, previous = summary.latest.as_number(), summary.previous.as_number()
        if current is None or previous is None:
            return None
        return compute_progress(
            current,
            previous,
            target=schema.target_value,
            is_inverted=is_inverted_metric(schema, self.config.inverted_keywords),
            thresholds=self.config.thresholds,
            unit=schema.units,
        )

    async def _fetch_series(
        self, patient_id: str, schemas: list[SymptomSchema]
    ) -> list[list[Observation]]:
        async with asyncio.TaskGroup() as task_group:
            tasks = [
                task_group.create_task(self.store.get_observations(patient_id, schema.id))
                for schema in schemas
            ]
        return [task.result() for task in tasks]

    async def build_report(
        self,
        patient_id: str,
        monitoring_plan_id: str,
        now: datetime,
        time_window: TimeWindow | WindowPreset | str | None = None,
        plan: MonitoringPlan | None = None,
    ) -> PatientReport:
        start_time = time.perf_counter()

        if time_window is None:
            time_window = TimeWindow.named(self.config.default_time_window)
        elif not isinstance(time_window, TimeWindow):
            time_window = TimeWindow.named(time_window)

        schemas = await self.store.get_symptom_schemas(monitoring_plan_id)
        all_series = await self._fetch_series(patient_id, schemas)

        symptom_reports: list[SymptomReport] = []
        export_pairs: list[tuple[SymptomSchema, list[Observation]]] = []
        events: list[TimelineEvent] = []
        for schema, series in zip(schemas, all_series, strict=True):
            windowed = window_series(series, time_window, now)
            summary = summarize_series(schema, windowed)
            symptom_reports.append(
                SymptomReport(
                    symptom=schema,
                    summary=summary,
                    progress=self.progress_for(schema, summary),
                    history_issues=audit_history(
                        schema,
                        series,
                        max_text_length=self.config.notes_max_length,
                        scale_default_min=self.config.scale_default_min,
                        scale_default_max=self.config.scale_default_max,
                    ),
                )
            )
            export_pairs.append((schema, windowed))
            events.extend(event_from_observation(o, schema) for o in windowed)

        view = TimelineView(
            reference_date=now,
            time_range=self.config.timeline_initial_range_days,
            min_time_range=self.config.timeline_min_range_days,
            max_time_range=self.config.timeline_max_range_days,
        )

        report = PatientReport(
            patient_id=patient_id,
            monitoring_plan_id=monitoring_plan_id,
            generated_at=now,
            time_window=time_window,
            symptoms=symptom_reports,
            timeline=view.layout(events),
            export=serialize_for_export(export_pairs, self.config.export_duplicate_policy),
            plan_progress=plan_progress(plan, now) if plan is not None else None,
        )

        self.logger.info(
            "report_built",
            patient_id=patient_id,
            monitoring_plan_id=monitoring_plan_id,
            symptoms=len(symptom_reports),
            observations=sum(r.summary.count for r in symptom_reports),
            history_issues=sum(len(r.history_issues) for r in symptom_reports),
            duration_seconds=round(time.perf_counter() - start_time, 3),
        )
        return report
