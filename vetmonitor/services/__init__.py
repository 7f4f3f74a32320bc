"""
Core services for the observation engine.

This package contains the schema vocabulary, value validation, windowing,
statistics, timeline layout and export, plus the recording and reporting
services that wire them to an observation store.
"""

from .export import DuplicatePolicy, ExportTable, serialize_for_export, to_csv, to_records
from .recording import InMemoryObservationStore, ObservationRecorder, ObservationStore, Result
from .reporting import PatientReport, PatientReportService
from .schema import check_schema, describe, effective_bounds, revise_schema
from .statistics import compute_progress, compute_statistics, summarize_series
from .timeline import TimelineView, layout_timeline, zoom_in, zoom_out
from .validator import audit_history, validate_value
from .windowing import resolve_window, window_series

__all__ = [
    "DuplicatePolicy",
    "ExportTable",
    "InMemoryObservationStore",
    "ObservationRecorder",
    "ObservationStore",
    "PatientReport",
    "PatientReportService",
    "Result",
    "TimelineView",
    "audit_history",
    "check_schema",
    "compute_progress",
    "compute_statistics",
    "describe",
    "effective_bounds",
    "layout_timeline",
    "resolve_window",
    "revise_schema",
    "serialize_for_export",
    "summarize_series",
    "to_csv",
    "to_records",
    "validate_value",
    "window_series",
    "zoom_in",
    "zoom_out",
]
