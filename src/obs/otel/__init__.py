"""OpenTelemetry tracing, metrics and log correlation for mockgen."""

from __future__ import annotations

from obs.otel.bootstrap import OtelBootstrapOptions, OtelProviders, configure_otel
from obs.otel.constants import ScopeName
from obs.otel.logging import configure_logging
from obs.otel.metrics import (
    record_artifact_count,
    record_error,
    record_stage_duration,
    record_task_duration,
)
from obs.otel.run_context import get_run_id, reset_run_id, set_run_id
from obs.otel.tracing import stage_span

__all__ = [
    "OtelBootstrapOptions",
    "OtelProviders",
    "ScopeName",
    "configure_logging",
    "configure_otel",
    "get_run_id",
    "record_artifact_count",
    "record_error",
    "record_stage_duration",
    "record_task_duration",
    "reset_run_id",
    "set_run_id",
    "stage_span",
]
