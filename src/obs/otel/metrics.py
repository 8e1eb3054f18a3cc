"""Metric instruments for render runs."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass

from opentelemetry import metrics
from opentelemetry.sdk.metrics.view import ExplicitBucketHistogramAggregation, View

from obs.otel.attributes import normalize_attributes
from obs.otel.constants import AttributeName, MetricName, ScopeName, instrumentation_version

# Render tasks are sub-millisecond to a few seconds.
_DURATION_BUCKETS_S = (0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0)


@dataclass(frozen=True)
class _Instruments:
    stage_duration: metrics.Histogram
    task_duration: metrics.Histogram
    artifact_count: metrics.Counter
    error_count: metrics.Counter


_LOCK = threading.Lock()
_CACHE: dict[str, _Instruments | None] = {"instruments": None}


def metric_views() -> list[View]:
    """Return views that bound histogram buckets and the kept attribute keys.

    Returns
    -------
    list[View]
        One view per mockgen instrument.
    """
    buckets = ExplicitBucketHistogramAggregation(list(_DURATION_BUCKETS_S))
    run_id = AttributeName.RUN_ID.value
    status = AttributeName.STATUS.value
    return [
        View(
            instrument_name=MetricName.STAGE_DURATION,
            aggregation=buckets,
            attribute_keys={run_id, AttributeName.STAGE.value, status},
        ),
        View(
            instrument_name=MetricName.TASK_DURATION,
            aggregation=buckets,
            attribute_keys={run_id, AttributeName.TASK_KIND.value, status},
        ),
        View(
            instrument_name=MetricName.ARTIFACT_COUNT,
            attribute_keys={run_id, AttributeName.ARTIFACT_KIND.value, status},
        ),
        View(
            instrument_name=MetricName.ERROR_COUNT,
            attribute_keys={run_id, AttributeName.STAGE.value, AttributeName.ERROR_TYPE.value},
        ),
    ]


def reset_metrics_registry() -> None:
    """Forget cached instruments so the next record binds the current provider."""
    with _LOCK:
        _CACHE["instruments"] = None


def _instruments() -> _Instruments:
    with _LOCK:
        cached = _CACHE["instruments"]
        if cached is not None:
            return cached
        meter = metrics.get_meter(ScopeName.METRICS, instrumentation_version())
        created = _Instruments(
            stage_duration=meter.create_histogram(
                MetricName.STAGE_DURATION,
                unit="s",
                description="Wall time of a render stage.",
            ),
            task_duration=meter.create_histogram(
                MetricName.TASK_DURATION,
                unit="s",
                description="Wall time of rendering one entity.",
            ),
            artifact_count=meter.create_counter(
                MetricName.ARTIFACT_COUNT,
                unit="1",
                description="Mocks rendered, skipped or failed.",
            ),
            error_count=meter.create_counter(
                MetricName.ERROR_COUNT,
                unit="1",
                description="Entities whose render raised.",
            ),
        )
        _CACHE["instruments"] = created
        return created


def _point(base: Mapping[str, object], extra: Mapping[str, object] | None) -> dict[str, object]:
    return {**base, **(extra or {})}


def record_stage_duration(
    stage: str,
    duration_s: float,
    *,
    status: str,
    attributes: Mapping[str, object] | None = None,
) -> None:
    """Record how long a stage took."""
    payload = _point(
        {AttributeName.STAGE.value: stage, AttributeName.STATUS.value: status}, attributes
    )
    _instruments().stage_duration.record(
        duration_s, normalize_attributes(payload, with_run_id=True)
    )


def record_task_duration(
    task_kind: str,
    duration_s: float,
    *,
    status: str,
    attributes: Mapping[str, object] | None = None,
) -> None:
    """Record how long one task took."""
    payload = _point(
        {AttributeName.TASK_KIND.value: task_kind, AttributeName.STATUS.value: status},
        attributes,
    )
    _instruments().task_duration.record(
        duration_s, normalize_attributes(payload, with_run_id=True)
    )


def record_artifact_count(
    artifact_kind: str,
    *,
    status: str,
    count: int = 1,
    attributes: Mapping[str, object] | None = None,
) -> None:
    """Add ``count`` artifacts with the given status; zero counts are not recorded."""
    if count <= 0:
        return
    payload = _point(
        {AttributeName.ARTIFACT_KIND.value: artifact_kind, AttributeName.STATUS.value: status},
        attributes,
    )
    _instruments().artifact_count.add(count, normalize_attributes(payload, with_run_id=True))


def record_error(
    stage: str,
    error_type: str,
    *,
    attributes: Mapping[str, object] | None = None,
) -> None:
    """Count one error raised during ``stage``."""
    payload = _point(
        {AttributeName.STAGE.value: stage, AttributeName.ERROR_TYPE.value: error_type},
        attributes,
    )
    _instruments().error_count.add(1, normalize_attributes(payload, with_run_id=True))


__all__ = [
    "metric_views",
    "record_artifact_count",
    "record_error",
    "record_stage_duration",
    "record_task_duration",
    "reset_metrics_registry",
]
