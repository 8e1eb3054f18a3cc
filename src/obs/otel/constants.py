"""Telemetry names used by mockgen spans and metrics."""

from __future__ import annotations

from enum import StrEnum
from functools import cache
from importlib.metadata import PackageNotFoundError, version

from utils.env_utils import env_value


class MetricName(StrEnum):
    """Instruments recorded while rendering mocks."""

    STAGE_DURATION = "mockgen.stage.duration"
    TASK_DURATION = "mockgen.task.duration"
    ARTIFACT_COUNT = "mockgen.artifact.count"
    ERROR_COUNT = "mockgen.error.count"


class AttributeName(StrEnum):
    """Attribute keys shared by spans and metric points."""

    RUN_ID = "mockgen.run_id"
    STAGE_NAME = "mockgen.stage"
    STAGE = "stage"
    STATUS = "status"
    TASK_KIND = "task_kind"
    ARTIFACT_KIND = "artifact_kind"
    ERROR_TYPE = "error_type"


class ScopeName(StrEnum):
    """Instrumentation scopes."""

    RENDER = "mockgen.render"
    METRICS = "mockgen.metrics"


@cache
def instrumentation_version() -> str:
    """Return the version reported on scopes and the service resource.

    ``MOCKGEN_SERVICE_VERSION`` overrides the installed distribution version.

    Returns
    -------
    str
        Version string, ``"unknown"`` when mockgen is not installed.
    """
    override = env_value("MOCKGEN_SERVICE_VERSION")
    if override:
        return override
    try:
        return version("mockgen")
    except PackageNotFoundError:
        return "unknown"


__all__ = ["AttributeName", "MetricName", "ScopeName", "instrumentation_version"]
