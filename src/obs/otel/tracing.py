"""Stage spans for render runs."""

from __future__ import annotations

import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

from obs.otel.attributes import normalize_attributes
from obs.otel.constants import AttributeName, instrumentation_version
from obs.otel.metrics import record_stage_duration

_SLOW_STAGE_S = 5.0


@contextmanager
def stage_span(
    name: str,
    *,
    stage: str,
    scope_name: str,
    attributes: Mapping[str, object] | None = None,
) -> Iterator[Span]:
    """Run the block inside a span and record the stage duration metric.

    The span carries ``mockgen.stage``, the caller's attributes and, on exit,
    ``status`` and ``duration_s``. Stages slower than five seconds are flagged
    with ``mockgen.slow``. Exceptions are recorded, mark the span as an error
    and propagate.

    Yields
    ------
    Span
        The active span.
    """
    tracer = trace.get_tracer(scope_name, instrumentation_version())
    start_attrs = normalize_attributes(
        {AttributeName.STAGE_NAME.value: stage, **(attributes or {})}
    )
    start = time.monotonic()
    status = "ok"
    with tracer.start_as_current_span(
        name,
        attributes=start_attrs,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as exc:
            status = "error"
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, f"{type(exc).__name__}: {exc}"))
            raise
        finally:
            duration_s = time.monotonic() - start
            record_stage_duration(stage, duration_s, status=status)
            span.set_attributes(
                normalize_attributes(
                    {
                        "status": status,
                        "duration_s": duration_s,
                        "mockgen.slow": True if duration_s >= _SLOW_STAGE_S else None,
                    }
                )
            )


__all__ = ["stage_span"]
