"""Span processor stamping the run id onto spans."""

from __future__ import annotations

from opentelemetry.context import Context
from opentelemetry.sdk.trace import ReadableSpan, Span, SpanProcessor

from obs.otel.constants import AttributeName
from obs.otel.run_context import get_run_id


class RunIdSpanProcessor(SpanProcessor):
    """Copy the context's run id onto each span as it starts."""

    def on_start(self, span: Span, parent_context: Context | None = None) -> None:
        _ = parent_context
        run_id = get_run_id()
        if run_id:
            span.set_attribute(AttributeName.RUN_ID.value, run_id)

    def on_end(self, span: ReadableSpan) -> None:
        _ = span

    def shutdown(self) -> None:
        return None

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        _ = timeout_millis
        return True


__all__ = ["RunIdSpanProcessor"]
