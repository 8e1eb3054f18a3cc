"""Log records stamped with the active trace and span ids."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from opentelemetry import trace

from utils.env_utils import env_value

if TYPE_CHECKING:

    class _TraceRecord(logging.LogRecord):
        trace_id: str | None
        span_id: str | None


TRACE_LOG_FORMAT = (
    "%(asctime)s %(levelname)s [trace_id=%(trace_id)s span_id=%(span_id)s] %(name)s: %(message)s"
)
LOG_LEVEL_ENV = "MOCKGEN_LOG_LEVEL"


class TraceContextFilter(logging.Filter):
    """Copy the current span's ids onto each record passing through."""

    @staticmethod
    def filter(record: logging.LogRecord) -> bool:
        """Set ``trace_id`` and ``span_id``, or ``None`` outside a valid span.

        Returns
        -------
        bool
            Always True; the filter never drops records.
        """
        span_context = trace.get_current_span().get_span_context()
        stamped = cast("_TraceRecord", record)
        if span_context is not None and span_context.is_valid:
            stamped.trace_id = format(span_context.trace_id, "032x")
            stamped.span_id = format(span_context.span_id, "016x")
        else:
            stamped.trace_id = None
            stamped.span_id = None
        return True


class TraceContextFormatter(logging.Formatter):
    """Formatter for ``TRACE_LOG_FORMAT`` that tolerates unstamped records."""

    def format(self, record: logging.LogRecord) -> str:
        for field in ("trace_id", "span_id"):
            if not hasattr(record, field):
                setattr(record, field, None)
        return super().format(record)


def _handlers_of(target: logging.Logger, fmt: str) -> list[logging.Handler]:
    # Logger-level filters skip records propagated from child loggers, so a
    # handler is created when the target has none.
    if not target.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(TraceContextFormatter(fmt))
        target.addHandler(handler)
    return list(target.handlers)


def apply_trace_context_formatter(
    logger: logging.Logger | None = None,
    *,
    fmt: str | None = None,
) -> None:
    """Give every handler of ``logger`` (root by default) a trace-aware formatter."""
    layout = fmt or TRACE_LOG_FORMAT
    for handler in _handlers_of(logger or logging.getLogger(), layout):
        handler.setFormatter(TraceContextFormatter(layout))


def install_trace_context_filter(logger: logging.Logger | None = None) -> None:
    """Add a ``TraceContextFilter`` to each handler of ``logger`` lacking one."""
    for handler in _handlers_of(logger or logging.getLogger(), TRACE_LOG_FORMAT):
        if not any(isinstance(item, TraceContextFilter) for item in handler.filters):
            handler.addFilter(TraceContextFilter())


def configure_logging(logger: logging.Logger | None = None, *, level: str | None = None) -> None:
    """Set up trace-correlated output on ``logger``.

    Parameters
    ----------
    logger
        Logger to configure; the root logger when omitted.
    level
        Level name; falls back to ``MOCKGEN_LOG_LEVEL`` and then ``INFO``.
    """
    target = logger or logging.getLogger()
    apply_trace_context_formatter(target)
    install_trace_context_filter(target)
    target.setLevel((level or env_value(LOG_LEVEL_ENV) or "INFO").upper())


__all__ = [
    "LOG_LEVEL_ENV",
    "TRACE_LOG_FORMAT",
    "TraceContextFilter",
    "TraceContextFormatter",
    "apply_trace_context_formatter",
    "configure_logging",
    "install_trace_context_filter",
]
