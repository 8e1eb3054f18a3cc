"""OpenTelemetry provider setup for mockgen processes."""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass

from opentelemetry import metrics, trace
from opentelemetry.metrics import _internal as metrics_internal
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    InMemoryMetricReader,
    MetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from obs.otel.constants import instrumentation_version
from obs.otel.metrics import metric_views, reset_metrics_registry
from obs.otel.processors import RunIdSpanProcessor
from utils.env_utils import env_bool, env_value

_LOGGER = logging.getLogger(__name__)

TRACES_ENABLED_ENV = "MOCKGEN_OTEL_TRACES_ENABLED"
METRICS_ENABLED_ENV = "MOCKGEN_OTEL_METRICS_ENABLED"


@dataclass(frozen=True)
class OtelBootstrapOptions:
    """Overrides for ``configure_otel``; ``None`` defers to the environment."""

    service_version: str | None = None
    enable_traces: bool | None = None
    enable_metrics: bool | None = None
    metric_export_interval_ms: int | None = None
    test_mode: bool = False


@dataclass(frozen=True)
class OtelProviders:
    """Providers installed by ``configure_otel``.

    In test mode ``span_exporter`` and ``metric_reader`` hold the in-memory
    sinks; otherwise they are ``None`` and data leaves over OTLP.
    """

    resource: Resource
    tracer_provider: TracerProvider | None
    meter_provider: MeterProvider | None
    span_exporter: InMemorySpanExporter | None = None
    metric_reader: InMemoryMetricReader | None = None

    def shutdown(self) -> None:
        """Flush and stop the providers."""
        if self.tracer_provider is not None:
            self.tracer_provider.shutdown()
        if self.meter_provider is not None:
            self.meter_provider.shutdown()


_STATE: dict[str, OtelProviders | None] = {"providers": None}


def _otlp_over_http(signal: str) -> bool:
    protocol = env_value(f"OTEL_EXPORTER_OTLP_{signal}_PROTOCOL") or env_value(
        "OTEL_EXPORTER_OTLP_PROTOCOL"
    )
    return (protocol or "grpc").lower().startswith("http")


def _otlp_span_exporter() -> SpanExporter:
    if _otlp_over_http("TRACES"):
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        return OTLPSpanExporter()
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

    return OTLPSpanExporter()


def _otlp_metric_exporter() -> MetricExporter:
    if _otlp_over_http("METRICS"):
        from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter

        return OTLPMetricExporter()
    from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

    return OTLPMetricExporter()


def _enabled(override: bool | None, env_name: str) -> bool:
    if override is not None:
        return override
    if env_bool("OTEL_SDK_DISABLED", default=False):
        return False
    return env_bool(env_name, default=True)


def configure_otel(
    *,
    service_name: str | None = None,
    options: OtelBootstrapOptions | None = None,
) -> OtelProviders:
    """Install global tracer and meter providers.

    Later calls return the installed providers, except in test mode, which
    always replaces them with fresh in-memory ones. Export goes over OTLP,
    using HTTP when ``OTEL_EXPORTER_OTLP_PROTOCOL`` names an http protocol
    and gRPC otherwise.

    Returns
    -------
    OtelProviders
        The active providers.
    """
    resolved = options or OtelBootstrapOptions()
    if resolved.test_mode:
        reset_providers_for_tests()
    existing = _STATE["providers"]
    if existing is not None:
        return existing
    name = service_name or env_value("OTEL_SERVICE_NAME") or "mockgen"
    resource = Resource.create(
        {
            "service.name": name,
            "service.version": resolved.service_version or instrumentation_version(),
        }
    )
    tracer_provider: TracerProvider | None = None
    span_exporter: InMemorySpanExporter | None = None
    if _enabled(resolved.enable_traces, TRACES_ENABLED_ENV):
        tracer_provider = TracerProvider(resource=resource)
        tracer_provider.add_span_processor(RunIdSpanProcessor())
        if resolved.test_mode:
            span_exporter = InMemorySpanExporter()
            tracer_provider.add_span_processor(SimpleSpanProcessor(span_exporter))
        else:
            tracer_provider.add_span_processor(BatchSpanProcessor(_otlp_span_exporter()))
        trace.set_tracer_provider(tracer_provider)
    meter_provider: MeterProvider | None = None
    metric_reader: InMemoryMetricReader | None = None
    if _enabled(resolved.enable_metrics, METRICS_ENABLED_ENV):
        reader: MetricReader
        if resolved.test_mode:
            metric_reader = InMemoryMetricReader()
            reader = metric_reader
        else:
            reader = PeriodicExportingMetricReader(
                _otlp_metric_exporter(),
                export_interval_millis=resolved.metric_export_interval_ms,
            )
        meter_provider = MeterProvider(
            resource=resource,
            metric_readers=[reader],
            views=metric_views(),
        )
        metrics.set_meter_provider(meter_provider)
        reset_metrics_registry()
    providers = OtelProviders(
        resource=resource,
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
        span_exporter=span_exporter,
        metric_reader=metric_reader,
    )
    _STATE["providers"] = providers
    _LOGGER.info("OpenTelemetry configured for service %s", name)
    return providers


def reset_providers_for_tests() -> None:
    """Shut down the installed providers and clear the SDK's set-once guards."""
    providers = _STATE["providers"]
    if providers is not None:
        providers.shutdown()
    _STATE["providers"] = None
    for once in (
        getattr(trace, "_TRACER_PROVIDER_SET_ONCE", None),
        getattr(metrics_internal, "_METER_PROVIDER_SET_ONCE", None),
    ):
        if once is not None:
            with contextlib.suppress(AttributeError):
                once._done = False
    trace._TRACER_PROVIDER = None
    metrics_internal._METER_PROVIDER = None
    reset_metrics_registry()


__all__ = [
    "METRICS_ENABLED_ENV",
    "TRACES_ENABLED_ENV",
    "OtelBootstrapOptions",
    "OtelProviders",
    "configure_otel",
    "reset_providers_for_tests",
]
