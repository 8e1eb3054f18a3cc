"""Render dispatch for resolved entities.

Entities render on worker threads; outcomes flow back through the executor's
completion queue and are drained on the calling thread, which is the only
thread that ever invokes the completion callback.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import partial

from mockgen.contracts import (
    Failed,
    RenderCompletion,
    RenderOutcome,
    RenderReport,
    Rendered,
    ResolvedEntity,
    Skipped,
)
from mockgen.options import RenderOptions, dispatch_options_from_env, normalize_render_options
from mockgen.scan import gil_disabled, resolve_max_workers, scan
from obs.otel.constants import ScopeName
from obs.otel.metrics import record_artifact_count, record_error, record_task_duration
from obs.otel.tracing import stage_span

logger = logging.getLogger(__name__)


@dataclass
class _RenderRunState:
    delivered: int = 0
    skipped: list[str] = field(default_factory=list)
    failures: list[Failed] = field(default_factory=list)


def _entity_key(entity: ResolvedEntity) -> str:
    try:
        return str(entity.key)
    except Exception:  # noqa: BLE001 - a broken key must not abort the batch
        return repr(entity)


def render_entity(entity: ResolvedEntity, options: RenderOptions) -> RenderOutcome:
    """Render one entity into a tagged outcome.

    Errors raised while building the model or rendering are captured as a
    ``Failed`` outcome and never escape.

    Returns
    -------
    RenderOutcome
        ``Rendered`` for non-empty text, ``Skipped`` for empty output, or
        ``Failed`` when the model or template raised.
    """
    start = time.monotonic()
    key = _entity_key(entity)
    try:
        model = entity.model()
        text = model.render(key, model.name, options)
        offset = int(model.offset)
    except Exception as exc:  # noqa: BLE001 - isolate per-entity render errors
        record_task_duration("render_entity", time.monotonic() - start, status="error")
        return Failed(key=key, error_type=type(exc).__name__, message=str(exc))
    if not text:
        record_task_duration("render_entity", time.monotonic() - start, status="skipped")
        return Skipped(key=key)
    record_task_duration("render_entity", time.monotonic() - start, status="ok")
    return Rendered(key=key, text=text, offset=offset)


def _deliver(
    outcome: RenderOutcome,
    completion: RenderCompletion,
    *,
    state: _RenderRunState,
) -> None:
    if isinstance(outcome, Rendered):
        completion(outcome.text, outcome.offset)
        state.delivered += 1
    elif isinstance(outcome, Skipped):
        logger.debug("Skipped empty render for %s", outcome.key)
        state.skipped.append(outcome.key)
    else:
        state.failures.append(outcome)
        record_error("render", outcome.error_type)
        logger.warning(
            "Rendering %s failed: %s: %s",
            outcome.key,
            outcome.error_type,
            outcome.message,
        )


def render_templates(
    entities: Iterable[ResolvedEntity],
    completion: RenderCompletion,
    *,
    options: RenderOptions | Mapping[str, object] | None = None,
    max_workers: int | None = None,
    concurrent: bool | None = None,
) -> RenderReport:
    """Render every entity and deliver non-empty output to ``completion``.

    Parameters
    ----------
    entities
        Resolved entities; delivery order does not follow input order.
    completion
        Callback receiving ``(text, offset)`` once per non-empty render. Calls
        are serialized on the calling thread and never overlap.
    options
        Template variant switches forwarded unchanged to every render.
    max_workers
        Worker thread count; defaults to ``MOCKGEN_MAX_WORKERS`` or the CPU
        count.
    concurrent
        Render on worker threads when True (default from
        ``MOCKGEN_CONCURRENT``); render inline when False.

    Returns
    -------
    RenderReport
        Delivered count, skipped keys, and failures for the batch.
    """
    resolved_options = normalize_render_options(options)
    env_options = dispatch_options_from_env()
    run_concurrent = env_options.concurrent if concurrent is None else concurrent
    workers = resolve_max_workers(
        max_workers if max_workers is not None else env_options.max_workers
    )
    items = tuple(entities)
    state = _RenderRunState()
    start = time.monotonic()
    with stage_span(
        "mockgen.render_templates",
        stage="render",
        scope_name=ScopeName.RENDER,
        attributes={
            "entity_count": len(items),
            "concurrent": run_concurrent,
            "max_workers": workers,
            "gil_disabled": gil_disabled(),
        },
    ) as span:
        for outcome in scan(
            items,
            partial(render_entity, options=resolved_options),
            max_workers=workers,
            concurrent=run_concurrent,
        ):
            _deliver(outcome, completion, state=state)
        span.set_attribute("delivered", state.delivered)
        span.set_attribute("skipped", len(state.skipped))
        span.set_attribute("failed", len(state.failures))
    record_artifact_count("mock", status="rendered", count=state.delivered)
    record_artifact_count("mock", status="skipped", count=len(state.skipped))
    record_artifact_count("mock", status="failed", count=len(state.failures))
    report = RenderReport(
        delivered=state.delivered,
        skipped=tuple(state.skipped),
        failures=tuple(state.failures),
        duration_s=time.monotonic() - start,
    )
    if state.failures:
        logger.warning(
            "Rendered %d of %d entities; %d failed",
            state.delivered,
            len(items),
            len(state.failures),
        )
    return report


__all__ = ["render_entity", "render_templates"]
