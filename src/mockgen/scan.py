"""Work distribution for per-entity rendering."""

from __future__ import annotations

import contextvars
import os
import sys
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TypeVar

from mockgen.options import MAX_WORKERS_ENV
from utils.env_utils import env_int

T = TypeVar("T")
U = TypeVar("U")


def gil_disabled() -> bool:
    """Return True when running without the GIL.

    Returns
    -------
    bool
        ``True`` when Python is running without the GIL.
    """
    checker = getattr(sys, "_is_gil_enabled", None)
    if not callable(checker):
        return False
    try:
        return not bool(checker())
    except (RuntimeError, TypeError, ValueError):
        return False


def resolve_max_workers(max_workers: int | None) -> int:
    """Resolve max_workers using runtime defaults when unset.

    An explicit value wins, then ``MOCKGEN_MAX_WORKERS``, then the CPU count.

    Returns
    -------
    int
        Effective worker count, never below one.
    """
    if max_workers is not None:
        return max(1, max_workers)
    env_workers = env_int(MAX_WORKERS_ENV)
    if env_workers is not None:
        return max(1, env_workers)
    return max(1, os.cpu_count() or 1)


def scan(
    items: Iterable[T],
    fn: Callable[[T], U],
    *,
    max_workers: int | None = None,
    concurrent: bool = True,
) -> Iterator[U]:
    """Apply ``fn`` to every item, yielding results on the calling thread.

    Concurrent scans run ``fn`` on a thread pool and yield in completion
    order. Each task runs in a copy of the submitting context so the
    OpenTelemetry context and run id follow the work. Sequential scans (or a
    single worker) run inline and yield in input order.

    Yields
    ------
    U
        Results produced by applying the function to each item.
    """
    workers = resolve_max_workers(max_workers)
    if not concurrent or workers == 1:
        for item in items:
            yield fn(item)
        return
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mockgen-render") as executor:
        futures = [executor.submit(contextvars.copy_context().run, fn, item) for item in items]
        for future in as_completed(futures):
            yield future.result()


__all__ = ["gil_disabled", "resolve_max_workers", "scan"]
