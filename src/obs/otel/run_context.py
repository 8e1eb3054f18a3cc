"""Run id carried through contextvars into spans and metric points."""

from __future__ import annotations

from contextvars import ContextVar, Token

_RUN_ID: ContextVar[str | None] = ContextVar("mockgen.run_id", default=None)


def get_run_id() -> str | None:
    """Return the run id of the current context, if any."""
    return _RUN_ID.get()


def set_run_id(run_id: str) -> Token[str | None]:
    """Tag the current context with ``run_id``.

    Returns
    -------
    contextvars.Token[str | None]
        Token for ``reset_run_id``.
    """
    return _RUN_ID.set(run_id)


def reset_run_id(token: Token[str | None]) -> None:
    """Restore the run id that was active before ``set_run_id``."""
    _RUN_ID.reset(token)


__all__ = ["get_run_id", "reset_run_id", "set_run_id"]
