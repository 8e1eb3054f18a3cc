"""Environment variable readers for mockgen settings."""

from __future__ import annotations

import logging
import os

from utils.value_coercion import coerce_bool

_LOGGER = logging.getLogger(__name__)


def env_value(name: str) -> str | None:
    """Return the stripped value of ``name``, or ``None`` when unset or blank.

    Returns
    -------
    str | None
        Stripped value.
    """
    raw = os.environ.get(name)
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def env_bool(name: str, *, default: bool) -> bool:
    """Read a boolean switch, logging and ignoring unreadable values.

    Returns
    -------
    bool
        Parsed switch, or ``default`` when unset or unreadable.
    """
    raw = env_value(name)
    if raw is None:
        return default
    parsed = coerce_bool(raw)
    if parsed is None:
        _LOGGER.warning("Ignoring %s=%r: expected a boolean", name, raw)
        return default
    return parsed


def env_int(name: str) -> int | None:
    """Read an integer setting, logging and ignoring unreadable values.

    Returns
    -------
    int | None
        Parsed integer, or ``None`` when unset or unreadable.
    """
    raw = env_value(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        _LOGGER.warning("Ignoring %s=%r: expected an integer", name, raw)
        return None


__all__ = ["env_bool", "env_int", "env_value"]
