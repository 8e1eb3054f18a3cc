"""Boolean coercion for option payloads and environment switches."""

from __future__ import annotations

_TRUE_TEXT = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_TEXT = frozenset({"0", "false", "no", "n", "off"})


class CoercionError(ValueError):
    """Raised when a value has no boolean reading."""

    def __init__(self, value: object, label: str) -> None:
        self.value = value
        self.label = label
        super().__init__(f"{label}: cannot read {value!r} as a boolean")


def coerce_bool(value: object) -> bool | None:
    """Read ``value`` as a boolean.

    Booleans pass through, integers follow truthiness and strings accept the
    usual on/off spellings in any case.

    Returns
    -------
    bool | None
        Parsed boolean, or ``None`` when there is no boolean reading.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_TEXT:
            return True
        if text in _FALSE_TEXT:
            return False
    return None


def coerce_bool_strict(value: object, *, label: str) -> bool:
    """Read ``value`` as a boolean or raise.

    Returns
    -------
    bool
        Parsed boolean.

    Raises
    ------
    CoercionError
        Raised when the value has no boolean reading.
    """
    parsed = coerce_bool(value)
    if parsed is None:
        raise CoercionError(value, label)
    return parsed


__all__ = ["CoercionError", "coerce_bool", "coerce_bool_strict"]
