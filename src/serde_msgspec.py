"""msgspec conventions for mockgen contracts and payloads."""

from __future__ import annotations

import re
from typing import TypeVar

import msgspec

T = TypeVar("T")


class StructBaseStrict(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=True,
):
    """Immutable keyword-only struct that rejects unknown fields on decode."""


# msgspec reports validation failures as "<summary> - at `<json path>`".
_VALIDATION_RE = re.compile(r"^(?P<summary>.*?)(?:\s+-\s+at\s+`(?P<path>[^`]+)`)?$")

_ENCODER = msgspec.json.Encoder(order="deterministic")


def validation_error_payload(exc: msgspec.ValidationError) -> dict[str, str]:
    """Split a msgspec validation error into type, summary and JSON path.

    Returns
    -------
    dict[str, str]
        ``type`` and ``summary`` keys, plus ``path`` when msgspec reported one.
    """
    payload: dict[str, str] = {"type": exc.__class__.__name__}
    match = _VALIDATION_RE.match(str(exc).strip())
    if match is None:
        payload["summary"] = str(exc).strip()
        return payload
    payload["summary"] = match.group("summary").strip()
    if match.group("path"):
        payload["path"] = match.group("path")
    return payload


def dumps_json(obj: object) -> bytes:
    """Encode ``obj`` as JSON with deterministic key order.

    Returns
    -------
    bytes
        Encoded payload.
    """
    return _ENCODER.encode(obj)


def loads_json(buf: bytes | str, *, target_type: type[T]) -> T:
    """Decode and validate JSON into ``target_type``.

    Returns
    -------
    T
        Decoded value.
    """
    return msgspec.json.decode(buf, type=target_type, strict=True)


__all__ = ["StructBaseStrict", "dumps_json", "loads_json", "validation_error_payload"]
