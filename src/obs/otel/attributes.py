"""Attribute normalization for mockgen spans and metric points."""

from __future__ import annotations

from collections.abc import Mapping

from opentelemetry.util.types import AttributeValue

from obs.otel.constants import AttributeName
from obs.otel.run_context import get_run_id


def normalize_attributes(
    attrs: Mapping[str, object] | None,
    *,
    with_run_id: bool = False,
) -> dict[str, AttributeValue]:
    """Convert raw values into OpenTelemetry attribute values.

    ``None`` values are dropped; scalars pass through and anything else is
    rendered with ``str``. With ``with_run_id`` the current run id is added.

    Returns
    -------
    dict[str, AttributeValue]
        Attribute mapping safe to hand to the SDK.
    """
    normalized: dict[str, AttributeValue] = {}
    for key, value in (attrs or {}).items():
        if value is None:
            continue
        if isinstance(value, (str, bool, int, float)):
            normalized[str(key)] = value
        else:
            normalized[str(key)] = str(value)
    if with_run_id:
        run_id = get_run_id()
        if run_id:
            normalized[AttributeName.RUN_ID.value] = run_id
    return normalized


__all__ = ["normalize_attributes"]
