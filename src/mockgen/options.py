"""Render and dispatch option contracts and normalization helpers."""

from __future__ import annotations

from collections.abc import Mapping

from serde_msgspec import StructBaseStrict
from utils.env_utils import env_bool, env_int
from utils.value_coercion import CoercionError, coerce_bool_strict

MAX_WORKERS_ENV = "MOCKGEN_MAX_WORKERS"
CONCURRENT_ENV = "MOCKGEN_CONCURRENT"


class RenderOptions(StructBaseStrict, frozen=True):
    """Template variant switches forwarded unchanged to every render call.

    Attributes
    ----------
    use_template_func
        Route method bodies through one shared ``_mock_call`` helper instead of
        inline bodies.
    use_mock_observable
        Render observable properties with subscriber notification on set.
    enable_func_args_history
        Record the arguments of every call in ``<name>_args_history``.
    mock_final
        Decorate generated mock classes with ``@final``.
    """

    use_template_func: bool = False
    use_mock_observable: bool = False
    enable_func_args_history: bool = False
    mock_final: bool = False


class DispatchOptions(StructBaseStrict, frozen=True):
    """Work-distribution settings for a render run."""

    max_workers: int | None = None
    concurrent: bool = True


_RENDER_FIELDS = frozenset(RenderOptions.__struct_fields__)
_COMPAT_KEYS = {
    "enable_args_history": "enable_func_args_history",
    "final": "mock_final",
}


def _canonical_key(raw_key: object) -> str:
    key = str(raw_key).strip().replace("-", "_")
    return _COMPAT_KEYS.get(key, key)


def _coerce_flag(value: object, *, field_name: str) -> bool:
    try:
        return coerce_bool_strict(value, label=field_name)
    except CoercionError as exc:
        msg = f"Render option {field_name!r} expects a boolean, got {value!r}."
        raise ValueError(msg) from exc


def normalize_render_options(
    options: RenderOptions | Mapping[str, object] | None,
) -> RenderOptions:
    """Normalize render options from typed or mapping payloads.

    Compatibility keys accepted for mapping payloads:
    - ``enable_args_history`` -> ``enable_func_args_history``
    - ``final`` -> ``mock_final``
    - dashed spellings such as ``use-template-func``

    Returns:
        Normalized render options.

    Raises:
        TypeError: If ``options`` is not ``None``, ``RenderOptions``, or a mapping.
        ValueError: If a key is unknown, repeated under an alias, or not boolean.
    """
    if isinstance(options, RenderOptions):
        return options
    if options is None:
        return RenderOptions()
    if not isinstance(options, Mapping):
        msg = "Render options must be a mapping, RenderOptions, or None."
        raise TypeError(msg)
    resolved: dict[str, bool] = {}
    for raw_key, value in options.items():
        key = _canonical_key(raw_key)
        if key not in _RENDER_FIELDS:
            msg = f"Unknown render option: {raw_key!r}."
            raise ValueError(msg)
        if key in resolved:
            msg = f"Render option {key!r} was given more than once."
            raise ValueError(msg)
        resolved[key] = _coerce_flag(value, field_name=key)
    return RenderOptions(**resolved)


def dispatch_options_from_env() -> DispatchOptions:
    """Resolve dispatch settings from ``MOCKGEN_*`` environment variables.

    Returns
    -------
    DispatchOptions
        Worker count (``None`` when unset) and concurrency switch.
    """
    return DispatchOptions(
        max_workers=env_int(MAX_WORKERS_ENV),
        concurrent=env_bool(CONCURRENT_ENV, default=True),
    )


__all__ = [
    "CONCURRENT_ENV",
    "MAX_WORKERS_ENV",
    "DispatchOptions",
    "RenderOptions",
    "dispatch_options_from_env",
    "normalize_render_options",
]
