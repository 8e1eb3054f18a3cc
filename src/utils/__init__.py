"""Environment and coercion helpers shared across mockgen."""

from utils.env_utils import env_bool, env_int, env_value
from utils.value_coercion import CoercionError, coerce_bool, coerce_bool_strict

__all__ = [
    "CoercionError",
    "coerce_bool",
    "coerce_bool_strict",
    "env_bool",
    "env_int",
    "env_value",
]
