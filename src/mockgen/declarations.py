"""Resolved declaration structs handed over by the resolution phase."""

from __future__ import annotations

from typing import Literal

import msgspec

from mockgen.errors import DeclarationDecodeError
from serde_msgspec import StructBaseStrict, loads_json, validation_error_payload

ParamKind = Literal["positional", "var_positional", "keyword_only", "var_keyword"]


class ParamDecl(StructBaseStrict, frozen=True):
    """One method parameter.

    ``default`` holds the source expression of the default value, if any.
    """

    name: str
    annotation: str | None = None
    default: str | None = None
    kind: ParamKind = "positional"


class MethodDecl(StructBaseStrict, frozen=True, tag="method"):
    """Protocol method requirement."""

    name: str
    params: tuple[ParamDecl, ...] = ()
    return_annotation: str | None = None
    is_async: bool = False


class PropertyDecl(StructBaseStrict, frozen=True, tag="property"):
    """Protocol attribute requirement."""

    name: str
    annotation: str | None = None
    settable: bool = True
    observable: bool = False


MemberDecl = MethodDecl | PropertyDecl


class ProtocolDecl(StructBaseStrict, frozen=True):
    """Protocol with its inherited members already flattened in."""

    name: str
    members: tuple[MemberDecl, ...] = ()
    offset: int = 0
    module: str | None = None


def decode_protocol_decls(payload: bytes | str) -> tuple[ProtocolDecl, ...]:
    """Decode a JSON array of protocol declarations.

    Parameters
    ----------
    payload
        JSON payload produced by the resolution phase.

    Returns
    -------
    tuple[ProtocolDecl, ...]
        Declarations in payload order.

    Raises
    ------
    DeclarationDecodeError
        Raised when the payload is malformed or fails validation.
    """
    try:
        return loads_json(payload, target_type=tuple[ProtocolDecl, ...])
    except msgspec.ValidationError as exc:
        raise DeclarationDecodeError(validation_error_payload(exc)) from exc
    except msgspec.DecodeError as exc:
        raise DeclarationDecodeError(
            {"type": exc.__class__.__name__, "summary": str(exc)}
        ) from exc


__all__ = [
    "MemberDecl",
    "MethodDecl",
    "ParamDecl",
    "ParamKind",
    "PropertyDecl",
    "ProtocolDecl",
    "decode_protocol_decls",
]
