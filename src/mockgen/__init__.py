"""Concurrent mock-template rendering for resolved protocol declarations."""

from __future__ import annotations

from mockgen.contracts import (
    Failed,
    MockModel,
    RenderCompletion,
    RenderOutcome,
    RenderReport,
    Rendered,
    ResolvedEntity,
    Skipped,
)
from mockgen.declarations import (
    MethodDecl,
    ParamDecl,
    PropertyDecl,
    ProtocolDecl,
    decode_protocol_decls,
)
from mockgen.dispatch import render_entity, render_templates
from mockgen.errors import DeclarationDecodeError, MockgenError, MockTemplateError
from mockgen.models import ProtocolEntity, ProtocolMockModel, entities_from_decls
from mockgen.options import (
    DispatchOptions,
    RenderOptions,
    dispatch_options_from_env,
    normalize_render_options,
)
from mockgen.output import OutputCollector, compose_output
from mockgen.templates import default_value_expr, mock_imports, render_protocol_mock

__all__ = [
    "DeclarationDecodeError",
    "DispatchOptions",
    "Failed",
    "MethodDecl",
    "MockModel",
    "MockTemplateError",
    "MockgenError",
    "OutputCollector",
    "ParamDecl",
    "PropertyDecl",
    "ProtocolDecl",
    "ProtocolEntity",
    "ProtocolMockModel",
    "RenderCompletion",
    "RenderOptions",
    "RenderOutcome",
    "RenderReport",
    "Rendered",
    "ResolvedEntity",
    "Skipped",
    "compose_output",
    "decode_protocol_decls",
    "default_value_expr",
    "dispatch_options_from_env",
    "entities_from_decls",
    "mock_imports",
    "normalize_render_options",
    "render_entity",
    "render_protocol_mock",
    "render_templates",
]
