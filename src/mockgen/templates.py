"""Python mock source templates for resolved protocols.

Each protocol renders to one ``<Name>Mock`` class that subclasses the
protocol. Generated code assumes the import block from ``mock_imports`` sits
at the top of the output module, including ``from __future__ import
annotations`` so declared annotations are never evaluated.
"""

from __future__ import annotations

import keyword
from collections.abc import Sequence
from typing import TYPE_CHECKING

from mockgen.declarations import MethodDecl, ParamDecl, PropertyDecl, ProtocolDecl
from mockgen.errors import MockTemplateError

if TYPE_CHECKING:
    from mockgen.options import RenderOptions

_INDENT = "    "
_BODY = _INDENT * 2

_DEFAULTS_BY_BASE: dict[str, str] = {
    "None": "None",
    "Any": "None",
    "typing.Any": "None",
    "object": "None",
    "int": "0",
    "float": "0.0",
    "complex": "0j",
    "str": '""',
    "bytes": 'b""',
    "bool": "False",
    "list": "[]",
    "List": "[]",
    "typing.List": "[]",
    "dict": "{}",
    "Dict": "{}",
    "typing.Dict": "{}",
    "set": "set()",
    "Set": "set()",
    "typing.Set": "set()",
    "frozenset": "frozenset()",
    "FrozenSet": "frozenset()",
    "tuple": "()",
    "Tuple": "()",
    "typing.Tuple": "()",
}
_OPTIONAL_PREFIXES = ("Optional[", "typing.Optional[")
_PARAM_RANK = {"positional": 0, "var_positional": 1, "keyword_only": 2, "var_keyword": 3}

_MOCK_CALL_HELPER = (
    "    def _mock_call(",
    "        self,",
    "        name: str,",
    "        args: tuple[Any, ...],",
    "        kwargs: dict[str, Any],",
    "        record: Any,",
    "        *,",
    "        has_default: bool,",
    "        default: Any = None,",
    "    ) -> Any:",
    '        setattr(self, f"{name}_call_count", getattr(self, f"{name}_call_count") + 1)',
    '        history = getattr(self, f"{name}_args_history", None)',
    "        if history is not None:",
    "            history.append(record)",
    '        handler = getattr(self, f"{name}_handler")',
    "        if handler is not None:",
    "            return handler(*args, **kwargs)",
    "        if has_default:",
    "            return default",
    '        msg = f"{name}_handler must be set: the return type has no default value"',
    "        raise NotImplementedError(msg)",
)


def _split_union(annotation: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for char in annotation:
        if char in "[(":
            depth += 1
        elif char in "])":
            depth -= 1
        if char == "|" and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return parts


def default_value_expr(annotation: str | None) -> str | None:
    """Return a source expression for the default value of an annotation.

    Parameters
    ----------
    annotation
        Annotation source text, or ``None`` when undeclared.

    Returns
    -------
    str | None
        Default value expression, or ``None`` when the type has no obvious
        default (the generated mock then requires a handler).
    """
    if annotation is None:
        return "None"
    text = annotation.strip().strip("\"'").strip()
    if not text:
        return "None"
    if text.startswith(_OPTIONAL_PREFIXES):
        return "None"
    parts = _split_union(text)
    if "None" in parts:
        return "None"
    if len(parts) > 1:
        return None
    base = text.split("[", 1)[0].strip()
    return _DEFAULTS_BY_BASE.get(base)


def mock_imports(options: RenderOptions) -> tuple[str, ...]:
    """Return the import lines required by mocks rendered with ``options``.

    Returns
    -------
    tuple[str, ...]
        Import statements, ``__future__`` first.
    """
    typing_names = ["Any"]
    if options.mock_final:
        typing_names.append("final")
    lines = [
        "from __future__ import annotations",
        "from collections.abc import Callable",
    ]
    if options.use_template_func:
        lines.append("from inspect import isawaitable")
    lines.append(f"from typing import {', '.join(typing_names)}")
    return tuple(lines)


def _check_identifier(name: str, *, key: str, what: str, member: str | None = None) -> None:
    if not name.isidentifier() or keyword.iskeyword(name):
        msg = f"Invalid {what} name {name!r}"
        raise MockTemplateError(msg, key=key, member=member)


def _validate_params(method: MethodDecl, *, key: str) -> None:
    seen: set[str] = set()
    last_rank = 0
    saw_default = False
    var_kinds: set[str] = set()
    for param in method.params:
        _check_identifier(param.name, key=key, what="parameter", member=method.name)
        if param.name == "self" or param.name in seen:
            msg = f"Duplicate or reserved parameter {param.name!r}"
            raise MockTemplateError(msg, key=key, member=method.name)
        seen.add(param.name)
        rank = _PARAM_RANK[param.kind]
        if rank < last_rank:
            msg = f"Parameter {param.name!r} of kind {param.kind} is out of order"
            raise MockTemplateError(msg, key=key, member=method.name)
        last_rank = rank
        if param.kind in {"var_positional", "var_keyword"}:
            if param.kind in var_kinds:
                msg = f"More than one {param.kind} parameter"
                raise MockTemplateError(msg, key=key, member=method.name)
            var_kinds.add(param.kind)
            if param.default is not None:
                msg = f"Variadic parameter {param.name!r} cannot have a default"
                raise MockTemplateError(msg, key=key, member=method.name)
        if param.kind == "positional":
            if param.default is not None:
                saw_default = True
            elif saw_default:
                msg = f"Parameter {param.name!r} without a default follows one with a default"
                raise MockTemplateError(msg, key=key, member=method.name)


def _generated_names(decl: ProtocolDecl, options: RenderOptions) -> dict[str, str]:
    generated = {"__init__": "the constructor"}
    has_methods = False
    for member in decl.members:
        if isinstance(member, PropertyDecl):
            generated[f"_{member.name}"] = f"property {member.name!r}"
            if member.settable:
                generated[f"{member.name}_set_call_count"] = f"property {member.name!r}"
            if _observable(member, options):
                generated[f"{member.name}_subscribers"] = f"property {member.name!r}"
                generated[f"publish_{member.name}"] = f"property {member.name!r}"
            continue
        has_methods = True
        generated[f"{member.name}_call_count"] = f"method {member.name!r}"
        generated[f"{member.name}_handler"] = f"method {member.name!r}"
        if _records_history(member, options):
            generated[f"{member.name}_args_history"] = f"method {member.name!r}"
    if options.use_template_func and has_methods:
        generated["_mock_call"] = "the shared call helper"
    return generated


def _validate(
    decl: ProtocolDecl,
    *,
    key: str,
    encloser: str,
    options: RenderOptions,
) -> None:
    _check_identifier(encloser, key=key, what="protocol")
    generated = _generated_names(decl, options)
    seen: set[str] = set()
    for member in decl.members:
        _check_identifier(member.name, key=key, what="member", member=member.name)
        if member.name == "self" or member.name in seen:
            msg = "Duplicate or reserved member"
            raise MockTemplateError(msg, key=key, member=member.name)
        owner = generated.get(member.name)
        if owner is not None:
            msg = f"Member name collides with the attribute generated for {owner}"
            raise MockTemplateError(msg, key=key, member=member.name)
        seen.add(member.name)
        if isinstance(member, MethodDecl):
            _validate_params(member, key=key)


def _format_param(param: ParamDecl) -> str:
    annotation = f": {param.annotation}" if param.annotation else ""
    prefix = {"var_positional": "*", "var_keyword": "**"}.get(param.kind, "")
    if param.default is None:
        return f"{prefix}{param.name}{annotation}"
    separator = " = " if param.annotation else "="
    return f"{param.name}{annotation}{separator}{param.default}"


def _signature(method: MethodDecl) -> str:
    parts = ["self"]
    star_emitted = False
    for param in method.params:
        if param.kind == "var_positional":
            star_emitted = True
        elif param.kind == "keyword_only" and not star_emitted:
            parts.append("*")
            star_emitted = True
        parts.append(_format_param(param))
    returns = method.return_annotation or "None"
    prefix = "async def" if method.is_async else "def"
    return f"{_INDENT}{prefix} {method.name}({', '.join(parts)}) -> {returns}:"


def _forward_args(params: Sequence[ParamDecl]) -> str:
    forwarded: list[str] = []
    for param in params:
        if param.kind == "positional":
            forwarded.append(param.name)
        elif param.kind == "var_positional":
            forwarded.append(f"*{param.name}")
        elif param.kind == "keyword_only":
            forwarded.append(f"{param.name}={param.name}")
        else:
            forwarded.append(f"**{param.name}")
    return ", ".join(forwarded)


def _args_tuple(params: Sequence[ParamDecl]) -> str:
    items = [
        param.name if param.kind == "positional" else f"*{param.name}"
        for param in params
        if param.kind in {"positional", "var_positional"}
    ]
    if not items:
        return "()"
    if len(items) == 1:
        return f"({items[0]},)"
    return f"({', '.join(items)})"


def _kwargs_dict(params: Sequence[ParamDecl]) -> str:
    items = [
        f'"{param.name}": {param.name}' if param.kind == "keyword_only" else f"**{param.name}"
        for param in params
        if param.kind in {"keyword_only", "var_keyword"}
    ]
    if not items:
        return "{}"
    return "{" + ", ".join(items) + "}"


def _record_expr(params: Sequence[ParamDecl]) -> str:
    names = [param.name for param in params]
    if len(names) == 1:
        return names[0]
    return f"({', '.join(names)})"


def _records_history(method: MethodDecl, options: RenderOptions) -> bool:
    return options.enable_func_args_history and bool(method.params)


def _observable(prop: PropertyDecl, options: RenderOptions) -> bool:
    return options.use_mock_observable and prop.observable


def _init_params(properties: Sequence[PropertyDecl]) -> list[str]:
    params: list[str] = []
    for prop in properties:
        if prop.annotation is None:
            params.append(f"{prop.name}: Any = None")
        elif default_value_expr(prop.annotation) == "None":
            params.append(f"{prop.name}: {prop.annotation} = None")
        else:
            params.append(f"{prop.name}: {prop.annotation} | None = None")
    return params


def _init_block(decl: ProtocolDecl, options: RenderOptions) -> list[str]:
    properties = [member for member in decl.members if isinstance(member, PropertyDecl)]
    params = _init_params(properties)
    signature = f"self, *, {', '.join(params)}" if params else "self"
    lines = [f"{_INDENT}def __init__({signature}) -> None:"]
    for member in decl.members:
        if isinstance(member, PropertyDecl):
            default = default_value_expr(member.annotation)
            if default is None or default == "None":
                lines.append(f"{_BODY}self._{member.name} = {member.name}")
            else:
                lines.append(
                    f"{_BODY}self._{member.name} = "
                    f"{member.name} if {member.name} is not None else {default}"
                )
            if member.settable:
                lines.append(f"{_BODY}self.{member.name}_set_call_count = 0")
            if _observable(member, options):
                lines.append(
                    f"{_BODY}self.{member.name}_subscribers: list[Callable[[Any], None]] = []"
                )
            continue
        lines.append(f"{_BODY}self.{member.name}_call_count = 0")
        lines.append(f"{_BODY}self.{member.name}_handler: Callable[..., Any] | None = None")
        if _records_history(member, options):
            lines.append(f"{_BODY}self.{member.name}_args_history: list[Any] = []")
    return lines


def _property_block(prop: PropertyDecl, options: RenderOptions) -> list[str]:
    annotation = prop.annotation or "Any"
    lines = [
        f"{_INDENT}@property",
        f"{_INDENT}def {prop.name}(self) -> {annotation}:",
        f"{_BODY}return self._{prop.name}",
    ]
    observable = _observable(prop, options)
    if prop.settable:
        lines.extend(
            [
                "",
                f"{_INDENT}@{prop.name}.setter",
                f"{_INDENT}def {prop.name}(self, value: {annotation}) -> None:",
                f"{_BODY}self.{prop.name}_set_call_count += 1",
            ]
        )
        if observable:
            lines.append(f"{_BODY}self.publish_{prop.name}(value)")
        else:
            lines.append(f"{_BODY}self._{prop.name} = value")
    if observable:
        lines.extend(
            [
                "",
                f"{_INDENT}def publish_{prop.name}(self, value: {annotation}) -> None:",
                f"{_BODY}self._{prop.name} = value",
                f"{_BODY}for subscriber in list(self.{prop.name}_subscribers):",
                f"{_BODY}{_INDENT}subscriber(value)",
            ]
        )
    return lines


def _missing_handler_message(method: MethodDecl) -> str:
    return (
        f"{method.name}_handler must be set: "
        f"no default value for {method.return_annotation}"
    )


def _inline_method_body(method: MethodDecl, options: RenderOptions) -> list[str]:
    handler = f"self.{method.name}_handler"
    call = f"{handler}({_forward_args(method.params)})"
    if method.is_async:
        call = f"await {call}"
    lines = [f"{_BODY}self.{method.name}_call_count += 1"]
    if _records_history(method, options):
        lines.append(
            f"{_BODY}self.{method.name}_args_history.append({_record_expr(method.params)})"
        )
    lines.extend(
        [
            f"{_BODY}if {handler} is not None:",
            f"{_BODY}{_INDENT}return {call}",
        ]
    )
    default = default_value_expr(method.return_annotation)
    if default is not None:
        lines.append(f"{_BODY}return {default}")
        return lines
    lines.extend(
        [
            f"{_BODY}msg = {_missing_handler_message(method)!r}",
            f"{_BODY}raise NotImplementedError(msg)",
        ]
    )
    return lines


def _template_func_body(method: MethodDecl, options: RenderOptions) -> list[str]:
    default = default_value_expr(method.return_annotation)
    record = _record_expr(method.params) if _records_history(method, options) else "None"
    default_args = (
        f"has_default=True, default={default}" if default is not None else "has_default=False"
    )
    call = (
        f'self._mock_call("{method.name}", {_args_tuple(method.params)}, '
        f"{_kwargs_dict(method.params)}, {record}, {default_args})"
    )
    if not method.is_async:
        return [f"{_BODY}return {call}"]
    return [
        f"{_BODY}result = {call}",
        f"{_BODY}if isawaitable(result):",
        f"{_BODY}{_INDENT}return await result",
        f"{_BODY}return result",
    ]


def _method_block(method: MethodDecl, options: RenderOptions) -> list[str]:
    body = (
        _template_func_body(method, options)
        if options.use_template_func
        else _inline_method_body(method, options)
    )
    return [_signature(method), *body]


def _doc_key(key: str) -> str:
    return key.replace("\\", "\\\\").replace('"', '\\"')


def render_protocol_mock(
    decl: ProtocolDecl,
    *,
    key: str,
    encloser: str,
    options: RenderOptions,
) -> str | None:
    """Render the mock class source for one protocol declaration.

    Parameters
    ----------
    decl
        Resolved protocol declaration.
    key
        Entity key named in the generated docstring.
    encloser
        Protocol name; the mock class is ``<encloser>Mock``.
    options
        Template variant switches.

    Returns
    -------
    str | None
        Mock class source without a trailing newline, or ``None`` for a
        protocol with no members.

    Raises
    ------
    MockTemplateError
        Raised when a name is not a valid identifier, a member is declared
        twice or collides with a generated attribute, or a parameter list
        cannot form a valid signature.
    """
    if not decl.members:
        return None
    _validate(decl, key=key, encloser=encloser, options=options)
    lines: list[str] = []
    if options.mock_final:
        lines.append("@final")
    lines.extend(
        [
            f"class {encloser}Mock({encloser}):",
            f'{_INDENT}"""Mock for ``{_doc_key(key)}``."""',
            "",
            *_init_block(decl, options),
        ]
    )
    has_methods = False
    for member in decl.members:
        lines.append("")
        if isinstance(member, PropertyDecl):
            lines.extend(_property_block(member, options))
        else:
            has_methods = True
            lines.extend(_method_block(member, options))
    if options.use_template_func and has_methods:
        lines.append("")
        lines.extend(_MOCK_CALL_HELPER)
    return "\n".join(lines)


__all__ = ["default_value_expr", "mock_imports", "render_protocol_mock"]
