"""Tests for generated Python mock source."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import pytest

from mockgen.declarations import MethodDecl, ParamDecl, PropertyDecl, ProtocolDecl
from mockgen.errors import MockTemplateError
from mockgen.options import RenderOptions
from mockgen.output import compose_output
from mockgen.templates import default_value_expr, mock_imports, render_protocol_mock


class Store(Protocol):
    timeout: float

    @property
    def name(self) -> str: ...

    def fetch(self, key: str) -> int: ...

    def put(self, key: str, value: bytes) -> None: ...

    def lookup(self, key: str) -> Widget: ...


class Widget:
    pass


class Loader(Protocol):
    async def load(self, path: str) -> Widget: ...

    async def close(self) -> None: ...


class Query(Protocol):
    def run(self, sql: str, *args: Any, limit: int = 10, **extra: Any) -> list[str]: ...


class Feed(Protocol):
    latest: int


STORE = ProtocolDecl(
    name="Store",
    module="pkg.store",
    offset=10,
    members=(
        PropertyDecl(name="timeout", annotation="float"),
        PropertyDecl(name="name", annotation="str", settable=False),
        MethodDecl(
            name="fetch",
            params=(ParamDecl(name="key", annotation="str"),),
            return_annotation="int",
        ),
        MethodDecl(
            name="put",
            params=(
                ParamDecl(name="key", annotation="str"),
                ParamDecl(name="value", annotation="bytes"),
            ),
            return_annotation="None",
        ),
        MethodDecl(
            name="lookup",
            params=(ParamDecl(name="key", annotation="str"),),
            return_annotation="Widget",
        ),
    ),
)

LOADER = ProtocolDecl(
    name="Loader",
    members=(
        MethodDecl(
            name="load",
            params=(ParamDecl(name="path", annotation="str"),),
            return_annotation="Widget",
            is_async=True,
        ),
        MethodDecl(name="close", return_annotation="None", is_async=True),
    ),
)

QUERY = ProtocolDecl(
    name="Query",
    members=(
        MethodDecl(
            name="run",
            params=(
                ParamDecl(name="sql", annotation="str"),
                ParamDecl(name="args", annotation="Any", kind="var_positional"),
                ParamDecl(name="limit", annotation="int", default="10", kind="keyword_only"),
                ParamDecl(name="extra", annotation="Any", kind="var_keyword"),
            ),
            return_annotation="list[str]",
        ),
    ),
)

FEED = ProtocolDecl(
    name="Feed",
    members=(PropertyDecl(name="latest", annotation="int", observable=True),),
)

_PROTOCOLS: dict[str, type] = {
    "Store": Store,
    "Loader": Loader,
    "Query": Query,
    "Feed": Feed,
}


def _load_mock(decl: ProtocolDecl, options: RenderOptions | None = None) -> type:
    resolved = options or RenderOptions()
    text = render_protocol_mock(decl, key=decl.name, encloser=decl.name, options=resolved)
    assert text is not None
    source = compose_output([(text, decl.offset)], imports=mock_imports(resolved))
    namespace: dict[str, object] = {decl.name: _PROTOCOLS[decl.name], "Widget": Widget}
    exec(compile(source, f"<mock {decl.name}>", "exec"), namespace)
    mock_cls = namespace[f"{decl.name}Mock"]
    assert isinstance(mock_cls, type)
    return mock_cls


def test_method_returns_default_and_counts_calls() -> None:
    """Ensure methods count calls and fall back to the return type default."""
    mock = _load_mock(STORE)()
    assert mock.fetch("a") == 0
    assert mock.fetch("b") == 0
    assert mock.fetch_call_count == 2
    assert mock.put("a", b"x") is None
    assert mock.put_call_count == 1


def test_method_delegates_to_handler() -> None:
    """Ensure an installed handler receives the arguments and supplies the result."""
    mock = _load_mock(STORE)()
    mock.fetch_handler = lambda key: len(key)
    assert mock.fetch("abcd") == 4
    assert mock.fetch_call_count == 1


def test_method_without_default_requires_handler() -> None:
    """Ensure a return type with no default raises until a handler is set."""
    mock = _load_mock(STORE)()
    with pytest.raises(NotImplementedError, match="lookup_handler"):
        mock.lookup("a")
    widget = Widget()
    mock.lookup_handler = lambda _key: widget
    assert mock.lookup("a") is widget
    assert mock.lookup_call_count == 2


def test_properties_track_sets_and_defaults() -> None:
    """Ensure settable properties count sets and read-only ones reject assignment."""
    mock_cls = _load_mock(STORE)
    mock = mock_cls(name="primary")
    assert mock.timeout == 0.0
    assert mock.name == "primary"
    mock.timeout = 2.5
    assert mock.timeout == 2.5
    assert mock.timeout_set_call_count == 1
    with pytest.raises(AttributeError):
        mock.name = "other"
    assert mock_cls().name == ""


def test_args_history_records_calls() -> None:
    """Ensure argument history records single values and tuples."""
    options = RenderOptions(enable_func_args_history=True)
    mock = _load_mock(STORE, options)()
    mock.fetch("a")
    mock.put("b", b"1")
    assert mock.fetch_args_history == ["a"]
    assert mock.put_args_history == [("b", b"1")]


def test_args_history_absent_by_default() -> None:
    """Ensure argument history is only generated when enabled."""
    mock = _load_mock(STORE)()
    mock.fetch("a")
    assert not hasattr(mock, "fetch_args_history")


def test_async_methods_await_handler() -> None:
    """Ensure async methods await async handlers and default void returns."""
    mock = _load_mock(LOADER)()
    widget = Widget()

    async def _load(path: str) -> Widget:
        assert path == "p"
        return widget

    mock.load_handler = _load
    assert asyncio.run(mock.load("p")) is widget
    assert asyncio.run(mock.close()) is None
    assert mock.close_call_count == 1


def test_variadic_and_keyword_only_forwarding() -> None:
    """Ensure variadic and keyword-only parameters forward to the handler."""
    mock = _load_mock(QUERY, RenderOptions(enable_func_args_history=True))()
    assert mock.run("select") == []
    seen: list[tuple[object, ...]] = []

    def _handler(sql: str, *args: object, limit: int = 0, **extra: object) -> list[str]:
        seen.append((sql, args, limit, extra))
        return ["row"]

    mock.run_handler = _handler
    assert mock.run("q", 1, 2, limit=5, flag=True) == ["row"]
    assert seen == [("q", (1, 2), 5, {"flag": True})]
    assert mock.run_args_history[-1] == ("q", (1, 2), 5, {"flag": True})


def test_template_func_variant_matches_inline_behavior() -> None:
    """Ensure the shared helper variant behaves like inline bodies."""
    options = RenderOptions(use_template_func=True, enable_func_args_history=True)
    text = render_protocol_mock(STORE, key="Store", encloser="Store", options=options)
    assert text is not None
    assert text.count("def _mock_call(") == 1
    mock = _load_mock(STORE, options)()
    assert mock.fetch("a") == 0
    assert mock.fetch_args_history == ["a"]
    with pytest.raises(NotImplementedError):
        mock.lookup("a")
    mock.fetch_handler = lambda key: 7
    assert mock.fetch("b") == 7
    assert mock.fetch_call_count == 2


def test_template_func_variant_awaits_results() -> None:
    """Ensure async methods under the helper variant await coroutine results."""
    options = RenderOptions(use_template_func=True)
    mock = _load_mock(LOADER, options)()
    widget = Widget()

    async def _load(_path: str) -> Widget:
        return widget

    mock.load_handler = _load
    assert asyncio.run(mock.load("p")) is widget
    mock.load_handler = lambda _path: widget
    assert asyncio.run(mock.load("p")) is widget
    assert mock.load_call_count == 2


def test_template_func_variant_forwards_variadics() -> None:
    """Ensure the helper variant forwards packed positional and keyword arguments."""
    mock = _load_mock(QUERY, RenderOptions(use_template_func=True))()
    captured: list[object] = []
    mock.run_handler = lambda *args, **kwargs: captured.append((args, kwargs)) or ["x"]
    assert mock.run("q", 1, limit=3, extra_flag=1) == ["x"]
    assert captured == [(("q", 1), {"limit": 3, "extra_flag": 1})]


def test_observable_property_notifies_subscribers() -> None:
    """Ensure observable properties notify subscribers on set and publish."""
    mock = _load_mock(FEED, RenderOptions(use_mock_observable=True))()
    received: list[int] = []
    mock.latest_subscribers.append(received.append)
    mock.latest = 3
    mock.publish_latest(4)
    assert received == [3, 4]
    assert mock.latest == 4
    assert mock.latest_set_call_count == 1


def test_observable_flag_disabled_renders_plain_property() -> None:
    """Ensure observable members render as plain properties without the flag."""
    mock = _load_mock(FEED)()
    mock.latest = 1
    assert not hasattr(mock, "latest_subscribers")
    assert mock.latest == 1


def test_mock_final_marks_class() -> None:
    """Ensure the final flag decorates the generated class."""
    options = RenderOptions(mock_final=True)
    text = render_protocol_mock(FEED, key="Feed", encloser="Feed", options=options)
    assert text is not None
    assert text.startswith("@final\nclass FeedMock(Feed):")
    assert getattr(_load_mock(FEED, options), "__final__", False) is True


def test_docstring_names_key() -> None:
    """Ensure the generated docstring attributes the mock to its entity key."""
    text = render_protocol_mock(
        STORE,
        key="pkg.store.Store",
        encloser="Store",
        options=RenderOptions(),
    )
    assert text is not None
    assert '"""Mock for ``pkg.store.Store``."""' in text


def test_empty_protocol_renders_nothing() -> None:
    """Ensure protocols without members render to None."""
    decl = ProtocolDecl(name="Empty")
    rendered = render_protocol_mock(decl, key="Empty", encloser="Empty", options=RenderOptions())
    assert rendered is None


def test_render_is_idempotent() -> None:
    """Ensure repeated renders with the same inputs produce identical text."""
    options = RenderOptions(use_template_func=True, mock_final=True)
    first = render_protocol_mock(STORE, key="k", encloser="Store", options=options)
    second = render_protocol_mock(STORE, key="k", encloser="Store", options=options)
    assert first == second


@pytest.mark.parametrize(
    ("decl", "match"),
    [
        (ProtocolDecl(name="Bad", members=(MethodDecl(name="class"),)), "Invalid member"),
        (ProtocolDecl(name="Bad", members=(MethodDecl(name="self"),)), "reserved"),
        (
            ProtocolDecl(
                name="Bad",
                members=(MethodDecl(name="run"), PropertyDecl(name="run")),
            ),
            "Duplicate",
        ),
        (
            ProtocolDecl(
                name="Bad",
                members=(
                    MethodDecl(
                        name="run",
                        params=(
                            ParamDecl(name="a", default="1"),
                            ParamDecl(name="b"),
                        ),
                    ),
                ),
            ),
            "follows one with a default",
        ),
        (
            ProtocolDecl(
                name="Bad",
                members=(
                    MethodDecl(
                        name="run",
                        params=(
                            ParamDecl(name="kw", kind="keyword_only"),
                            ParamDecl(name="a"),
                        ),
                    ),
                ),
            ),
            "out of order",
        ),
        (
            ProtocolDecl(
                name="Bad",
                members=(
                    MethodDecl(name="run", params=(ParamDecl(name="a"), ParamDecl(name="a"))),
                ),
            ),
            "Duplicate or reserved parameter",
        ),
    ],
)
def test_invalid_declarations_raise(decl: ProtocolDecl, match: str) -> None:
    """Ensure unrenderable declarations raise MockTemplateError."""
    with pytest.raises(MockTemplateError, match=match) as excinfo:
        render_protocol_mock(decl, key="pkg.Bad", encloser=decl.name, options=RenderOptions())
    assert excinfo.value.key == "pkg.Bad"


@pytest.mark.parametrize(
    ("members", "options"),
    [
        (
            (MethodDecl(name="_mock_call", return_annotation="int"), MethodDecl(name="g")),
            RenderOptions(use_template_func=True),
        ),
        (
            (PropertyDecl(name="x", observable=True), MethodDecl(name="publish_x")),
            RenderOptions(use_mock_observable=True),
        ),
        (
            (PropertyDecl(name="x", observable=True), PropertyDecl(name="x_subscribers")),
            RenderOptions(use_mock_observable=True),
        ),
        ((MethodDecl(name="__init__"),), RenderOptions()),
        ((MethodDecl(name="run"), PropertyDecl(name="run_call_count")), RenderOptions()),
        ((MethodDecl(name="run_handler"), MethodDecl(name="run")), RenderOptions()),
        (
            (
                MethodDecl(name="run", params=(ParamDecl(name="a"),)),
                MethodDecl(name="run_args_history"),
            ),
            RenderOptions(enable_func_args_history=True),
        ),
        ((PropertyDecl(name="x"), MethodDecl(name="x_set_call_count")), RenderOptions()),
        ((PropertyDecl(name="x"), MethodDecl(name="_x")), RenderOptions()),
    ],
)
def test_generated_name_collisions_raise(
    members: tuple[MethodDecl | PropertyDecl, ...],
    options: RenderOptions,
) -> None:
    """Ensure members cannot be shadowed by attributes the mock generates."""
    decl = ProtocolDecl(name="P", members=members)
    with pytest.raises(MockTemplateError, match="collides with the attribute generated"):
        render_protocol_mock(decl, key="pkg.P", encloser="P", options=options)


@pytest.mark.parametrize(
    ("members", "options"),
    [
        ((MethodDecl(name="_mock_call"),), RenderOptions()),
        ((PropertyDecl(name="x"), MethodDecl(name="publish_x")), RenderOptions()),
        (
            (MethodDecl(name="run"), MethodDecl(name="run_args_history")),
            RenderOptions(enable_func_args_history=True),
        ),
    ],
)
def test_names_free_under_options_render(
    members: tuple[MethodDecl | PropertyDecl, ...],
    options: RenderOptions,
) -> None:
    """Ensure names only reserved by disabled variants remain usable."""
    decl = ProtocolDecl(name="P", members=members)
    assert render_protocol_mock(decl, key="P", encloser="P", options=options) is not None


def test_invalid_encloser_raises() -> None:
    """Ensure the encloser must be a usable class name."""
    with pytest.raises(MockTemplateError, match="Invalid protocol"):
        render_protocol_mock(STORE, key="k", encloser="not valid", options=RenderOptions())


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (None, "None"),
        ("None", "None"),
        ("int", "0"),
        ("float", "0.0"),
        ("str", '""'),
        ("bool", "False"),
        ("list[int]", "[]"),
        ("dict[str, int]", "{}"),
        ("set[str]", "set()"),
        ("tuple[int, ...]", "()"),
        ("int | None", "None"),
        ("Optional[int]", "None"),
        ("dict[str, int | None]", "{}"),
        ("int | str", None),
        ("Widget", None),
        ("'str'", '""'),
    ],
)
def test_default_value_expr(annotation: str | None, expected: str | None) -> None:
    """Ensure return annotations map to the expected default expressions."""
    assert default_value_expr(annotation) == expected


def test_mock_imports_follow_options() -> None:
    """Ensure the import block only pulls in names the variant uses."""
    plain = mock_imports(RenderOptions())
    assert plain[0] == "from __future__ import annotations"
    assert "from typing import Any" in plain
    assert not any("isawaitable" in line for line in plain)
    rich = mock_imports(RenderOptions(use_template_func=True, mock_final=True))
    assert "from inspect import isawaitable" in rich
    assert "from typing import Any, final" in rich
