"""Collaborator contracts and result types for mock rendering.

The resolution phase hands the dispatcher ``ResolvedEntity`` values; the
dispatcher hands back text through a ``RenderCompletion`` callback. Every
render attempt resolves to exactly one tagged outcome.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from serde_msgspec import StructBaseStrict

if TYPE_CHECKING:
    from mockgen.options import RenderOptions

RenderCompletion = Callable[[str, int], None]


@runtime_checkable
class MockModel(Protocol):
    """Render-ready description of one entity's generated mock."""

    @property
    def name(self) -> str:
        """Enclosing type name used as the rendering context."""
        ...

    @property
    def offset(self) -> int:
        """Source offset used to order the final output."""
        ...

    def render(self, key: str, encloser: str, options: RenderOptions) -> str | None:
        """Return generated text, or ``None``/``""`` when there is nothing to emit."""
        ...


@runtime_checkable
class ResolvedEntity(Protocol):
    """Fully resolved declaration slated for mock generation."""

    @property
    def key(self) -> str:
        """Stable identifier attributing output to its source entity."""
        ...

    def model(self) -> MockModel:
        """Return the model used to render this entity."""
        ...


class Rendered(StructBaseStrict, frozen=True, tag="rendered"):
    """Entity rendered to non-empty text."""

    key: str
    text: str
    offset: int


class Skipped(StructBaseStrict, frozen=True, tag="skipped"):
    """Entity rendered to nothing; never delivered and never an error."""

    key: str


class Failed(StructBaseStrict, frozen=True, tag="failed"):
    """Entity whose model construction or rendering raised."""

    key: str
    error_type: str
    message: str


RenderOutcome = Rendered | Skipped | Failed


class RenderReport(StructBaseStrict, frozen=True):
    """Summary returned once every entity of a batch has been attempted."""

    delivered: int = 0
    skipped: tuple[str, ...] = ()
    failures: tuple[Failed, ...] = ()
    duration_s: float = 0.0

    @property
    def ok(self) -> bool:
        """Return True when no entity failed."""
        return not self.failures

    @property
    def failed_keys(self) -> tuple[str, ...]:
        """Return the keys of failed entities in report order."""
        return tuple(failure.key for failure in self.failures)


__all__ = [
    "Failed",
    "MockModel",
    "RenderCompletion",
    "RenderOutcome",
    "RenderReport",
    "Rendered",
    "ResolvedEntity",
    "Skipped",
]
