"""Entity and model adapters binding declarations to the mock templates."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from mockgen.templates import render_protocol_mock

if TYPE_CHECKING:
    from mockgen.declarations import ProtocolDecl
    from mockgen.options import RenderOptions


@dataclass(frozen=True)
class ProtocolMockModel:
    """Mock model for one resolved protocol declaration."""

    decl: ProtocolDecl

    @property
    def name(self) -> str:
        """Return the protocol name."""
        return self.decl.name

    @property
    def offset(self) -> int:
        """Return the declaration offset."""
        return self.decl.offset

    def render(self, key: str, encloser: str, options: RenderOptions) -> str | None:
        """Render the mock class source for this protocol.

        Returns
        -------
        str | None
            Mock class source, or ``None`` when the protocol has no members.
        """
        return render_protocol_mock(self.decl, key=key, encloser=encloser, options=options)


@dataclass(frozen=True)
class ProtocolEntity:
    """Resolved entity wrapping a protocol declaration."""

    decl: ProtocolDecl

    @property
    def key(self) -> str:
        """Return ``<module>.<name>`` when the module is known, else the name."""
        if self.decl.module:
            return f"{self.decl.module}.{self.decl.name}"
        return self.decl.name

    def model(self) -> ProtocolMockModel:
        """Return the render model for this entity."""
        return ProtocolMockModel(self.decl)


def entities_from_decls(decls: Iterable[ProtocolDecl]) -> tuple[ProtocolEntity, ...]:
    """Build resolved entities for declarations in input order.

    Returns
    -------
    tuple[ProtocolEntity, ...]
        One entity per declaration.
    """
    return tuple(ProtocolEntity(decl) for decl in decls)


__all__ = ["ProtocolEntity", "ProtocolMockModel", "entities_from_decls"]
