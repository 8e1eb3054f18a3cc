"""In-memory collection and composition of rendered mocks."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence


class OutputCollector:
    """Completion target that accumulates rendered text with its offset.

    Appends are lock-guarded so one collector can be shared between
    concurrent dispatches.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[tuple[str, int]] = []

    def __call__(self, text: str, offset: int) -> None:
        with self._lock:
            self._entries.append((text, offset))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def entries(self) -> tuple[tuple[str, int], ...]:
        """Return collected entries sorted by offset.

        Returns
        -------
        tuple[tuple[str, int], ...]
            ``(text, offset)`` pairs; equal offsets keep arrival order.
        """
        with self._lock:
            snapshot = list(self._entries)
        return tuple(sorted(snapshot, key=lambda entry: entry[1]))

    def clear(self) -> None:
        """Drop all collected entries."""
        with self._lock:
            self._entries.clear()


def compose_output(
    entries: Iterable[tuple[str, int]],
    *,
    header: str = "",
    imports: Sequence[str] = (),
) -> str:
    """Compose one module source from rendered entries.

    Parameters
    ----------
    entries
        ``(text, offset)`` pairs in any order.
    header
        Optional header; each line is emitted as a ``#`` comment.
    imports
        Import lines placed ahead of the mocks.

    Returns
    -------
    str
        Module source ending with a single newline, or ``""`` when there is
        nothing to emit.
    """
    blocks: list[str] = []
    if header:
        blocks.append("\n".join(f"# {line}".rstrip() for line in header.splitlines()))
    if imports:
        blocks.append("\n".join(imports))
    ordered = sorted(entries, key=lambda entry: entry[1])
    mocks = "\n\n\n".join(text.strip("\n") for text, _ in ordered)
    if mocks:
        blocks.append(mocks)
    if not blocks:
        return ""
    return "\n\n\n".join(blocks) + "\n"


__all__ = ["OutputCollector", "compose_output"]
