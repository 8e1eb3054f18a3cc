"""Error taxonomy for mock rendering."""

from __future__ import annotations

from collections.abc import Mapping


class MockgenError(Exception):
    """Base error for mockgen failures."""


class MockTemplateError(MockgenError, ValueError):
    """Raised when a declaration cannot be rendered into a mock."""

    def __init__(self, message: str, *, key: str | None = None, member: str | None = None) -> None:
        self.key = key
        self.member = member
        details = [
            f"{label}={value}"
            for label, value in (("entity", key), ("member", member))
            if value is not None
        ]
        super().__init__(f"{message} ({', '.join(details)})" if details else message)


class DeclarationDecodeError(MockgenError, ValueError):
    """Raised when a declaration payload fails to decode or validate."""

    def __init__(self, payload: Mapping[str, str]) -> None:
        self.payload = dict(payload)
        summary = self.payload.get("summary", "invalid declaration payload")
        path = self.payload.get("path")
        message = f"{summary} at {path}" if path else summary
        super().__init__(message)


__all__ = ["DeclarationDecodeError", "MockTemplateError", "MockgenError"]
