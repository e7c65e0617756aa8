"""Error and warning types shared by the pipeline, exporters and CLI."""
from __future__ import annotations

from typing import Optional


class InputParseError(ValueError):
    """Raised (or recorded) when user supplied filter input cannot be parsed."""

    def __init__(self, message: str, *, stage: str, value: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.value = value


class EmptyResultWarning(UserWarning):
    """Signals that a filter pass left nothing to show or export."""


class ExportError(ValueError):
    """Raised when an export cannot be produced from the given settings."""


__all__ = ["InputParseError", "EmptyResultWarning", "ExportError"]
