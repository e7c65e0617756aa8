"""Data models used by lead ingestion utilities."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(slots=True)
class ParsedCsv:
    """Header and rows read from a lead export, in source order."""

    headers: List[str] = field(default_factory=list)
    rows: List[Dict[str, str]] = field(default_factory=list)
    skipped: int = 0
    encoding: str = "utf-8"

    def __len__(self) -> int:
        return len(self.rows)


__all__ = ["ParsedCsv"]
