"""State container for the loaded catalog and example results."""

from __future__ import annotations

from dataclasses import dataclass, field

from core.models import MatchResult, PatternDefinition


@dataclass
class BrowserState:
    catalog: dict[str, PatternDefinition] | None = None
    results: list[MatchResult] = field(default_factory=list)
    error: str | None = None
