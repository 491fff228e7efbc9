"""Ports (interfaces) used by the core checker.

Ports define the minimal contracts for report sinks so that the core can be
reused with a console, a file or the TUI.
"""

from __future__ import annotations

from typing import Protocol

from core.models import MatchResult


class ReporterPort(Protocol):
    """Report operations required by the core checker."""

    def emit(self, result: MatchResult) -> None:
        ...
