"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

REPORT_FORMATS = ("text", "markdown", "json")


@dataclass(frozen=True)
class MatcherConfig:
    """Limits for the role-binding search."""

    max_bindings: int


@dataclass(frozen=True)
class ReportConfig:
    """Report formatting settings consumed by reporter adapters."""

    format: str
    verbose: bool
