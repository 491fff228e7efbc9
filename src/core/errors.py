"""Error types raised by the core and adapters.

Both errors carry the location of the offending input so the CLI can point
the user at the exact catalog entry or example file that needs fixing.
"""

from __future__ import annotations


class PatternScopeError(Exception):
    """Base class for user-facing input errors."""

    def __init__(self, location: str, message: str) -> None:
        super().__init__(f"{location}: {message}")
        self.location = location
        self.message = message


class ConfigError(PatternScopeError):
    """Malformed catalog or configuration file."""


class MatchError(PatternScopeError):
    """Malformed example descriptor."""
