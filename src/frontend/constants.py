"""Shared constants for the Textual UI."""

from __future__ import annotations

ACCENT = "#7FB069"
FAIL_RED = "#E4572E"
