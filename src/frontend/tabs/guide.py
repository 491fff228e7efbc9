"""Guide tab listing the constraint kinds a catalog may use."""

from __future__ import annotations

from rich.text import Text
from textual.containers import VerticalScroll
from textual.widgets import Static

from core.constraints import CONSTRAINT_KINDS


def guide_text() -> str:
    lines = ["Constraint kinds", ""]
    for name, kind in sorted(CONSTRAINT_KINDS.items()):
        fields = ", ".join(kind.role_fields + kind.list_fields)
        lines.append(f"{name}  ({fields})")
        lines.append("    " + kind.template.format(**{field: f"<{field}>" for field in kind.role_fields + kind.list_fields}))
    return "\n".join(lines)


class GuideTab(VerticalScroll):
    def compose(self):
        yield Static(Text(guide_text()), classes="detail")
