"""Patterns tab implementation."""

from __future__ import annotations

from typing import Any, Optional

from rich.text import Text
from textual.containers import Container, Horizontal, VerticalScroll
from textual.widgets import DataTable, Static

from core.models import PatternDefinition


def describe_pattern(pattern: PatternDefinition) -> str:
    """Multi-line description of roles and constraints for the detail pane."""

    lines = [pattern.name]
    if pattern.description:
        lines.append(pattern.description)
    lines.extend(["", "Roles:"])
    for role in pattern.roles:
        needs = []
        if role.abstract:
            needs.append("abstract")
        if role.methods:
            needs.append("defines " + ", ".join(role.methods))
        suffix = f" ({'; '.join(needs)})" if needs else ""
        lines.append(f"  - {role.name}{suffix}")
    lines.extend(["", "Constraints:"])
    for constraint in pattern.constraints:
        lines.append(f"  - {constraint.kind}: {constraint.description}")
    if not pattern.constraints:
        lines.append("  (none)")
    return "\n".join(lines)


class PatternsTab(Container):
    """Lists catalog patterns and shows the selected definition."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._table_ready = False

    def compose(self):
        with Horizontal(id="patterns-body"):
            yield DataTable(id="patterns-table", cursor_type="row")
            with VerticalScroll(id="patterns-right"):
                yield Static("Select a pattern", id="pattern-detail", classes="detail")

    def on_mount(self) -> None:
        table = self.query_one("#patterns-table", DataTable)
        table.add_column("name", key="name", width=18)
        table.add_column("roles", key="roles", width=30)
        table.add_column("constraints", key="constraints", width=12)
        table.zebra_stripes = True
        self._table_ready = True
        self.reload_from_state()

    def reload_from_state(self) -> None:
        if not self._table_ready:
            return
        table = self.query_one("#patterns-table", DataTable)
        table.clear()
        catalog = self.app.browser_state.catalog or {}
        for name, pattern in sorted(catalog.items()):
            table.add_row(name, ", ".join(pattern.role_names), str(len(pattern.constraints)), key=name)
        detail = self.query_one("#pattern-detail", Static)
        detail.update("Select a pattern" if catalog else "No catalog loaded")

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self._show(self._coerce_row_key(event.row_key))

    def _show(self, name: Optional[str]) -> None:
        catalog = self.app.browser_state.catalog or {}
        pattern = catalog.get(name or "")
        if pattern is None:
            return
        self.query_one("#pattern-detail", Static).update(Text(describe_pattern(pattern)))

    @staticmethod
    def _coerce_row_key(value: Any) -> str:
        if hasattr(value, "value"):
            return str(value.value)
        return str(value)
