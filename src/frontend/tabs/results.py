"""Results tab for browsing example matches."""

from __future__ import annotations

from typing import Any, Optional

from rich.text import Text
from textual import on
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, DataTable, Input, Static

from adapters.report_formatting import (
    STATUS_FAIL,
    STATUS_PASS,
    format_binding,
    format_report,
    pattern_label,
)
from core.models import MatchResult

from ..constants import ACCENT, FAIL_RED


class ResultsTab(Container):
    """Results tab listing one row per example, with a per-check detail pane."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._table_ready = False

    def compose(self):
        with Vertical(id="results-panel"):
            with Horizontal(id="results-body"):
                yield DataTable(id="results-table", cursor_type="row")
                with VerticalScroll(id="results-right"):
                    yield Static("", id="result-detail", classes="detail")
            with Horizontal(id="results-actions"):
                yield Input(placeholder="path/to/example.json or .py", id="example-path")
                yield Button("Check", id="check-example", variant="primary")
            yield Static("", id="results-output")

    def on_mount(self) -> None:
        table = self.query_one("#results-table", DataTable)
        table.add_column("status", key="status", width=6)
        table.add_column("example", key="example", width=22)
        table.add_column("pattern", key="pattern", width=30)
        table.add_column("first unsatisfied", key="failure", width=40)
        table.zebra_stripes = True
        self.query_one("#results-actions").styles.height = 3
        self._table_ready = True
        self.reload_from_state()

    def reload_from_state(self) -> None:
        if not self._table_ready:
            return
        table = self.query_one("#results-table", DataTable)
        table.clear()
        results = self.app.browser_state.results
        for index, result in enumerate(results):
            failure = result.first_failure
            table.add_row(
                self._status_cell(result),
                result.example.name,
                self._clip_text(pattern_label(result), 30),
                self._clip_text(failure.label) if failure and not result.passed else "",
                key=str(index),
            )
        if results:
            # Last line of a text report is the summary.
            self._set_output(format_report(results).rsplit("\n", 1)[-1])
        else:
            self._set_output("No examples checked. Pass example paths or check one below.")

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self._show(self._result_at(event.row_key))

    @on(Button.Pressed, "#check-example")
    def _on_check_example(self) -> None:
        path = self.query_one("#example-path", Input).value.strip()
        if not path:
            self._set_output("Enter an example path to check.")
            return
        result = self.app.check_example(path)
        if result is None:
            self._set_output(f"Could not check {path}; see header for the error.")

    def _result_at(self, row_key: Any) -> Optional[MatchResult]:
        key = str(row_key.value) if hasattr(row_key, "value") else str(row_key)
        results = self.app.browser_state.results
        try:
            return results[int(key)]
        except (ValueError, IndexError):
            return None

    def _show(self, result: Optional[MatchResult]) -> None:
        if result is None:
            return
        lines = [
            f"{result.example.name} ({result.example.location})",
            f"pattern: {pattern_label(result)}",
            f"roles: {format_binding(result)}",
            "",
        ]
        for outcome in result.outcomes:
            mark = "ok" if outcome.satisfied else "--"
            lines.append(f"{mark} {outcome.label}")
        self.query_one("#result-detail", Static).update(Text("\n".join(lines)))

    def _set_output(self, message: str) -> None:
        self.query_one("#results-output", Static).update(Text(message))

    @staticmethod
    def _status_cell(result: MatchResult) -> Text:
        if result.passed:
            return Text(STATUS_PASS, style=ACCENT)
        return Text(STATUS_FAIL, style=FAIL_RED)

    @staticmethod
    def _clip_text(value: str, limit: int = 40) -> str:
        if len(value) <= limit:
            return value
        return value[: limit - 3] + "..."
