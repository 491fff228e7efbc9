"""Main Textual app for the patternscope catalog browser."""

from __future__ import annotations

from typing import Any, Iterable

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Center, Container, Horizontal, Vertical
from textual.widgets import Button, ContentSwitcher, Footer, Static, Tab, Tabs

import settings
from adapters.file_loader import load_catalog, load_descriptor, load_examples
from core.errors import PatternScopeError
from core.matcher import match_example
from core.models import MatchResult

from .constants import ACCENT
from .state import BrowserState
from .tabs.guide import GuideTab
from .tabs.patterns import PatternsTab
from .tabs.results import ResultsTab


class CatalogBrowserApp(App):
    """Catalog browser with shared catalog state and tabs."""

    BINDINGS = [
        ("ctrl+r", "reload", "Reload"),
        ("q", "quit", "Quit"),
    ]

    CSS = """
    Screen {
        background: #14181c;
        color: #e8eef5;
    }

    #header {
        height: 6;
        padding: 1 4;
        border-bottom: solid #2a3a46;
    }

    #header-row {
        height: 4;
    }

    #header-left, #header-right {
        width: 1fr;
    }

    #header-right {
        content-align: right top;
        text-align: right;
    }

    #title {
        text-style: bold;
    }

    .subtle {
        color: #c6d2dd;
    }

    .status-error {
        color: #E4572E;
    }

    #tabs-bar {
        height: 5;
        padding: 0 4;
        border-bottom: solid #2a3a46;
    }

    #tabs-center {
        width: 100%;
        height: 4;
        align: center middle;
    }

    #tabs {
        width: auto;
    }

    #content {
        height: 1fr;
        padding: 0 2;
    }

    DataTable {
        height: 1fr;
    }

    .detail {
        height: auto;
        padding: 1 0;
    }
    """

    def __init__(self, catalog_path: str | None = None, example_paths: Iterable[str] = (), **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.catalog_path = catalog_path or settings.CATALOG_PATH
        self.example_paths = list(example_paths)
        self.browser_state = BrowserState()

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            with Horizontal(id="header-row"):
                with Vertical(id="header-left"):
                    yield Static(self._title_text(), id="title")
                    yield Static(f"catalog: {self.catalog_path}", classes="subtle")
                with Vertical(id="header-right"):
                    yield Static("", id="header-status")
                    yield Horizontal(Button("Reload", id="reload-btn"), id="header-actions")

        with Container(id="tabs-bar"):
            with Center(id="tabs-center"):
                yield Tabs(
                    Tab("Patterns", id="patterns"),
                    Tab("Results", id="results"),
                    Tab("Guide", id="guide"),
                    id="tabs",
                )

        with ContentSwitcher(id="content"):
            yield PatternsTab(id="patterns")
            yield ResultsTab(id="results")
            yield GuideTab(id="guide")
        yield Footer()

    def on_mount(self) -> None:
        self._load()
        self._set_active_tab("patterns")

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        tab_id = event.tab.id or ""
        if not tab_id:
            label = event.tab.label
            if hasattr(label, "plain"):
                label = label.plain
            tab_id = str(label).strip().lower()
        self._set_active_tab(tab_id)

    def _set_active_tab(self, tab_id: str) -> None:
        switcher = self.query_one("#content", ContentSwitcher)
        switcher.current = tab_id

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "reload-btn":
            self.action_reload()

    def action_reload(self) -> None:
        self._load()

    def _load(self) -> None:
        state = self.browser_state
        state.results = []
        try:
            state.catalog = load_catalog(self.catalog_path)
        except PatternScopeError as exc:
            state.catalog = None
            state.error = str(exc)
        else:
            try:
                state.results = [
                    match_example(example, state.catalog, settings.MATCHER.max_bindings)
                    for example in load_examples(self.example_paths)
                ]
                state.error = None
            except PatternScopeError as exc:
                # Keep the catalog browsable when only an example is broken.
                state.error = str(exc)
        self._refresh_header()
        self._refresh_tabs()

    def check_example(self, path: str) -> MatchResult | None:
        """Match one more example against the loaded catalog and show it."""

        state = self.browser_state
        if state.catalog is None:
            state.error = "no catalog loaded"
            self._refresh_header()
            return None
        try:
            result = match_example(load_descriptor(path), state.catalog, settings.MATCHER.max_bindings)
        except PatternScopeError as exc:
            state.error = str(exc)
            self._refresh_header()
            return None
        if path not in self.example_paths:
            self.example_paths.append(path)
        state.results.append(result)
        state.error = None
        self._refresh_header()
        self._refresh_tabs()
        return result

    def _refresh_header(self) -> None:
        status = self.query_one("#header-status", Static)
        status.remove_class("status-error")
        state = self.browser_state
        if state.error:
            status.update(Text(f"error: {state.error}"))
            status.add_class("status-error")
            return
        patterns = len(state.catalog or {})
        passed = sum(1 for result in state.results if result.passed)
        status.update(f"{patterns} patterns | {passed}/{len(state.results)} examples pass")

    def _refresh_tabs(self) -> None:
        for tab in self.query(PatternsTab):
            tab.reload_from_state()
        for tab in self.query(ResultsTab):
            tab.reload_from_state()

    @staticmethod
    def _title_text() -> Text:
        return Text.assemble(
            ("PATTERN", ACCENT),
            ("SCOPE > Catalog Browser", "bold"),
        )
