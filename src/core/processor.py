"""Core checking pipeline.

This module is integration-agnostic. It only relies on the reporter port,
so the CLI and the TUI share the same matching path.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping

from core.matcher import DEFAULT_MAX_BINDINGS, match_example
from core.models import ExampleDescriptor, MatchResult, PatternDefinition
from core.ports import ReporterPort

LOGGER = logging.getLogger(__name__)


class ExampleChecker:
    """Matches examples against a catalog and forwards results to a reporter."""

    def __init__(
        self,
        catalog: Mapping[str, PatternDefinition],
        reporter: ReporterPort,
        max_bindings: int = DEFAULT_MAX_BINDINGS,
    ) -> None:
        self._catalog = dict(catalog)
        self._reporter = reporter
        self._max_bindings = max_bindings
        self.results: List[MatchResult] = []

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.passed)

    def check(self, example: ExampleDescriptor) -> MatchResult:
        """Match one example and report it."""

        result = match_example(example, self._catalog, self._max_bindings)
        self.results.append(result)
        self._reporter.emit(result)
        if result.passed:
            LOGGER.info("%s matches %s", example.name, result.pattern.name)
        else:
            failure = result.first_failure
            LOGGER.info(
                "%s does not match (nearest %s: %s)",
                example.name,
                result.pattern.name,
                failure.label if failure else "no failure recorded",
            )
        return result

    def run(self, examples: Iterable[ExampleDescriptor]) -> List[MatchResult]:
        """Check every example in order and return their results."""

        for example in examples:
            self.check(example)
        LOGGER.info("Checked %s examples, %s failed", len(self.results), self.failed)
        return list(self.results)
