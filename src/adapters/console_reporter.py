"""Console reporter adapter.

Text reports are streamed one line per example as results arrive; markdown
and JSON need the whole result set, so they are written on ``finish``.
"""

from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from adapters.report_formatting import format_report, format_summary
from core.models import MatchResult


class ConsoleReporter:
    """Reporter adapter that writes the report to a text stream."""

    def __init__(self, stream: Optional[TextIO] = None, mode: str = "text", verbose: bool = False) -> None:
        self._stream = stream or sys.stdout
        self._mode = mode
        self._verbose = verbose
        self.results: List[MatchResult] = []

    def emit(self, result: MatchResult) -> None:
        """Record a result, printing it right away in text mode."""

        self.results.append(result)
        if self._mode == "text":
            # format_report always appends a summary; drop it for streamed lines.
            body = format_report([result], mode="text", verbose=self._verbose)
            self._stream.write(body.rsplit("\n", 1)[0] + "\n")
            self._stream.flush()

    def finish(self) -> None:
        if self._mode == "text":
            self._stream.write(format_summary(self.results) + "\n")
        else:
            self._stream.write(format_report(self.results, mode=self._mode, verbose=self._verbose) + "\n")
        self._stream.flush()
