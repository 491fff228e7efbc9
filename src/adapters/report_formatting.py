"""Shared report formatting helpers.

Keeping formatting here prevents drift between the console reporter and the
TUI and keeps report lines consistent regardless of output channel.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from core.models import MatchResult

STATUS_PASS = "PASS"
STATUS_FAIL = "FAIL"


def _status(result: MatchResult) -> str:
    return STATUS_PASS if result.passed else STATUS_FAIL


def format_binding(result: MatchResult) -> str:
    """Return ``role=Type`` pairs in role order, ``-`` for unbound roles."""

    parts = [f"{role}={result.binding.get(role) or '-'}" for role in result.pattern.role_names]
    return ", ".join(parts)


def _is_nearest(result: MatchResult) -> bool:
    return not result.passed and result.example.expects is None


def pattern_label(result: MatchResult) -> str:
    """The matched or expected pattern, or the nearest one when nothing matched."""

    if _is_nearest(result):
        return f"no pattern (nearest: {result.pattern.name})"
    return result.pattern.name


def format_result_line(result: MatchResult) -> str:
    """One summary line: status, example, pattern and the first failure."""

    line = f"{_status(result)}  {result.example.name}  {pattern_label(result)}"
    if result.passed:
        return line
    failure = result.first_failure
    if failure is not None:
        line += f"  unsatisfied: {failure.label}"
    return line


def format_summary(results: Sequence[MatchResult]) -> str:
    passed = sum(1 for result in results if result.passed)
    return f"{len(results)} examples, {passed} passed, {len(results) - passed} failed"


def _format_text(results: Sequence[MatchResult], verbose: bool) -> str:
    lines: List[str] = []
    for result in results:
        lines.append(format_result_line(result))
        if verbose:
            lines.append(f"    roles: {format_binding(result)}")
            for outcome in result.outcomes:
                mark = "ok " if outcome.satisfied else "-- "
                lines.append(f"    {mark}{outcome.label}")
    lines.append(format_summary(results))
    return "\n".join(lines)


def _format_markdown(results: Sequence[MatchResult], verbose: bool) -> str:
    def escape_md(value: str) -> str:
        for ch in r"\*_`[|":
            value = value.replace(ch, f"\\{ch}")
        return value

    lines = [
        "| status | example | pattern | first unsatisfied |",
        "| --- | --- | --- | --- |",
    ]
    for result in results:
        failure = result.first_failure
        lines.append(
            "| {status} | {example} | {pattern} | {failure} |".format(
                status=f"**{_status(result)}**",
                example=escape_md(result.example.name),
                pattern=escape_md(pattern_label(result)),
                failure=escape_md(failure.label) if failure and not result.passed else "",
            )
        )
    if verbose:
        for result in results:
            lines.extend(["", f"### {escape_md(result.example.name)}", ""])
            lines.append(f"Roles: {escape_md(format_binding(result))}")
            lines.append("")
            for outcome in result.outcomes:
                box = "x" if outcome.satisfied else " "
                lines.append(f"- [{box}] {escape_md(outcome.label)}")
    lines.extend(["", format_summary(results)])
    return "\n".join(lines)


def result_to_dict(result: MatchResult) -> Dict[str, Any]:
    failure = result.first_failure
    return {
        "example": result.example.name,
        "location": result.example.location,
        "pattern": None if _is_nearest(result) else result.pattern.name,
        "nearest": result.pattern.name if _is_nearest(result) else None,
        "expects": result.example.expects,
        "passed": result.passed,
        "binding": {role: result.binding.get(role) for role in result.pattern.role_names},
        "first_unsatisfied": failure.label if failure else None,
        "outcomes": [
            {"label": outcome.label, "satisfied": outcome.satisfied, "roles": list(outcome.roles)}
            for outcome in result.outcomes
        ],
    }


def _format_json(results: Sequence[MatchResult]) -> str:
    passed = sum(1 for result in results if result.passed)
    payload = {
        "results": [result_to_dict(result) for result in results],
        "summary": {"total": len(results), "passed": passed, "failed": len(results) - passed},
    }
    return json.dumps(payload, indent=2, ensure_ascii=True)


def format_report(results: Sequence[MatchResult], mode: str = "text", verbose: bool = False) -> str:
    """Return the report formatted for the requested mode."""

    if mode == "text":
        return _format_text(results, verbose)
    if mode == "markdown":
        return _format_markdown(results, verbose)
    if mode == "json":
        return _format_json(results)
    raise ValueError(f"Unsupported report format: {mode}")
