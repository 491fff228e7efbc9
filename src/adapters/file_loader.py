"""File adapters for catalogs and example descriptors.

All filesystem access lives here; the core only sees parsed objects. Read and
parse failures are converted to the core error types with the file path as
location so the CLI can report them uniformly.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Type

from adapters.python_source import describe_source
from core.catalog import build_catalog
from core.descriptors import build_descriptor
from core.errors import ConfigError, MatchError, PatternScopeError
from core.models import ExampleDescriptor, PatternDefinition

LOGGER = logging.getLogger(__name__)

EXAMPLE_SUFFIXES = (".json", ".py")


def _read_text(path: str, error_cls: Type[PatternScopeError]) -> str:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return handle.read()
    except OSError as exc:
        raise error_cls(path, f"cannot read file: {exc.strerror or exc}") from exc
    except UnicodeDecodeError as exc:
        raise error_cls(path, f"not valid UTF-8 (byte {exc.start})") from exc


def read_json(path: str, error_cls: Type[PatternScopeError]) -> Any:
    """Parse a JSON file, reporting decode errors with line and column."""

    text = _read_text(path, error_cls)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise error_cls(f"{path}:{exc.lineno}:{exc.colno}", f"invalid JSON: {exc.msg}") from exc


def load_catalog(path: str) -> Dict[str, PatternDefinition]:
    """Read and compile a catalog file."""

    catalog = build_catalog(read_json(path, ConfigError), location=path)
    LOGGER.info("%s patterns are loaded from %s", len(catalog), path)
    return catalog


def read_source(path: str) -> str:
    """Read a Python example; failures are reported as MatchError."""

    return _read_text(path, MatchError)


def load_descriptor(path: str) -> ExampleDescriptor:
    """Load an example from a JSON descriptor or a Python source file."""

    if path.endswith(".py"):
        return describe_source(read_source(path), location=path)
    return build_descriptor(read_json(path, MatchError), location=path)


def collect_example_paths(paths: Iterable[str]) -> List[str]:
    """Expand directories to the example files they contain, sorted by path."""

    collected: List[str] = []
    for path in paths:
        if os.path.isdir(path):
            found = []
            for root, dirs, files in os.walk(path):
                dirs[:] = sorted(d for d in dirs if not d.startswith((".", "__")))
                for name in files:
                    if name.endswith(EXAMPLE_SUFFIXES):
                        found.append(os.path.join(root, name))
            if not found:
                LOGGER.warning("No example files found under %s", path)
            collected.extend(sorted(found))
        else:
            collected.append(path)
    return collected


def load_examples(paths: Iterable[str]) -> List[ExampleDescriptor]:
    return [load_descriptor(path) for path in collect_example_paths(paths)]
