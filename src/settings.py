"""Static configuration for patternscope.

All user-editable settings (default catalog, report format, matcher limits,
logging) live in a single JSON file for quick edits without touching Python.
The file is optional: every setting has a default so the CLI works from any
directory.
"""

import json
import os
from typing import Optional

from dotenv import load_dotenv

from core.config import MatcherConfig, ReportConfig
from core.errors import ConfigError

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# PATTERNSCOPE_CONFIG may point at another config file (read from .env too).
load_dotenv()
CONFIG_PATH = os.getenv("PATTERNSCOPE_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        return {}

    try:
        with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
            loaded = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{CONFIG_PATH}:{exc.lineno}:{exc.colno}", f"invalid JSON: {exc.msg}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(CONFIG_PATH, f"not valid UTF-8 (byte {exc.start})") from exc
    except OSError as exc:
        raise ConfigError(CONFIG_PATH, f"cannot read file: {exc.strerror or exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(CONFIG_PATH, "config root must be an object")
    return loaded


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


# A broken config file must not stop imports; the CLI reports it as an input
# error and defaults apply meanwhile.
CONFIG_ERROR: Optional[ConfigError] = None
try:
    _CONFIG = _load_json_config()
except ConfigError as exc:
    CONFIG_ERROR = exc
    _CONFIG = {}

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Catalog used when a command is run without an explicit catalog path.
CATALOG_PATH = _resolve_path(_CONFIG.get("catalog_path", "catalog.json"))

# Report defaults; CLI flags override them per run.
_report = _CONFIG.get("report", {})
REPORT_FORMAT = _report.get("format", "text")
REPORT_VERBOSE = bool(_report.get("verbose", False))

# Upper bound on role bindings tried per pattern and example.
_matcher = _CONFIG.get("matcher", {})
MAX_BINDINGS = int(_matcher.get("max_bindings", 20000))

REPORT = ReportConfig(format=REPORT_FORMAT, verbose=REPORT_VERBOSE)
MATCHER = MatcherConfig(max_bindings=MAX_BINDINGS)

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
