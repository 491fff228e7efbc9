from __future__ import annotations

import json
from pathlib import Path

import pytest

from adapters.file_loader import load_catalog
from core.catalog import build_catalog
from core.errors import ConfigError

ROOT = Path(__file__).resolve().parents[1]


def _template_entry(**overrides) -> dict:
    entry = {
        "name": "Template",
        "roles": [{"name": "base", "abstract": True}, "subclass"],
        "constraints": [
            {"kind": "inherits", "source": "subclass", "target": "base"},
            {"kind": "overrides_abstract", "source": "subclass", "target": "base"},
        ],
    }
    entry.update(overrides)
    return entry


def test_build_catalog_compiles_roles_and_constraints() -> None:
    catalog = build_catalog({"patterns": [_template_entry()]})

    template = catalog["Template"]
    assert template.role_names == ("base", "subclass")
    assert template.roles[0].abstract is True
    assert [c.kind for c in template.constraints] == ["inherits", "overrides_abstract"]
    assert template.constraints[1].description == "subclass overrides a method declared abstract in base"


def test_loading_twice_yields_identical_definitions() -> None:
    raw = json.loads((ROOT / "catalog.json").read_text(encoding="utf-8"))
    assert build_catalog(raw) == build_catalog(raw)
    assert load_catalog(str(ROOT / "catalog.json")) == load_catalog(str(ROOT / "catalog.json"))


def test_bundled_catalog_covers_documented_patterns() -> None:
    catalog = load_catalog(str(ROOT / "catalog.json"))
    assert set(catalog) == {"Template", "Strategy", "Observer", "Command", "Adapter"}


def test_duplicate_pattern_name_is_rejected() -> None:
    with pytest.raises(ConfigError) as excinfo:
        build_catalog({"patterns": [_template_entry(), _template_entry()]}, location="cat.json")
    assert "duplicate pattern name 'Template'" in str(excinfo.value)
    assert excinfo.value.location == "cat.json: patterns[1]"


def test_disabled_entries_are_skipped_before_duplicate_check() -> None:
    catalog = build_catalog({"patterns": [_template_entry(enabled=False), _template_entry()]})
    assert list(catalog) == ["Template"]


def test_constraint_with_undefined_role_is_rejected() -> None:
    entry = _template_entry(constraints=[{"kind": "inherits", "source": "child", "target": "base"}])
    with pytest.raises(ConfigError) as excinfo:
        build_catalog({"patterns": [entry]}, location="cat.json")
    assert "undefined role 'child'" in excinfo.value.message
    assert excinfo.value.location == "cat.json: patterns[0].constraints[0]"


def test_unknown_constraint_kind_is_rejected() -> None:
    entry = _template_entry(constraints=[{"kind": "implements", "source": "subclass", "target": "base"}])
    with pytest.raises(ConfigError, match="unknown constraint kind"):
        build_catalog({"patterns": [entry]})


def test_constraint_missing_role_field_is_rejected() -> None:
    entry = _template_entry(constraints=[{"kind": "inherits", "source": "subclass"}])
    with pytest.raises(ConfigError, match="requires 'target'"):
        build_catalog({"patterns": [entry]})


def test_defines_constraint_requires_methods() -> None:
    entry = _template_entry(constraints=[{"kind": "defines", "role": "base"}])
    with pytest.raises(ConfigError, match="requires 'methods'"):
        build_catalog({"patterns": [entry]})


def test_role_declared_twice_is_rejected() -> None:
    entry = _template_entry(roles=["base", "base"], constraints=[])
    with pytest.raises(ConfigError, match="declared twice"):
        build_catalog({"patterns": [entry]})


@pytest.mark.parametrize(
    "raw",
    [
        [],
        {"patterns": "Template"},
        {"patterns": []},
        {"patterns": [{"roles": ["a"]}]},
        {"patterns": [{"name": "Empty", "roles": []}]},
    ],
)
def test_malformed_catalogs_raise_config_error(raw) -> None:
    with pytest.raises(ConfigError):
        build_catalog(raw)


def test_load_catalog_reports_json_position(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text('{"patterns": [\n  {"name": }\n]}', encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_catalog(str(path))
    assert excinfo.value.location.startswith(f"{path}:2:")
    assert "invalid JSON" in excinfo.value.message


def test_load_catalog_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="cannot read file"):
        load_catalog(str(tmp_path / "missing.json"))
