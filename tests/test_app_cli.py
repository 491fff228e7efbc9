from __future__ import annotations

import io
import json
import os
import subprocess
import sys
from pathlib import Path

import app
from core.errors import ConfigError

ROOT = Path(__file__).resolve().parents[1]
CATALOG = str(ROOT / "catalog.json")
SAMPLES = ROOT / "samples"


def _run(*argv: str) -> tuple[int, str, str]:
    stdout = io.StringIO()
    stderr = io.StringIO()
    code = app.main(list(argv), stdout=stdout, stderr=stderr)
    return code, stdout.getvalue(), stderr.getvalue()


def test_check_passing_examples_exits_zero() -> None:
    code, out, err = _run("check", CATALOG, str(SAMPLES / "template_order.py"), str(SAMPLES / "adapter_payment.py"))

    assert code == app.EXIT_OK
    assert out.splitlines() == [
        "PASS  template_order  Template",
        "PASS  adapter_payment  Adapter",
        "2 examples, 2 passed, 0 failed",
    ]
    assert err == ""


def test_check_directory_with_unmatched_example_exits_one() -> None:
    code, out, _ = _run("check", CATALOG, str(SAMPLES))

    assert code == app.EXIT_UNMATCHED
    assert "FAIL  plain-records  no pattern (nearest: Adapter)" in out
    assert out.splitlines()[-1] == "7 examples, 6 passed, 1 failed"


def test_check_json_format() -> None:
    code, out, _ = _run("check", CATALOG, str(SAMPLES / "order_template.json"), "--format", "json")

    assert code == app.EXIT_OK
    payload = json.loads(out)
    assert payload["results"][0]["pattern"] == "Template"


def test_invalid_catalog_exits_two(tmp_path: Path) -> None:
    catalog = tmp_path / "catalog.json"
    catalog.write_text(json.dumps({"patterns": [{"name": "X", "roles": ["a"], "constraints": [{"kind": "nope"}]}]}))

    code, out, err = _run("check", str(catalog), str(SAMPLES / "order_template.json"))

    assert code == app.EXIT_INPUT_ERROR
    assert out == ""
    assert err.startswith(f"error: {catalog}: patterns[0].constraints[0]: unknown constraint kind")


def test_missing_example_exits_two(tmp_path: Path) -> None:
    code, _, err = _run("check", CATALOG, str(tmp_path / "missing.json"))

    assert code == app.EXIT_INPUT_ERROR
    assert "cannot read file" in err


def test_describe_prints_descriptor(tmp_path: Path) -> None:
    code, out, _ = _run("describe", str(SAMPLES / "template_order.py"))

    assert code == app.EXIT_OK
    raw = json.loads(out)
    assert raw["expects"] == "Template"
    assert [entry["name"] for entry in raw["types"]] == ["Order", "DomesticOrder", "InternationalOrder"]

    target = tmp_path / "order.json"
    code, out, _ = _run("describe", str(SAMPLES / "template_order.py"), "--output", str(target))
    assert code == app.EXIT_OK
    assert out == ""
    assert json.loads(target.read_text(encoding="utf-8")) == raw


def test_described_source_checks_like_the_source(tmp_path: Path) -> None:
    target = tmp_path / "strategy.json"
    _run("describe", str(SAMPLES / "strategy_shipping.py"), "--output", str(target))

    code, out, _ = _run("check", CATALOG, str(target))
    assert code == app.EXIT_OK
    assert out.startswith("PASS  strategy_shipping  Strategy")


def test_list_patterns() -> None:
    code, out, _ = _run("list", CATALOG)

    assert code == app.EXIT_OK
    assert out.splitlines()[0] == "Adapter: target, adapter, adaptee (5 constraints)"
    assert len(out.splitlines()) == 5


def test_example_that_is_not_utf8_exits_two(tmp_path: Path) -> None:
    example = tmp_path / "latin1.json"
    example.write_bytes(b'{"name": "caf\xe9", "types": []}')

    code, out, err = _run("check", CATALOG, str(example))

    assert code == app.EXIT_INPUT_ERROR
    assert out == ""
    assert err.startswith(f"error: {example}: not valid UTF-8")


def test_describe_to_unwritable_path_exits_two(tmp_path: Path) -> None:
    target = tmp_path / "missing-dir" / "order.json"

    code, _, err = _run("describe", str(SAMPLES / "template_order.py"), "--output", str(target))

    assert code == app.EXIT_INPUT_ERROR
    assert err.startswith(f"error: {target}: cannot write file")


def test_broken_config_is_reported_as_input_error(monkeypatch) -> None:
    monkeypatch.setattr(app.settings, "CONFIG_ERROR", ConfigError("config.json:1:2", "invalid JSON: bad"))

    code, out, err = _run("list", CATALOG)

    assert code == app.EXIT_INPUT_ERROR
    assert out == ""
    assert err == "error: config.json:1:2: invalid JSON: bad\n"


def test_broken_config_file_from_environment(tmp_path: Path) -> None:
    config = tmp_path / "config.json"
    config.write_text("{bad", encoding="utf-8")
    env = dict(os.environ, PATTERNSCOPE_CONFIG=str(config), PYTHONPATH=str(ROOT / "src"))

    completed = subprocess.run(
        [sys.executable, str(ROOT / "src" / "app.py"), "list", CATALOG],
        capture_output=True,
        text=True,
        env=env,
        check=False,
    )

    assert completed.returncode == app.EXIT_INPUT_ERROR
    assert completed.stderr.startswith(f"error: {config}:1:2: invalid JSON")
    assert "Traceback" not in completed.stderr
