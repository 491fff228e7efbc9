from __future__ import annotations

import pytest

from core.catalog import build_pattern
from core.constraints import CONSTRAINT_KINDS, check_constraint
from core.descriptors import build_descriptor

EXAMPLE = build_descriptor(
    {
        "name": "shop",
        "types": [
            {"name": "Report", "bases": ["ABC"], "methods": ["render", {"name": "body", "abstract": True}]},
            {"name": "SalesReport", "bases": ["Report"], "methods": ["body"]},
            {"name": "DailySales", "bases": ["SalesReport"]},
            {"name": "Printer", "methods": ["print_report"]},
            {"name": "Outbox", "methods": ["flush"]},
        ],
        "relations": [
            {"kind": "association", "source": "Printer", "target": "Report"},
            {"kind": "aggregation", "source": "Outbox", "target": "SalesReport"},
        ],
        "calls": [
            {"caller": "Report.render", "callee": "Report.body"},
            {"caller": "Printer.print_report", "callee": "Report.render"},
        ],
    }
)


def _constraint(raw: dict):
    pattern = build_pattern(
        {"name": "Probe", "roles": ["a", "b"], "constraints": [raw]},
        location="probe",
    )
    return pattern.constraints[0]


@pytest.mark.parametrize(
    ("raw", "binding", "expected"),
    [
        ({"kind": "inherits", "source": "a", "target": "b"}, ("DailySales", "Report"), True),
        ({"kind": "inherits", "source": "a", "target": "b"}, ("Printer", "Report"), False),
        ({"kind": "overrides_abstract", "source": "a", "target": "b"}, ("SalesReport", "Report"), True),
        ({"kind": "overrides_abstract", "source": "a", "target": "b"}, ("DailySales", "Report"), True),
        ({"kind": "overrides_abstract", "source": "a", "target": "b"}, ("Printer", "Report"), False),
        ({"kind": "abstract", "role": "a"}, ("Report", None), True),
        ({"kind": "abstract", "role": "a"}, ("SalesReport", None), False),
        ({"kind": "defines", "role": "a", "methods": ["render", "body"]}, ("DailySales", None), True),
        ({"kind": "defines", "role": "a", "methods": ["flush"]}, ("Printer", None), False),
        ({"kind": "composes", "source": "a", "target": "b"}, ("Printer", "Report"), True),
        ({"kind": "composes", "source": "a", "target": "b"}, ("Outbox", "Report"), False),
        ({"kind": "aggregates", "source": "a", "target": "b"}, ("Outbox", "SalesReport"), True),
        ({"kind": "aggregates", "source": "a", "target": "b"}, ("Printer", "Report"), False),
        ({"kind": "delegates", "source": "a", "target": "b"}, ("Printer", "SalesReport"), True),
        ({"kind": "delegates", "source": "a", "target": "b"}, ("Outbox", "Report"), False),
        ({"kind": "self_calls_abstract", "role": "a"}, ("Report", None), True),
        ({"kind": "self_calls_abstract", "role": "a"}, ("SalesReport", None), False),
        ({"kind": "distinct_hierarchy", "source": "a", "target": "b"}, ("Printer", "Report"), True),
        ({"kind": "distinct_hierarchy", "source": "a", "target": "b"}, ("Report", "DailySales"), False),
    ],
)
def test_constraint_kinds(raw: dict, binding: tuple, expected: bool) -> None:
    constraint = _constraint(raw)
    bound = dict(zip(("a", "b"), binding))
    assert check_constraint(EXAMPLE, constraint, bound) is expected


def test_unbound_role_never_satisfies() -> None:
    constraint = _constraint({"kind": "distinct_hierarchy", "source": "a", "target": "b"})
    assert check_constraint(EXAMPLE, constraint, {"a": "Printer", "b": None}) is False


def test_every_kind_renders_a_default_description() -> None:
    for name, kind in CONSTRAINT_KINDS.items():
        raw = {"kind": name, "methods": ["run"]}
        raw.update({field: "a" if index == 0 else "b" for index, field in enumerate(kind.role_fields)})
        assert _constraint(raw).description


def test_explicit_description_wins() -> None:
    constraint = _constraint({"kind": "inherits", "source": "a", "target": "b", "description": "a extends b"})
    assert constraint.description == "a extends b"
