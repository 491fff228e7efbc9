from __future__ import annotations

import pytest

from core.descriptors import build_descriptor
from core.errors import MatchError


def test_build_descriptor_normalizes_types_and_edges() -> None:
    example = build_descriptor(
        {
            "name": "orders",
            "types": [
                {"name": "Order", "bases": ["ABC"], "methods": ["process", {"name": "ship", "abstract": True}]},
                {"name": "DomesticOrder", "bases": ["Order"], "methods": ["ship"]},
            ],
            "calls": [{"caller": "Order.process", "callee": "Order.ship"}],
        },
        location="orders.json",
    )

    assert example.name == "orders"
    assert example.types["Order"].abstract_method_names == {"ship"}
    assert example.is_abstract("Order")
    assert not example.is_abstract("DomesticOrder")
    assert example.ancestors("DomesticOrder") == ["Order", "ABC"]
    assert example.calls[0].callee_method == "ship"


def test_types_may_be_given_as_an_object() -> None:
    example = build_descriptor({"types": {"A": {"methods": ["run"]}, "B": {"bases": ["A"]}}}, location="x.json")
    assert set(example.types) == {"A", "B"}
    assert example.methods_of("B") == {"run"}


def test_name_defaults_to_file_stem() -> None:
    example = build_descriptor({"types": [{"name": "A"}]}, location="samples/adapter_demo.json")
    assert example.name == "adapter_demo"


def test_missing_type_table_raises_match_error() -> None:
    with pytest.raises(MatchError) as excinfo:
        build_descriptor({"name": "empty"}, location="empty.json")
    assert excinfo.value.location == "empty.json"
    assert "'types' table" in excinfo.value.message


def test_duplicate_type_is_rejected() -> None:
    with pytest.raises(MatchError, match="declared twice"):
        build_descriptor({"types": [{"name": "A"}, {"name": "A"}]})


def test_relation_to_undeclared_type_is_rejected() -> None:
    raw = {
        "types": [{"name": "A"}],
        "relations": [{"kind": "composition", "source": "A", "target": "Missing"}],
    }
    with pytest.raises(MatchError) as excinfo:
        build_descriptor(raw, location="a.json")
    assert excinfo.value.location == "a.json: relations[0]"


def test_unknown_relation_kind_is_rejected() -> None:
    raw = {
        "types": [{"name": "A"}, {"name": "B"}],
        "relations": [{"kind": "friendship", "source": "A", "target": "B"}],
    }
    with pytest.raises(MatchError, match="unknown relation kind"):
        build_descriptor(raw)


def test_malformed_call_reference_is_rejected() -> None:
    raw = {"types": [{"name": "A"}], "calls": [{"caller": "A", "callee": "A.run"}]}
    with pytest.raises(MatchError, match="Type.method"):
        build_descriptor(raw)


def test_bases_may_reference_external_types() -> None:
    example = build_descriptor({"types": [{"name": "Handler", "bases": ["BaseHTTPRequestHandler"]}]})
    assert example.ancestors("Handler") == ["BaseHTTPRequestHandler"]


def test_holds_accepts_ancestor_targets() -> None:
    example = build_descriptor(
        {
            "types": [
                {"name": "Context"},
                {"name": "Strategy", "methods": [{"name": "run", "abstract": True}]},
                {"name": "Fast", "bases": ["Strategy"], "methods": ["run"]},
            ],
            "relations": [{"kind": "association", "source": "Context", "target": "Strategy"}],
        }
    )
    assert example.holds("Context", "Strategy")
    assert not example.holds("Context", "Strategy", kinds=("aggregation",))
    assert not example.holds("Strategy", "Context")
