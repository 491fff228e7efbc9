"""Example descriptor validation (core domain).

Descriptors arrive as parsed JSON (or as dicts produced by the Python source
extractor) and are normalized into immutable ExampleDescriptor objects.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Tuple

from core.errors import MatchError
from core.models import RELATION_KINDS, CallEdge, ExampleDescriptor, MethodDecl, Relation, TypeDecl


def _names(value: Any, location: str, field: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) and item for item in value):
        raise MatchError(location, f"'{field}' must be a list of names")
    return tuple(value)


def _build_method(raw: Any, location: str) -> MethodDecl:
    if isinstance(raw, str) and raw:
        return MethodDecl(name=raw)
    if isinstance(raw, dict) and isinstance(raw.get("name"), str) and raw["name"]:
        return MethodDecl(name=raw["name"], abstract=bool(raw.get("abstract", False)))
    raise MatchError(location, "method must be a name or an object with a name")


def _build_type(raw: Any, location: str) -> TypeDecl:
    if not isinstance(raw, dict):
        raise MatchError(location, "type entry must be an object")
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise MatchError(location, "type name is required")

    raw_methods = raw.get("methods", []) or []
    if not isinstance(raw_methods, list):
        raise MatchError(location, "'methods' must be a list")
    methods = tuple(
        _build_method(item, f"{location}.methods[{index}]") for index, item in enumerate(raw_methods)
    )

    line = raw.get("line")
    return TypeDecl(
        name=name.strip(),
        bases=_names(raw.get("bases"), location, "bases"),
        methods=methods,
        abstract=bool(raw.get("abstract", False)),
        roles=_names(raw.get("roles"), location, "roles"),
        line=line if isinstance(line, int) else None,
    )


def _type_entries(raw_types: Any, location: str) -> List[Tuple[str, Any]]:
    """Accept either a list of type objects or a name -> entry object."""

    if isinstance(raw_types, list):
        return [(f"{location}: types[{index}]", item) for index, item in enumerate(raw_types)]
    if isinstance(raw_types, dict):
        entries = []
        for name, entry in raw_types.items():
            entry = dict(entry) if isinstance(entry, dict) else entry
            if isinstance(entry, dict):
                entry.setdefault("name", name)
            entries.append((f"{location}: types.{name}", entry))
        return entries
    raise MatchError(location, "descriptor is missing its 'types' table")


def _split_ref(value: Any, location: str, field: str) -> Tuple[str, str]:
    if not isinstance(value, str) or "." not in value:
        raise MatchError(location, f"'{field}' must look like 'Type.method'")
    type_name, _, method = value.rpartition(".")
    if not type_name or not method:
        raise MatchError(location, f"'{field}' must look like 'Type.method'")
    return type_name, method


def _build_relation(raw: Any, types: Dict[str, TypeDecl], location: str) -> Relation:
    if not isinstance(raw, dict):
        raise MatchError(location, "relation must be an object")
    kind = raw.get("kind", "composition")
    if kind not in RELATION_KINDS:
        raise MatchError(location, f"unknown relation kind {kind!r}")
    source = raw.get("source")
    target = raw.get("target")
    for field, value in (("source", source), ("target", target)):
        if value not in types:
            raise MatchError(location, f"relation {field} {value!r} is not a declared type")
    return Relation(kind=kind, source=source, target=target)


def _build_call(raw: Any, types: Dict[str, TypeDecl], location: str) -> CallEdge:
    if not isinstance(raw, dict):
        raise MatchError(location, "call must be an object")
    caller_type, caller_method = _split_ref(raw.get("caller"), location, "caller")
    callee_type, callee_method = _split_ref(raw.get("callee"), location, "callee")
    for field, value in (("caller", caller_type), ("callee", callee_type)):
        if value not in types:
            raise MatchError(location, f"call {field} {value!r} is not a declared type")
    return CallEdge(
        caller_type=caller_type,
        caller_method=caller_method,
        callee_type=callee_type,
        callee_method=callee_method,
    )


def build_descriptor(raw: Any, location: str = "<example>") -> ExampleDescriptor:
    """Validate a parsed descriptor and return an ExampleDescriptor.

    Raises MatchError when the type table is missing or malformed, or when
    relations and calls point at undeclared types.
    """

    if not isinstance(raw, dict):
        raise MatchError(location, "descriptor root must be an object")
    if "types" not in raw:
        raise MatchError(location, "descriptor is missing its 'types' table")

    types: Dict[str, TypeDecl] = {}
    for entry_location, entry in _type_entries(raw["types"], location):
        declared = _build_type(entry, entry_location)
        if declared.name in types:
            raise MatchError(entry_location, f"type '{declared.name}' is declared twice")
        types[declared.name] = declared

    raw_relations = raw.get("relations", []) or []
    raw_calls = raw.get("calls", []) or []
    if not isinstance(raw_relations, list):
        raise MatchError(location, "'relations' must be a list")
    if not isinstance(raw_calls, list):
        raise MatchError(location, "'calls' must be a list")

    relations = tuple(
        _build_relation(item, types, f"{location}: relations[{index}]")
        for index, item in enumerate(raw_relations)
    )
    calls = tuple(
        _build_call(item, types, f"{location}: calls[{index}]") for index, item in enumerate(raw_calls)
    )

    expects = raw.get("expects")
    if expects is not None and not isinstance(expects, str):
        raise MatchError(location, "'expects' must be a pattern name")

    name = raw.get("name") or os.path.splitext(os.path.basename(location))[0] or location
    return ExampleDescriptor(
        name=str(name),
        location=location,
        types=types,
        relations=relations,
        calls=calls,
        expects=expects or None,
    )
