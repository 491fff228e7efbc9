"""Structural constraint predicates (core domain).

Every constraint kind names the role fields it reads from the catalog entry,
a description template and a predicate over the bound type names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Tuple

from core.models import Constraint, ExampleDescriptor

Predicate = Callable[[ExampleDescriptor, Tuple[str, ...], Constraint], bool]


@dataclass(frozen=True)
class ConstraintKind:
    name: str
    role_fields: Tuple[str, ...]
    template: str
    check: Predicate
    list_fields: Tuple[str, ...] = ()


def _inherits(example: ExampleDescriptor, types: Tuple[str, ...], _: Constraint) -> bool:
    source, target = types
    return target in example.ancestors(source)


def _overrides_abstract(example: ExampleDescriptor, types: Tuple[str, ...], _: Constraint) -> bool:
    source, target = types
    lineage = example.lineage(source)
    if target not in lineage:
        return False
    declared_abstract = example.types[target].abstract_method_names
    if not declared_abstract:
        return False
    # Anything between the subtype and the declaring base counts as an override.
    overriding = lineage[: lineage.index(target)]
    for name in overriding:
        declared = example.types.get(name)
        if declared is None:
            continue
        concrete = declared.method_names - declared.abstract_method_names
        if concrete & declared_abstract:
            return True
    return False


def _abstract(example: ExampleDescriptor, types: Tuple[str, ...], _: Constraint) -> bool:
    return example.is_abstract(types[0])


def _defines(example: ExampleDescriptor, types: Tuple[str, ...], constraint: Constraint) -> bool:
    required = set(constraint.param("methods"))
    return required <= example.methods_of(types[0])


def _composes(example: ExampleDescriptor, types: Tuple[str, ...], _: Constraint) -> bool:
    source, target = types
    return example.holds(source, target)


def _aggregates(example: ExampleDescriptor, types: Tuple[str, ...], _: Constraint) -> bool:
    source, target = types
    return example.holds(source, target, kinds=("aggregation",))


def _delegates(example: ExampleDescriptor, types: Tuple[str, ...], _: Constraint) -> bool:
    source, target = types
    return bool(example.calls_between(source, target))


def _self_calls_abstract(example: ExampleDescriptor, types: Tuple[str, ...], _: Constraint) -> bool:
    type_name = types[0]
    declared = example.types[type_name]
    abstract_steps = declared.abstract_method_names
    concrete = declared.method_names - abstract_steps
    return any(
        edge.caller_type == type_name
        and edge.caller_method in concrete
        and edge.callee_type == type_name
        and edge.callee_method in abstract_steps
        for edge in example.calls
    )


def _distinct_hierarchy(example: ExampleDescriptor, types: Tuple[str, ...], _: Constraint) -> bool:
    source, target = types
    return target not in example.ancestors(source) and source not in example.ancestors(target)


CONSTRAINT_KINDS: Mapping[str, ConstraintKind] = {
    kind.name: kind
    for kind in (
        ConstraintKind("inherits", ("source", "target"), "{source} inherits from {target}", _inherits),
        ConstraintKind(
            "overrides_abstract",
            ("source", "target"),
            "{source} overrides a method declared abstract in {target}",
            _overrides_abstract,
        ),
        ConstraintKind("abstract", ("role",), "{role} declares abstract methods", _abstract),
        ConstraintKind(
            "defines",
            ("role",),
            "{role} defines {methods}",
            _defines,
            list_fields=("methods",),
        ),
        ConstraintKind("composes", ("source", "target"), "{source} holds a reference to {target}", _composes),
        ConstraintKind(
            "aggregates",
            ("source", "target"),
            "{source} keeps a collection of {target}",
            _aggregates,
        ),
        ConstraintKind("delegates", ("source", "target"), "{source} calls into {target}", _delegates),
        ConstraintKind(
            "self_calls_abstract",
            ("role",),
            "{role} has a concrete method calling its own abstract step",
            _self_calls_abstract,
        ),
        ConstraintKind(
            "distinct_hierarchy",
            ("source", "target"),
            "{source} and {target} are in separate hierarchies",
            _distinct_hierarchy,
        ),
    )
}


def describe(kind: ConstraintKind, roles: Tuple[str, ...], params: Dict[str, Tuple[str, ...]]) -> str:
    """Render the default human-readable description for a constraint."""

    values = dict(zip(kind.role_fields, roles))
    for key in kind.list_fields:
        values[key] = ", ".join(params.get(key, ()))
    return kind.template.format(**values)


def check_constraint(
    example: ExampleDescriptor,
    constraint: Constraint,
    binding: Mapping[str, Optional[str]],
) -> bool:
    """Evaluate one constraint; unbound roles never satisfy it."""

    bound = tuple(binding.get(role) for role in constraint.roles)
    if any(type_name is None for type_name in bound):
        return False
    kind = CONSTRAINT_KINDS[constraint.kind]
    return kind.check(example, bound, constraint)
