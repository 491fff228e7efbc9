"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any file format or presentation details.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Set, Tuple

RELATION_KINDS = ("composition", "aggregation", "association")


@dataclass(frozen=True)
class RoleSpec:
    """A named responsibility plus the capabilities a filling type needs."""

    name: str
    abstract: bool = False
    methods: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Constraint:
    """A structural rule over one or more roles."""

    kind: str
    roles: Tuple[str, ...]
    description: str
    params: Tuple[Tuple[str, Tuple[str, ...]], ...] = ()

    def param(self, key: str) -> Tuple[str, ...]:
        for name, values in self.params:
            if name == key:
                return values
        return ()


@dataclass(frozen=True)
class PatternDefinition:
    """Compiled catalog entry. Immutable once the catalog is loaded."""

    name: str
    description: str
    roles: Tuple[RoleSpec, ...]
    constraints: Tuple[Constraint, ...]

    @property
    def role_names(self) -> Tuple[str, ...]:
        return tuple(role.name for role in self.roles)


@dataclass(frozen=True)
class MethodDecl:
    name: str
    abstract: bool = False


@dataclass(frozen=True)
class TypeDecl:
    """One declared type of an example."""

    name: str
    bases: Tuple[str, ...] = ()
    methods: Tuple[MethodDecl, ...] = ()
    abstract: bool = False
    roles: Tuple[str, ...] = ()
    line: Optional[int] = None

    @property
    def method_names(self) -> Set[str]:
        return {method.name for method in self.methods}

    @property
    def abstract_method_names(self) -> Set[str]:
        return {method.name for method in self.methods if method.abstract}


@dataclass(frozen=True)
class Relation:
    """A reference held by one type to another (composition and friends)."""

    kind: str
    source: str
    target: str


@dataclass(frozen=True)
class CallEdge:
    caller_type: str
    caller_method: str
    callee_type: str
    callee_method: str


@dataclass(frozen=True)
class ExampleDescriptor:
    """Structural description of one code sample.

    Bases may name types that are not declared here (``ABC``, ``object``,
    framework classes); ancestry queries simply stop at such names.
    """

    name: str
    location: str
    types: Mapping[str, TypeDecl]
    relations: Tuple[Relation, ...] = ()
    calls: Tuple[CallEdge, ...] = ()
    expects: Optional[str] = None

    def ancestors(self, type_name: str) -> List[str]:
        """Return every ancestor of ``type_name``, nearest first."""

        seen: List[str] = []
        queue = list(self.types[type_name].bases) if type_name in self.types else []
        while queue:
            current = queue.pop(0)
            if current in seen or current == type_name:
                continue
            seen.append(current)
            declared = self.types.get(current)
            if declared is not None:
                queue.extend(declared.bases)
        return seen

    def lineage(self, type_name: str) -> List[str]:
        """The type itself followed by its ancestors."""

        return [type_name] + self.ancestors(type_name)

    def methods_of(self, type_name: str) -> Set[str]:
        """Methods defined on the type or inherited from declared ancestors."""

        names: Set[str] = set()
        for current in self.lineage(type_name):
            declared = self.types.get(current)
            if declared is not None:
                names |= declared.method_names
        return names

    def is_abstract(self, type_name: str) -> bool:
        declared = self.types[type_name]
        return declared.abstract or bool(declared.abstract_method_names)

    def holds(self, source: str, target: str, kinds: Tuple[str, ...] = RELATION_KINDS) -> bool:
        """True if ``source`` keeps a reference to ``target`` or one of its ancestors."""

        accepted = set(self.lineage(target))
        return any(
            relation.source == source and relation.target in accepted and relation.kind in kinds
            for relation in self.relations
        )

    def calls_between(self, source: str, target: str) -> List[CallEdge]:
        accepted = set(self.lineage(target))
        return [
            edge
            for edge in self.calls
            if edge.caller_type == source and edge.callee_type in accepted
        ]


@dataclass(frozen=True)
class ConstraintOutcome:
    """Outcome of one role-presence check or one constraint."""

    label: str
    satisfied: bool
    roles: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MatchResult:
    """Pairs one pattern with one example and records every check."""

    pattern: PatternDefinition
    example: ExampleDescriptor
    binding: Dict[str, Optional[str]] = field(default_factory=dict)
    outcomes: Tuple[ConstraintOutcome, ...] = ()

    @property
    def unsatisfied(self) -> List[ConstraintOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.satisfied]

    @property
    def first_failure(self) -> Optional[ConstraintOutcome]:
        failures = self.unsatisfied
        return failures[0] if failures else None

    @property
    def roles_matched(self) -> int:
        return sum(1 for type_name in self.binding.values() if type_name is not None)

    @property
    def passed(self) -> bool:
        return not self.unsatisfied
