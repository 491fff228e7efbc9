"""Pattern matching logic (core domain).

Matching logic:
- Each role of a pattern is bound to a distinct declared type that carries
  the role's capabilities (and, when the type lists role hints, the role
  itself). Roles without a candidate stay unbound.
- Complete bindings satisfying every constraint are searched first, with
  roles ordered by candidate count and constraints checked as soon as their
  roles are bound. Without one, partial bindings are ranked: more bound
  roles, then more satisfied constraints.
- Remaining ties go to lexicographically smaller type names.
- A pattern matches when every role is bound and every constraint holds.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from core.constraints import check_constraint
from core.errors import MatchError
from core.models import (
    Constraint,
    ConstraintOutcome,
    ExampleDescriptor,
    MatchResult,
    PatternDefinition,
    RoleSpec,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_BINDINGS = 20000

Binding = Dict[str, Optional[str]]


def _fits_role(example: ExampleDescriptor, type_name: str, role: RoleSpec) -> bool:
    declared = example.types[type_name]
    if declared.roles and role.name not in declared.roles:
        return False
    if role.abstract and not example.is_abstract(type_name):
        return False
    if role.methods and not set(role.methods) <= example.methods_of(type_name):
        return False
    return True


def role_candidates(example: ExampleDescriptor, pattern: PatternDefinition) -> Dict[str, List[str]]:
    """Return the sorted candidate type names for each role."""

    return {
        role.name: sorted(name for name in example.types if _fits_role(example, name, role))
        for role in pattern.roles
    }


def _iter_bindings(
    roles: Tuple[str, ...],
    candidates: Mapping[str, List[str]],
) -> Iterable[Binding]:
    """Yield every injective binding, leaving roles unbound as a last resort."""

    def _walk(index: int, used: set, current: Binding) -> Iterable[Binding]:
        if index == len(roles):
            yield dict(current)
            return
        role = roles[index]
        options: List[Optional[str]] = [name for name in candidates[role] if name not in used]
        options.append(None)
        for option in options:
            current[role] = option
            if option is not None:
                used.add(option)
            yield from _walk(index + 1, used, current)
            if option is not None:
                used.discard(option)
        current.pop(role, None)

    yield from _walk(0, set(), {})


def _score(
    example: ExampleDescriptor,
    pattern: PatternDefinition,
    binding: Binding,
) -> Tuple[int, int]:
    bound = sum(1 for value in binding.values() if value is not None)
    satisfied = sum(1 for constraint in pattern.constraints if check_constraint(example, constraint, binding))
    return bound, satisfied


def _names_key(pattern: PatternDefinition, binding: Binding) -> Tuple[str, ...]:
    # Unbound roles sort after any real type name.
    return tuple(binding.get(role) or "\uffff" for role in pattern.role_names)


class _SearchBudget:
    """Counts assignments tried so one search cannot exceed ``limit``."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.spent = 0

    @property
    def exhausted(self) -> bool:
        return self.spent > self.limit

    def spend(self) -> bool:
        self.spent += 1
        return self.spent <= self.limit


def _satisfying_bindings(
    example: ExampleDescriptor,
    pattern: PatternDefinition,
    candidates: Mapping[str, List[str]],
    budget: _SearchBudget,
) -> Iterable[Binding]:
    """Yield complete bindings under which every constraint holds.

    Roles with the fewest candidates are assigned first, and each constraint
    is checked as soon as its last role is bound, so dead branches are cut
    early.
    """

    order = sorted(pattern.role_names, key=lambda role: len(candidates[role]))
    position = {role: index for index, role in enumerate(order)}
    checks_at: List[List[Constraint]] = [[] for _ in order]
    for constraint in pattern.constraints:
        checks_at[max(position[role] for role in constraint.roles)].append(constraint)

    def _walk(index: int, used: set, current: Binding) -> Iterable[Binding]:
        if index == len(order):
            yield dict(current)
            return
        role = order[index]
        for name in candidates[role]:
            if name in used:
                continue
            if not budget.spend():
                return
            current[role] = name
            if all(check_constraint(example, constraint, current) for constraint in checks_at[index]):
                used.add(name)
                yield from _walk(index + 1, used, current)
                used.discard(name)
            del current[role]

    yield from _walk(0, set(), {})


def find_binding(
    example: ExampleDescriptor,
    pattern: PatternDefinition,
    max_bindings: int = DEFAULT_MAX_BINDINGS,
) -> Binding:
    """Return the best role binding for ``pattern`` in ``example``.

    Complete bindings that satisfy every constraint are searched first; only
    when none exists are partial bindings ranked.
    """

    candidates = role_candidates(example, pattern)
    budget = _SearchBudget(max_bindings)
    satisfying = list(_satisfying_bindings(example, pattern, candidates, budget))
    limited = budget.exhausted
    if satisfying:
        best: Optional[Binding] = min(satisfying, key=lambda binding: _names_key(pattern, binding))
    else:
        best = None
        best_score: Tuple[int, int] = (-1, -1)
        best_names: Tuple[str, ...] = ()
        for count, binding in enumerate(_iter_bindings(pattern.role_names, candidates), start=1):
            if count > max_bindings:
                limited = True
                break
            score = _score(example, pattern, binding)
            names = _names_key(pattern, binding)
            if score > best_score or (score == best_score and names < best_names):
                best, best_score, best_names = binding, score, names

    if limited:
        LOGGER.warning(
            "Binding search for %s in %s stopped after %s candidates",
            pattern.name,
            example.name,
            max_bindings,
        )
    return best or {role: None for role in pattern.role_names}


def _validate(example: ExampleDescriptor) -> None:
    if example.types is None:
        raise MatchError(example.location, "descriptor is missing its 'types' table")
    if not example.types:
        raise MatchError(example.location, "descriptor declares no types")


def evaluate(
    pattern: PatternDefinition,
    example: ExampleDescriptor,
    max_bindings: int = DEFAULT_MAX_BINDINGS,
) -> MatchResult:
    """Check one pattern against one example and record every outcome."""

    _validate(example)
    binding = find_binding(example, pattern, max_bindings)

    outcomes: List[ConstraintOutcome] = []
    for role in pattern.role_names:
        type_name = binding.get(role)
        if type_name is None:
            outcomes.append(
                ConstraintOutcome(
                    label=f"role '{role}' is not filled by any declared type",
                    satisfied=False,
                    roles=(role,),
                )
            )
        else:
            outcomes.append(
                ConstraintOutcome(label=f"role '{role}' is filled by {type_name}", satisfied=True, roles=(role,))
            )

    for constraint in pattern.constraints:
        outcomes.append(
            ConstraintOutcome(
                label=constraint.description,
                satisfied=check_constraint(example, constraint, binding),
                roles=constraint.roles,
            )
        )

    result = MatchResult(pattern=pattern, example=example, binding=binding, outcomes=tuple(outcomes))
    LOGGER.debug(
        "%s vs %s: %s roles bound, %s unsatisfied",
        example.name,
        pattern.name,
        result.roles_matched,
        len(result.unsatisfied),
    )
    return result


def _evaluate_all(
    example: ExampleDescriptor,
    catalog: Mapping[str, PatternDefinition],
    max_bindings: int,
) -> List[MatchResult]:
    return [evaluate(pattern, example, max_bindings) for _, pattern in sorted(catalog.items())]


def _pick_best(results: Iterable[MatchResult]) -> Optional[MatchResult]:
    passing = [result for result in results if result.passed]
    if not passing:
        return None
    passing.sort(key=lambda result: (-result.roles_matched, result.pattern.name))
    return passing[0]


def best_match(
    example: ExampleDescriptor,
    catalog: Mapping[str, PatternDefinition],
    max_bindings: int = DEFAULT_MAX_BINDINGS,
) -> Optional[PatternDefinition]:
    """Return the single best-matching pattern, or None.

    Ties go to the pattern with the most required-role matches, then to the
    lexicographically first pattern name.
    """

    best = _pick_best(_evaluate_all(example, catalog, max_bindings))
    return best.pattern if best else None


def match_example(
    example: ExampleDescriptor,
    catalog: Mapping[str, PatternDefinition],
    max_bindings: int = DEFAULT_MAX_BINDINGS,
) -> MatchResult:
    """Return the result a report should show for ``example``.

    Examples that name the pattern they implement are checked against that
    pattern only. Otherwise the best match wins; when nothing matches the
    nearest candidate is returned so the report can name what is missing.
    """

    _validate(example)
    if example.expects is not None:
        pattern = catalog.get(example.expects)
        if pattern is None:
            raise MatchError(example.location, f"expects unknown pattern '{example.expects}'")
        return evaluate(pattern, example, max_bindings)

    results = _evaluate_all(example, catalog, max_bindings)
    best = _pick_best(results)
    if best is not None:
        return best

    def _nearness(result: MatchResult) -> Tuple[int, int, str]:
        satisfied = len(result.outcomes) - len(result.unsatisfied)
        return (-satisfied, -result.roles_matched, result.pattern.name)

    return sorted(results, key=_nearness)[0]
