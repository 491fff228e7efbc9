"""Catalog compilation (core domain).

A catalog is a JSON object with a ``patterns`` list. Each entry is compiled
into an immutable PatternDefinition; anything that would make matching
ambiguous (duplicate names, dangling role references, unknown constraint
kinds) is rejected up front with a ConfigError pointing at the entry.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from core.constraints import CONSTRAINT_KINDS, describe
from core.errors import ConfigError
from core.models import Constraint, PatternDefinition, RoleSpec


def _string_list(value: Any, location: str, field: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) and item for item in value):
        raise ConfigError(location, f"'{field}' must be a list of non-empty strings")
    return tuple(value)


def _build_roles(raw_roles: Any, location: str) -> Tuple[RoleSpec, ...]:
    if not isinstance(raw_roles, list) or not raw_roles:
        raise ConfigError(location, "'roles' must be a non-empty list")

    roles: List[RoleSpec] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_roles):
        role_location = f"{location}.roles[{index}]"
        if isinstance(raw, str):
            raw = {"name": raw}
        if not isinstance(raw, dict):
            raise ConfigError(role_location, "role must be a name or an object")
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigError(role_location, "role name is required")
        name = name.strip()
        if name in seen:
            raise ConfigError(role_location, f"role '{name}' is declared twice")
        seen.add(name)
        roles.append(
            RoleSpec(
                name=name,
                abstract=bool(raw.get("abstract", False)),
                methods=_string_list(raw.get("methods"), role_location, "methods"),
            )
        )
    return tuple(roles)


def _build_constraint(raw: Any, role_names: set[str], location: str) -> Constraint:
    if not isinstance(raw, dict):
        raise ConfigError(location, "constraint must be an object")

    kind_name = raw.get("kind")
    kind = CONSTRAINT_KINDS.get(kind_name) if isinstance(kind_name, str) else None
    if kind is None:
        known = ", ".join(sorted(CONSTRAINT_KINDS))
        raise ConfigError(location, f"unknown constraint kind {kind_name!r} (expected one of: {known})")

    roles: List[str] = []
    for field in kind.role_fields:
        role = raw.get(field)
        if not isinstance(role, str) or not role:
            raise ConfigError(location, f"'{kind.name}' constraint requires '{field}'")
        if role not in role_names:
            raise ConfigError(location, f"constraint references undefined role '{role}'")
        roles.append(role)

    params: Dict[str, Tuple[str, ...]] = {}
    for field in kind.list_fields:
        values = _string_list(raw.get(field), location, field)
        if not values:
            raise ConfigError(location, f"'{kind.name}' constraint requires '{field}'")
        params[field] = values

    description = raw.get("description") or describe(kind, tuple(roles), params)
    return Constraint(
        kind=kind.name,
        roles=tuple(roles),
        description=str(description),
        params=tuple(sorted(params.items())),
    )


def build_pattern(raw: Any, location: str) -> PatternDefinition:
    """Compile a single catalog entry."""

    if not isinstance(raw, dict):
        raise ConfigError(location, "pattern must be an object")
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(location, "pattern name is required")

    roles = _build_roles(raw.get("roles"), location)
    role_names = {role.name for role in roles}

    raw_constraints = raw.get("constraints", []) or []
    if not isinstance(raw_constraints, list):
        raise ConfigError(location, "'constraints' must be a list")
    constraints = tuple(
        _build_constraint(item, role_names, f"{location}.constraints[{index}]")
        for index, item in enumerate(raw_constraints)
    )

    return PatternDefinition(
        name=name.strip(),
        description=str(raw.get("description", "")),
        roles=roles,
        constraints=constraints,
    )


def build_catalog(raw: Any, location: str = "<catalog>") -> Dict[str, PatternDefinition]:
    """Validate a parsed catalog and return a name -> definition mapping.

    Disabled entries (``"enabled": false``) are skipped before duplicate
    detection, so a catalog can carry alternative drafts of one pattern.
    """

    if not isinstance(raw, dict):
        raise ConfigError(location, "catalog root must be an object")
    entries = raw.get("patterns")
    if not isinstance(entries, list):
        raise ConfigError(location, "catalog must define a 'patterns' list")

    catalog: Dict[str, PatternDefinition] = {}
    for index, entry in enumerate(entries):
        entry_location = f"{location}: patterns[{index}]"
        if isinstance(entry, dict) and not entry.get("enabled", True):
            continue
        pattern = build_pattern(entry, entry_location)
        if pattern.name in catalog:
            raise ConfigError(entry_location, f"duplicate pattern name '{pattern.name}'")
        catalog[pattern.name] = pattern

    if not catalog:
        raise ConfigError(location, "catalog defines no enabled patterns")
    return catalog
