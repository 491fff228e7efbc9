"""Build example descriptors from Python source code.

The extractor walks the module AST and records, for every module-level class
(nested helpers such as a model's ``Meta`` are not described):
- bases and methods (``@abstractmethod`` or a bare ``raise NotImplementedError``
  body marks a method abstract),
- references to other declared classes held on ``self`` (created instances are
  compositions, injected or annotated ones associations, typed collections
  aggregations),
- call edges through ``self``, through attributes of known type, through
  annotated parameters and through loops over typed collections.

A ``pattern: <Name>`` line in the module docstring, or ``__pattern__ = "<Name>"``
at module level, sets the pattern the example claims to implement. Classes may
pin their roles with ``__roles__ = ("base",)``.
"""

from __future__ import annotations

import ast
import os
import re
from typing import Any, Dict, List, Optional, Set, Tuple

from core.descriptors import build_descriptor
from core.errors import MatchError
from core.models import ExampleDescriptor

ABSTRACT_BASES = {"ABC", "Protocol"}
ABSTRACT_METACLASSES = {"ABCMeta"}
COLLECTION_HINTS = {
    "List", "list", "Sequence", "MutableSequence", "Set", "set", "FrozenSet", "frozenset",
    "Iterable", "Collection", "Tuple", "tuple", "Deque", "deque",
}
WRAPPER_HINTS = {"Optional", "Final", "ClassVar"}
PATTERN_DOC_RE = re.compile(r"^\s*pattern\s*:\s*(\S+)\s*$", re.IGNORECASE | re.MULTILINE)


def _dotted_tail(node: ast.AST) -> Optional[str]:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Subscript):
        return _dotted_tail(node.value)
    if isinstance(node, ast.Call):
        return _dotted_tail(node.func)
    return None


def _annotation_target(node: Optional[ast.AST]) -> Tuple[Optional[str], bool]:
    """Return (type name, is_collection) for an annotation expression."""

    if node is None:
        return None, False
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        try:
            node = ast.parse(node.value, mode="eval").body
        except SyntaxError:
            return None, False
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        left = _annotation_target(node.left)
        return left if left[0] not in (None, "None") else _annotation_target(node.right)
    if isinstance(node, ast.Subscript):
        outer = _dotted_tail(node.value)
        inner = node.slice
        if isinstance(inner, ast.Tuple) and inner.elts:
            inner = inner.elts[0]
        if outer in COLLECTION_HINTS:
            name, _ = _annotation_target(inner)
            return name, True
        if outer in WRAPPER_HINTS:
            return _annotation_target(inner)
        return outer, False
    return _dotted_tail(node), False


def _is_abstract_method(node: ast.AST) -> bool:
    decorators = {_dotted_tail(item) for item in node.decorator_list}
    if decorators & {"abstractmethod", "abstractproperty"}:
        return True
    body = [stmt for stmt in node.body if not (isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant))]
    if len(body) == 1 and isinstance(body[0], ast.Raise) and body[0].exc is not None:
        return _dotted_tail(body[0].exc) == "NotImplementedError"
    return False


def _literal_strings(node: ast.AST) -> Tuple[str, ...]:
    try:
        value = ast.literal_eval(node)
    except (ValueError, SyntaxError):
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(item for item in value if isinstance(item, str))
    return ()


class _ClassScanner:
    """Collects relations and call edges for one class body."""

    def __init__(self, node: ast.ClassDef, declared: Set[str]) -> None:
        self.node = node
        self.declared = declared
        self.attr_types: Dict[str, Tuple[str, bool]] = {}
        self.relations: List[Dict[str, str]] = []
        self.calls: List[Dict[str, str]] = []

    def _relate(self, kind: str, target: Optional[str]) -> None:
        if target in self.declared:
            entry = {"kind": kind, "source": self.node.name, "target": target}
            if entry not in self.relations:
                self.relations.append(entry)

    def _remember(self, attr: str, target: Optional[str], collection: bool, kind: str) -> None:
        if target not in self.declared:
            return
        self.attr_types.setdefault(attr, (target, collection))
        self._relate("aggregation" if collection else kind, target)

    def _functions(self) -> List[ast.AST]:
        return [item for item in self.node.body if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef))]

    def collect_fields(self) -> None:
        for item in self.node.body:
            if isinstance(item, ast.AnnAssign) and isinstance(item.target, ast.Name):
                name, collection = _annotation_target(item.annotation)
                self._remember(item.target.id, name, collection, "association")

        for func in self._functions():
            params = self._param_types(func)
            for stmt in ast.walk(func):
                if isinstance(stmt, ast.AnnAssign) and _self_attr(stmt.target):
                    name, collection = _annotation_target(stmt.annotation)
                    kind = "composition" if _created_type(stmt.value) == name else "association"
                    self._remember(_self_attr(stmt.target), name, collection, kind)
                elif isinstance(stmt, ast.Assign):
                    for target in stmt.targets:
                        attr = _self_attr(target)
                        if not attr:
                            continue
                        created = _created_type(stmt.value)
                        if created in self.declared:
                            self._remember(attr, created, False, "composition")
                        elif isinstance(stmt.value, ast.Name) and stmt.value.id in params:
                            name, collection = params[stmt.value.id]
                            self._remember(attr, name, collection, "association")

    def _param_types(self, func: ast.AST) -> Dict[str, Tuple[str, bool]]:
        params: Dict[str, Tuple[str, bool]] = {}
        arguments = func.args.posonlyargs + func.args.args + func.args.kwonlyargs
        for arg in arguments:
            name, collection = _annotation_target(arg.annotation)
            if name in self.declared:
                params[arg.arg] = (name, collection)
        return params

    def collect_calls(self) -> None:
        for func in self._functions():
            params = self._param_types(func)
            scope = {name: target for name, (target, collection) in params.items() if not collection}
            for stmt in ast.walk(func):
                if not (isinstance(stmt, ast.For) and isinstance(stmt.target, ast.Name)):
                    continue
                attr = _self_attr(stmt.iter)
                if attr in self.attr_types and self.attr_types[attr][1]:
                    scope[stmt.target.id] = self.attr_types[attr][0]
                elif isinstance(stmt.iter, ast.Name) and params.get(stmt.iter.id, ("", False))[1]:
                    scope[stmt.target.id] = params[stmt.iter.id][0]
            for stmt in ast.walk(func):
                if not (isinstance(stmt, ast.Call) and isinstance(stmt.func, ast.Attribute)):
                    continue
                callee_type = self._receiver_type(stmt.func.value, scope)
                if callee_type is None:
                    continue
                edge = {"caller": f"{self.node.name}.{func.name}", "callee": f"{callee_type}.{stmt.func.attr}"}
                if edge not in self.calls:
                    self.calls.append(edge)

    def _receiver_type(self, receiver: ast.AST, scope: Dict[str, str]) -> Optional[str]:
        if isinstance(receiver, ast.Name):
            if receiver.id == "self":
                return self.node.name
            if receiver.id in scope:
                return scope[receiver.id]
            if receiver.id in self.declared:
                return receiver.id
            return None
        attr = _self_attr(receiver)
        if attr in self.attr_types and not self.attr_types[attr][1]:
            return self.attr_types[attr][0]
        return None

    def type_entry(self) -> Dict[str, Any]:
        node = self.node
        bases = [name for name in (_dotted_tail(base) for base in node.bases) if name]
        metaclasses = {_dotted_tail(kw.value) for kw in node.keywords if kw.arg == "metaclass"}
        roles: Tuple[str, ...] = ()
        for item in node.body:
            if isinstance(item, ast.Assign) and any(
                isinstance(target, ast.Name) and target.id in ("__role__", "__roles__") for target in item.targets
            ):
                roles = _literal_strings(item.value)
        methods = [
            {"name": func.name, "abstract": _is_abstract_method(func)}
            for func in self._functions()
        ]
        return {
            "name": node.name,
            "bases": bases,
            "methods": methods,
            "abstract": bool(set(bases) & ABSTRACT_BASES or metaclasses & ABSTRACT_METACLASSES),
            "roles": list(roles),
            "line": node.lineno,
        }


def _self_attr(node: Optional[ast.AST]) -> Optional[str]:
    if (
        isinstance(node, ast.Attribute)
        and isinstance(node.value, ast.Name)
        and node.value.id == "self"
    ):
        return node.attr
    return None


def _created_type(value: Optional[ast.AST]) -> Optional[str]:
    if isinstance(value, ast.Call):
        return _dotted_tail(value.func)
    return None


def _expected_pattern(tree: ast.Module) -> Optional[str]:
    for item in tree.body:
        if isinstance(item, ast.Assign) and any(
            isinstance(target, ast.Name) and target.id == "__pattern__" for target in item.targets
        ):
            values = _literal_strings(item.value)
            if values:
                return values[0]
    docstring = ast.get_docstring(tree) or ""
    found = PATTERN_DOC_RE.search(docstring)
    return found.group(1) if found else None


def source_to_dict(text: str, location: str = "<source>") -> Dict[str, Any]:
    """Return the raw descriptor dict for ``text`` (what ``describe`` prints)."""

    try:
        tree = ast.parse(text, filename=location)
    except SyntaxError as exc:
        raise MatchError(f"{location}:{exc.lineno}", f"syntax error: {exc.msg}") from exc

    classes = [node for node in tree.body if isinstance(node, ast.ClassDef)]
    declared = {node.name for node in classes}
    scanners = [_ClassScanner(node, declared) for node in classes]
    for scanner in scanners:
        scanner.collect_fields()
    for scanner in scanners:
        scanner.collect_calls()

    raw: Dict[str, Any] = {
        "name": os.path.splitext(os.path.basename(location))[0],
        "types": [scanner.type_entry() for scanner in scanners],
        "relations": [relation for scanner in scanners for relation in scanner.relations],
        "calls": [call for scanner in scanners for call in scanner.calls],
    }
    expects = _expected_pattern(tree)
    if expects:
        raw["expects"] = expects
    return raw


def describe_source(text: str, location: str = "<source>") -> ExampleDescriptor:
    """Parse Python source into a validated ExampleDescriptor."""

    return build_descriptor(source_to_dict(text, location), location=location)
