"""Construction of the package dependency graph."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from geigerlens.args import Args, DepsArgs, TargetArgs
from geigerlens.extra_deps import ExtraDeps
from geigerlens.krates import Krates
from geigerlens.metadata import Metadata, Package
from geigerlens.report import DependencyKind

_log = logging.getLogger(__name__)

_TOKEN_RE = re.compile(
    r'(?P<ident>[A-Za-z_][A-Za-z0-9_]*)|"(?P<string>[^"]*)"|(?P<punct>[(),=])'
)


@dataclass(frozen=True)
class Cfg:
    """A conditional compilation flag: a bare name or a `key = "value"` pair."""

    name: str
    value: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> Cfg:
        parser = _CfgParser(text)
        cfg = parser.cfg()
        parser.finish()
        return cfg

    def __str__(self) -> str:
        return self.name if self.value is None else f'{self.name} = "{self.value}"'


@dataclass(frozen=True)
class _All:
    exprs: tuple


@dataclass(frozen=True)
class _Any:
    exprs: tuple


@dataclass(frozen=True)
class _Not:
    expr: object


_CfgExpr = Union[Cfg, _All, _Any, _Not]


def _expr_matches(expr: _CfgExpr, cfgs: Sequence[Cfg]) -> bool:
    if isinstance(expr, _All):
        return all(_expr_matches(e, cfgs) for e in expr.exprs)
    if isinstance(expr, _Any):
        return any(_expr_matches(e, cfgs) for e in expr.exprs)
    if isinstance(expr, _Not):
        return not _expr_matches(expr.expr, cfgs)
    return expr in cfgs


def _tokenize(text: str) -> list:
    tokens = []
    pos = 0
    while pos < len(text):
        if text[pos].isspace():
            pos += 1
            continue
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise ValueError(f"unexpected character {text[pos]!r} in cfg expression {text!r}")
        kind = match.lastgroup
        tokens.append((kind, match.group(kind)))
        pos = match.end()
    return tokens


class _CfgParser:
    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens = _tokenize(text)
        self._pos = 0

    def _peek(self) -> Optional[tuple]:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _next(self) -> tuple:
        token = self._peek()
        if token is None:
            raise ValueError(f"unexpected end of cfg expression: {self._text!r}")
        self._pos += 1
        return token

    def _expect(self, punct: str) -> None:
        if self._next() != ("punct", punct):
            raise ValueError(f"expected `{punct}` in cfg expression: {self._text!r}")

    def expr(self) -> _CfgExpr:
        token = self._peek()
        if token is not None and token[0] == "ident" and token[1] in ("all", "any", "not"):
            self._pos += 1
            self._expect("(")
            if token[1] == "not":
                inner = self.expr()
                self._expect(")")
                return _Not(inner)
            items = self._list()
            return _All(items) if token[1] == "all" else _Any(items)
        return self.cfg()

    def _list(self) -> tuple:
        items = []
        while True:
            if self._peek() == ("punct", ")"):
                self._pos += 1
                return tuple(items)
            items.append(self.expr())
            if self._peek() == ("punct", ","):
                self._pos += 1
                continue
            self._expect(")")
            return tuple(items)

    def cfg(self) -> Cfg:
        kind, name = self._next()
        if kind != "ident":
            raise ValueError(f"expected an identifier in cfg expression: {self._text!r}")
        if self._peek() == ("punct", "="):
            self._pos += 1
            kind, value = self._next()
            if kind != "string":
                raise ValueError(f"expected a string in cfg expression: {self._text!r}")
            return Cfg(name, value)
        return Cfg(name)

    def finish(self) -> None:
        if self._peek() is not None:
            raise ValueError(f"unexpected content at end of cfg expression: {self._text!r}")


@dataclass(frozen=True)
class Platform:
    """A dependency's target: a target triple or a `cfg(...)` expression."""

    name: Optional[str] = None
    expr: Optional[object] = None

    @classmethod
    def parse(cls, text: str) -> Platform:
        stripped = text.strip()
        if stripped.startswith("cfg(") and stripped.endswith(")"):
            parser = _CfgParser(stripped[4:-1])
            expr = parser.expr()
            parser.finish()
            return cls(expr=expr)
        if not stripped:
            raise ValueError("empty target platform")
        if not all(ch.isalnum() or ch in "_-." for ch in stripped):
            raise ValueError(f"invalid target platform name: {text!r}")
        return cls(name=stripped)

    def matches(self, target: str, cfgs: Sequence[Cfg]) -> bool:
        if self.name is not None:
            return self.name == target
        return _expr_matches(self.expr, cfgs)


@dataclass
class Graph:
    """Directed graph of package ids with dependency kinds on the edges."""

    nodes: dict = field(default_factory=dict)
    edges: list = field(default_factory=list)

    def add_node(self, package_id: str) -> int:
        """Add a package if absent and return its node index."""
        return self.nodes.setdefault(package_id, len(self.nodes))

    def add_edge(self, source: str, target: str, kind: DependencyKind) -> None:
        self.add_node(source)
        self.add_node(target)
        self.edges.append((source, target, kind))

    def dependencies(self, package_id: str) -> list:
        """Outgoing edges of a package as (package id, kind) pairs, in insertion order."""
        return [(target, kind) for source, target, kind in self.edges if source == package_id]


def build_graph_prerequisites(
    config_host: str, deps_args: DepsArgs, target_args: TargetArgs
) -> tuple:
    """Choose the extra dependency kinds and the target to match against."""
    if deps_args.all_deps:
        extra_deps = ExtraDeps.ALL
    elif deps_args.build_deps:
        extra_deps = ExtraDeps.BUILD
    elif deps_args.dev_deps:
        extra_deps = ExtraDeps.DEV
    else:
        extra_deps = ExtraDeps.NO_MORE

    if target_args.all_targets:
        target = None
    else:
        target = target_args.target if target_args.target is not None else config_host
    return extra_deps, target


def _target_allows(
    platform_text: Optional[str], target: Optional[str], cfgs: Optional[Sequence[Cfg]]
) -> bool:
    if platform_text is None or target is None:
        return True
    if cfgs is None:
        return False
    return Platform.parse(platform_text).matches(target, cfgs)


def _filter_dependencies(
    krates: Krates,
    dependency_package_id: str,
    extra_deps: ExtraDeps,
    target: Optional[str],
    cfgs: Optional[Sequence[Cfg]],
    package: Package,
) -> list:
    return [
        dependency
        for dependency in package.dependencies
        if krates.matches_ignoring_source(dependency, dependency_package_id)
        and extra_deps.allows(dependency.kind)
        and _target_allows(dependency.target, target, cfgs)
    ]


def build_graph(
    args: Args,
    krates: Krates,
    metadata: Metadata,
    config_host: str,
    cfgs: Optional[Sequence[Cfg]],
    root_package_id: str,
) -> Graph:
    """Walk the dependencies of the root package and collect them into a graph."""
    extra_deps, target = build_graph_prerequisites(
        config_host, args.deps_args, args.target_args
    )
    graph = Graph()
    graph.add_node(root_package_id)
    pending = [root_package_id]

    while pending:
        package_id = pending.pop()
        package = krates.node_for_kid(package_id)
        dependency_ids = metadata.deps_not_replaced(package_id, package_id == root_package_id)
        if package is None or dependency_ids is None:
            _log.warning(
                "Failed to add package dependencies to graph for Package Id: %s", package_id
            )
            continue
        for dependency_package_id in dependency_ids:
            for dependency in _filter_dependencies(
                krates, dependency_package_id, extra_deps, target, cfgs, package
            ):
                if dependency_package_id not in graph.nodes:
                    pending.append(dependency_package_id)
                    graph.add_node(dependency_package_id)
                graph.add_edge(package_id, dependency_package_id, dependency.kind)

    return graph