"""Package metadata as reported by the build tool, and lookups over it."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Any, Optional, Union

import semver

from geigerlens.report import DependencyKind, PackageId, Source
from geigerlens.sources import handle_path_source, handle_source_repr

_log = logging.getLogger(__name__)

_NUMBER = r"0|[1-9][0-9]*"
_PART = rf"(?:{_NUMBER}|\*|x|X)"
_COMPARATOR_RE = re.compile(
    r"^(?P<op>=|>=|>|<=|<|~|\^)?\s*"
    rf"(?P<major>{_PART})"
    rf"(?:\.(?P<minor>{_PART})"
    rf"(?:\.(?P<patch>{_PART})"
    r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r")?)?$"
)
_WILDCARDS = frozenset({"*", "x", "X"})


class _Op(Enum):
    EXACT = "="
    GREATER = ">"
    GREATER_EQ = ">="
    LESS = "<"
    LESS_EQ = "<="
    TILDE = "~"
    CARET = "^"
    WILDCARD = "*"


def _pre_cmp(left: str, right: str) -> int:
    """Compare pre-release strings; an empty pre-release ranks highest."""
    if left == right:
        return 0
    if not left:
        return 1
    if not right:
        return -1
    for a, b in zip(left.split("."), right.split(".")):
        if a == b:
            continue
        a_num, b_num = a.isdigit(), b.isdigit()
        if a_num and b_num:
            return -1 if int(a) < int(b) else 1
        if a_num != b_num:
            return -1 if a_num else 1
        return -1 if a < b else 1
    return -1 if len(left.split(".")) < len(right.split(".")) else 1


def _as_version(version: Union[semver.Version, str]) -> semver.Version:
    if isinstance(version, semver.Version):
        return version
    return semver.Version.parse(str(version))


@dataclass(frozen=True)
class _Comparator:
    op: _Op
    major: int
    minor: Optional[int]
    patch: Optional[int]
    pre: str

    def matches(self, ver: semver.Version) -> bool:
        op = self.op
        if op in (_Op.EXACT, _Op.WILDCARD):
            return self._exact(ver)
        if op is _Op.GREATER:
            return self._greater(ver)
        if op is _Op.GREATER_EQ:
            return self._exact(ver) or self._greater(ver)
        if op is _Op.LESS:
            return self._less(ver)
        if op is _Op.LESS_EQ:
            return self._exact(ver) or self._less(ver)
        if op is _Op.TILDE:
            return self._tilde(ver)
        return self._caret(ver)

    def pre_is_compatible(self, ver: semver.Version) -> bool:
        return (
            self.major == ver.major
            and self.minor == ver.minor
            and self.patch == ver.patch
            and bool(self.pre)
        )

    def _exact(self, ver: semver.Version) -> bool:
        if ver.major != self.major:
            return False
        if self.minor is not None and ver.minor != self.minor:
            return False
        if self.patch is not None and ver.patch != self.patch:
            return False
        return (ver.prerelease or "") == self.pre

    def _greater(self, ver: semver.Version) -> bool:
        if ver.major != self.major:
            return ver.major > self.major
        if self.minor is None:
            return False
        if ver.minor != self.minor:
            return ver.minor > self.minor
        if self.patch is None:
            return False
        if ver.patch != self.patch:
            return ver.patch > self.patch
        return _pre_cmp(ver.prerelease or "", self.pre) > 0

    def _less(self, ver: semver.Version) -> bool:
        if ver.major != self.major:
            return ver.major < self.major
        if self.minor is None:
            return False
        if ver.minor != self.minor:
            return ver.minor < self.minor
        if self.patch is None:
            return False
        if ver.patch != self.patch:
            return ver.patch < self.patch
        return _pre_cmp(ver.prerelease or "", self.pre) < 0

    def _tilde(self, ver: semver.Version) -> bool:
        if ver.major != self.major:
            return False
        if self.minor is not None and ver.minor != self.minor:
            return False
        if self.patch is not None and ver.patch != self.patch:
            return ver.patch > self.patch
        return _pre_cmp(ver.prerelease or "", self.pre) >= 0

    def _caret(self, ver: semver.Version) -> bool:
        if ver.major != self.major:
            return False
        if self.minor is None:
            return True
        if self.patch is None:
            if self.major > 0:
                return ver.minor >= self.minor
            return ver.minor == self.minor
        if self.major > 0:
            if ver.minor != self.minor:
                return ver.minor > self.minor
            if ver.patch != self.patch:
                return ver.patch > self.patch
        elif self.minor > 0:
            if ver.minor != self.minor:
                return False
            if ver.patch != self.patch:
                return ver.patch > self.patch
        elif ver.minor != self.minor or ver.patch != self.patch:
            return False
        return _pre_cmp(ver.prerelease or "", self.pre) >= 0


def _parse_comparator(text: str) -> Optional[_Comparator]:
    """Parse one comparator; a bare wildcard yields None (matches anything)."""
    if text in _WILDCARDS:
        return None
    match = _COMPARATOR_RE.match(text)
    if match is None:
        raise ValueError(f"invalid version requirement comparator: {text!r}")
    op = _Op(match["op"]) if match["op"] else None
    parts = [match["major"], match["minor"], match["patch"]]
    if parts[0] in _WILDCARDS:
        if op is not None:
            raise ValueError(f"unexpected wildcard after operator: {text!r}")
        return None
    values: list[Optional[int]] = []
    wildcard = False
    for part in parts:
        if part is None or part in _WILDCARDS:
            wildcard = wildcard or part is not None
            values.append(None)
        else:
            if values and values[-1] is None:
                raise ValueError(f"unexpected number after wildcard: {text!r}")
            values.append(int(part))
    if op is None:
        op = _Op.WILDCARD if wildcard else _Op.CARET
    return _Comparator(
        op=op, major=values[0], minor=values[1], patch=values[2], pre=match["pre"] or ""
    )


@dataclass(frozen=True)
class VersionReq:
    """A version requirement such as `^1.2, <1.5`."""

    text: str
    comparators: tuple = ()

    @classmethod
    def parse(cls, text: str) -> VersionReq:
        stripped = text.strip()
        if not stripped:
            raise ValueError("empty string, expected a semver version")
        comparators = []
        for piece in stripped.split(","):
            piece = piece.strip()
            if not piece:
                raise ValueError(f"empty comparator in version requirement: {text!r}")
            comparator = _parse_comparator(piece)
            if comparator is not None:
                comparators.append(comparator)
        return cls(text=stripped, comparators=tuple(comparators))

    def matches(self, version: Union[semver.Version, str]) -> bool:
        ver = _as_version(version)
        if not all(cmp.matches(ver) for cmp in self.comparators):
            return False
        if not ver.prerelease:
            return True
        return any(cmp.pre_is_compatible(ver) for cmp in self.comparators)

    def __str__(self) -> str:
        return self.text


_DEPENDENCY_KINDS = {
    None: DependencyKind.NORMAL,
    "normal": DependencyKind.NORMAL,
    "dev": DependencyKind.DEVELOPMENT,
    "build": DependencyKind.BUILD,
}


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


@dataclass(frozen=True)
class Dependency:
    """A dependency declared in a package manifest."""

    name: str
    req: VersionReq
    kind: DependencyKind = DependencyKind.NORMAL
    target: Optional[str] = None
    source: Optional[str] = None
    optional: bool = False
    uses_default_features: bool = True
    features: tuple = ()
    rename: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> Dependency:
        try:
            name = data["name"]
            req = data["req"]
        except KeyError as error:
            raise ValueError(f"missing field `{error.args[0]}`") from None
        raw_kind = data.get("kind")
        try:
            kind = _DEPENDENCY_KINDS[raw_kind]
        except KeyError:
            raise ValueError(f"Unrecognised Dependency Kind: {raw_kind!r}") from None
        return cls(
            name=str(name),
            req=VersionReq.parse(str(req)),
            kind=kind,
            target=_optional_str(data.get("target")),
            source=_optional_str(data.get("source")),
            optional=bool(data.get("optional", False)),
            uses_default_features=bool(data.get("uses_default_features", True)),
            features=tuple(data.get("features") or ()),
            rename=_optional_str(data.get("rename")),
        )


@dataclass
class Package:
    """A package known to the metadata."""

    id: str
    name: str
    version: semver.Version
    manifest_path: PurePath
    dependencies: list = field(default_factory=list)
    source: Optional[str] = None
    license: Optional[str] = None
    repository: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> Package:
        try:
            return cls(
                id=str(data["id"]),
                name=str(data["name"]),
                version=semver.Version.parse(str(data["version"])),
                manifest_path=PurePath(str(data["manifest_path"])),
                dependencies=[Dependency.from_dict(d) for d in data.get("dependencies") or ()],
                source=_optional_str(data.get("source")),
                license=_optional_str(data.get("license")),
                repository=_optional_str(data.get("repository")),
            )
        except KeyError as error:
            raise ValueError(f"missing field `{error.args[0]}`") from None

    def root(self) -> Optional[PurePath]:
        """Directory holding the manifest, or None if it has no parent."""
        parent = self.manifest_path.parent
        if str(self.manifest_path) in ("", ".") or parent == self.manifest_path:
            _log.warning("Failed to get root for: %s %s", self.name, self.version)
            return None
        return parent


@dataclass
class Metadata:
    """The packages of a workspace and its resolved dependencies."""

    packages: list = field(default_factory=list)
    workspace_root: Optional[PurePath] = None
    resolved: bool = False
    resolve_root: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> Metadata:
        resolve = data.get("resolve")
        root = data.get("workspace_root")
        return cls(
            packages=[Package.from_dict(p) for p in data.get("packages") or ()],
            workspace_root=None if root is None else PurePath(str(root)),
            resolved=resolve is not None,
            resolve_root=_optional_str(resolve.get("root")) if resolve is not None else None,
        )

    @classmethod
    def from_json(cls, text: str) -> Metadata:
        return cls.from_dict(json.loads(text))

    def root_package(self) -> Optional[Package]:
        """The package the metadata was produced for, if it is not virtual."""
        if self.resolved:
            if self.resolve_root is None:
                return None
            return self.package(self.resolve_root)
        if self.workspace_root is None:
            return None
        manifest = self.workspace_root / "Cargo.toml"
        return next((p for p in self.packages if p.manifest_path == manifest), None)

    def package(self, package_id: str) -> Optional[Package]:
        """The last package with the given id, or None."""
        matching = [p for p in self.packages if p.id == package_id]
        return matching[-1] if matching else None

    def dependency_package_id(self, dependency: Dependency) -> Optional[str]:
        """Id of the last package whose name and version satisfy the dependency."""
        matching = [
            p.id
            for p in self.packages
            if p.name == dependency.name and dependency.req.matches(p.version)
        ]
        return matching[-1] if matching else None

    def deps_not_replaced(self, package_id: str, is_root_package: bool) -> Optional[list]:
        """Distinct ids of the resolved dependencies of a package, in declaration order.

        Development dependencies count only for the root package. Returns None
        when the package is unknown.
        """
        package = self.package(package_id)
        if package is None:
            _log.warning(
                "Failed to convert Package Id: %s to Cargo Metadata Package", package_id
            )
            return None
        found: list = []
        seen: set = set()
        for dependency in package.dependencies:
            dep_id = self.dependency_package_id(dependency)
            if dep_id is None:
                continue
            if dependency.kind is DependencyKind.DEVELOPMENT and not is_root_package:
                continue
            if dep_id not in seen:
                seen.add(dep_id)
                found.append(dep_id)
        return found

    def geiger_source(self, package_id: str) -> Source:
        """Where a package comes from; raises LookupError for unknown ids."""
        package = self.package(package_id)
        if package is None:
            raise LookupError(f"unknown package id: {package_id}")
        if package.source is not None:
            return handle_source_repr(package.source)
        return handle_path_source(package_id)

    def geiger_package_id(self, package_id: str) -> Optional[PackageId]:
        """Report package id for a metadata package id, or None if unknown."""
        package = self.package(package_id)
        if package is None:
            _log.warning("Failed to convert PackageId: %s to Package", package_id)
            return None
        return PackageId(
            name=package.name,
            version=package.version,
            source=self.geiger_source(package_id),
        )