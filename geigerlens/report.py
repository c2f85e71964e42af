"""Data model and JSON serialisation of unsafety reports."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from functools import total_ordering
from pathlib import Path
from typing import Any, Union

import semver


@dataclass(frozen=True, order=True)
class GitSource:
    """A package fetched from a git repository."""

    url: str
    rev: str


@dataclass(frozen=True, order=True)
class RegistrySource:
    """A package fetched from a package registry."""

    name: str
    url: str


@dataclass(frozen=True, order=True)
class PathSource:
    """A package found on the local file system."""

    url: str


Source = Union[GitSource, RegistrySource, PathSource]


def _source_key(source: Source) -> tuple:
    if isinstance(source, GitSource):
        return (0, source.url, source.rev)
    if isinstance(source, RegistrySource):
        return (1, source.name, source.url)
    if isinstance(source, PathSource):
        return (2, source.url)
    raise TypeError(f"not a package source: {source!r}")


def _require(data: Any, key: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"expected a map, found {type(data).__name__}")
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field `{key}`") from None


def _require_list(value: Any) -> list:
    if not isinstance(value, list):
        raise ValueError("expected a sequence")
    return value


def source_to_dict(source: Source) -> dict:
    """Serialise a source as an externally tagged map."""
    if isinstance(source, GitSource):
        return {"Git": {"url": source.url, "rev": source.rev}}
    if isinstance(source, RegistrySource):
        return {"Registry": {"name": source.name, "url": source.url}}
    if isinstance(source, PathSource):
        return {"Path": source.url}
    raise TypeError(f"not a package source: {source!r}")


def source_from_dict(data: Any) -> Source:
    """Read a source from its externally tagged map."""
    if not isinstance(data, dict) or len(data) != 1:
        raise ValueError("expected a map with a single variant key")
    ((tag, body),) = data.items()
    if tag == "Git":
        return GitSource(url=str(_require(body, "url")), rev=str(_require(body, "rev")))
    if tag == "Registry":
        return RegistrySource(
            name=str(_require(body, "name")), url=str(_require(body, "url"))
        )
    if tag == "Path":
        if not isinstance(body, str):
            raise ValueError("expected a URL string for a path source")
        return PathSource(url=body)
    raise ValueError(f"unknown variant `{tag}`, expected one of `Git`, `Registry`, `Path`")


@total_ordering
@dataclass(frozen=True)
class PackageId:
    """Identifies a package in the dependency tree."""

    name: str
    version: semver.Version
    source: Source

    def __post_init__(self) -> None:
        if isinstance(self.version, str):
            object.__setattr__(self, "version", semver.Version.parse(self.version))

    def _key(self) -> tuple:
        return (self.name, self.version, _source_key(self.source))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, PackageId):
            return NotImplemented
        return self._key() < other._key()

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "version": str(self.version),
            "source": source_to_dict(self.source),
        }

    @classmethod
    def from_dict(cls, data: Any) -> PackageId:
        return cls(
            name=str(_require(data, "name")),
            version=semver.Version.parse(str(_require(data, "version"))),
            source=source_from_dict(_require(data, "source")),
        )


class DependencyKind(enum.Enum):
    """Kind of dependency for a package."""

    NORMAL = "Normal"
    DEVELOPMENT = "Development"
    BUILD = "Build"


@dataclass
class Count:
    """Number of safe and unsafe items."""

    safe: int = 0
    unsafe_: int = 0

    def count(self, is_unsafe: bool) -> None:
        """Increment the safe or unsafe counter by one."""
        if is_unsafe:
            self.unsafe_ += 1
        else:
            self.safe += 1

    def __add__(self, other: object) -> Count:
        if not isinstance(other, Count):
            return NotImplemented
        return Count(safe=self.safe + other.safe, unsafe_=self.unsafe_ + other.unsafe_)

    def to_dict(self) -> dict:
        return {"safe": self.safe, "unsafe_": self.unsafe_}

    @classmethod
    def from_dict(cls, data: Any) -> Count:
        return cls(safe=int(_require(data, "safe")), unsafe_=int(_require(data, "unsafe_")))


_COUNTER_FIELDS = ("functions", "exprs", "item_impls", "item_traits", "methods")


@dataclass
class CounterBlock:
    """Unsafe usage metrics, grouped by kind of item."""

    functions: Count = field(default_factory=Count)
    exprs: Count = field(default_factory=Count)
    item_impls: Count = field(default_factory=Count)
    item_traits: Count = field(default_factory=Count)
    methods: Count = field(default_factory=Count)

    def has_unsafe(self) -> bool:
        return any(getattr(self, name).unsafe_ > 0 for name in _COUNTER_FIELDS)

    def __add__(self, other: object) -> CounterBlock:
        if not isinstance(other, CounterBlock):
            return NotImplemented
        return CounterBlock(
            **{name: getattr(self, name) + getattr(other, name) for name in _COUNTER_FIELDS}
        )

    def to_dict(self) -> dict:
        return {name: getattr(self, name).to_dict() for name in _COUNTER_FIELDS}

    @classmethod
    def from_dict(cls, data: Any) -> CounterBlock:
        return cls(**{name: Count.from_dict(_require(data, name)) for name in _COUNTER_FIELDS})


def _ids_to_list(ids: set) -> list:
    return [package_id.to_dict() for package_id in sorted(ids)]


def _ids_from_list(value: Any) -> set:
    return {PackageId.from_dict(item) for item in _require_list(value)}


@dataclass
class PackageInfo:
    """A package and the packages it depends on."""

    id: PackageId
    dependencies: set = field(default_factory=set)
    dev_dependencies: set = field(default_factory=set)
    build_dependencies: set = field(default_factory=set)

    def add_dependency(self, dep: PackageId, kind: DependencyKind) -> None:
        if kind is DependencyKind.NORMAL:
            self.dependencies.add(dep)
        elif kind is DependencyKind.DEVELOPMENT:
            self.dev_dependencies.add(dep)
        elif kind is DependencyKind.BUILD:
            self.build_dependencies.add(dep)
        else:
            raise ValueError(f"unknown dependency kind: {kind!r}")

    def to_dict(self) -> dict:
        return {
            "id": self.id.to_dict(),
            "dependencies": _ids_to_list(self.dependencies),
            "dev_dependencies": _ids_to_list(self.dev_dependencies),
            "build_dependencies": _ids_to_list(self.build_dependencies),
        }

    @classmethod
    def from_dict(cls, data: Any) -> PackageInfo:
        return cls(
            id=PackageId.from_dict(_require(data, "id")),
            dependencies=_ids_from_list(_require(data, "dependencies")),
            dev_dependencies=_ids_from_list(_require(data, "dev_dependencies")),
            build_dependencies=_ids_from_list(_require(data, "build_dependencies")),
        )


@dataclass
class UnsafeInfo:
    """Unsafe usage in a package, split into used and unused code."""

    used: CounterBlock = field(default_factory=CounterBlock)
    unused: CounterBlock = field(default_factory=CounterBlock)
    forbids_unsafe: bool = False

    def to_dict(self) -> dict:
        return {
            "used": self.used.to_dict(),
            "unused": self.unused.to_dict(),
            "forbids_unsafe": self.forbids_unsafe,
        }

    @classmethod
    def from_dict(cls, data: Any) -> UnsafeInfo:
        return cls(
            used=CounterBlock.from_dict(_require(data, "used")),
            unused=CounterBlock.from_dict(_require(data, "unused")),
            forbids_unsafe=bool(_require(data, "forbids_unsafe")),
        )


@dataclass
class ReportEntry:
    """Entry of a full unsafety report."""

    package: PackageInfo
    unsafety: UnsafeInfo

    def to_dict(self) -> dict:
        return {"package": self.package.to_dict(), "unsafety": self.unsafety.to_dict()}

    @classmethod
    def from_dict(cls, data: Any) -> ReportEntry:
        return cls(
            package=PackageInfo.from_dict(_require(data, "package")),
            unsafety=UnsafeInfo.from_dict(_require(data, "unsafety")),
        )


@dataclass
class QuickReportEntry:
    """Entry of a report that only records whether `unsafe` is forbidden."""

    package: PackageInfo
    forbids_unsafe: bool

    def to_dict(self) -> dict:
        return {"package": self.package.to_dict(), "forbids_unsafe": self.forbids_unsafe}

    @classmethod
    def from_dict(cls, data: Any) -> QuickReportEntry:
        return cls(
            package=PackageInfo.from_dict(_require(data, "package")),
            forbids_unsafe=bool(_require(data, "forbids_unsafe")),
        )


def _entries_to_list(entries: dict) -> list:
    return [
        entry.to_dict()
        for entry in sorted(entries.values(), key=lambda entry: entry.package.id)
    ]


def _entries_from_list(entry_type: type, value: Any) -> dict:
    entries = (entry_type.from_dict(item) for item in _require_list(value))
    return {entry.package.id: entry for entry in entries}


@dataclass
class SafetyReport:
    """Report of the use of `unsafe` across a dependency tree."""

    packages: dict = field(default_factory=dict)
    packages_without_metrics: set = field(default_factory=set)
    used_but_not_scanned_files: set = field(default_factory=set)

    def to_dict(self) -> dict:
        return {
            "packages": _entries_to_list(self.packages),
            "packages_without_metrics": _ids_to_list(self.packages_without_metrics),
            "used_but_not_scanned_files": [
                str(path) for path in sorted(Path(p) for p in self.used_but_not_scanned_files)
            ],
        }

    @classmethod
    def from_dict(cls, data: Any) -> SafetyReport:
        return cls(
            packages=_entries_from_list(ReportEntry, _require(data, "packages")),
            packages_without_metrics=_ids_from_list(_require(data, "packages_without_metrics")),
            used_but_not_scanned_files={
                Path(str(item))
                for item in _require_list(_require(data, "used_but_not_scanned_files"))
            },
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> SafetyReport:
        return cls.from_dict(json.loads(text))


@dataclass
class QuickSafetyReport:
    """Report of which packages forbid the use of `unsafe`."""

    packages: dict = field(default_factory=dict)
    packages_without_metrics: set = field(default_factory=set)

    def to_dict(self) -> dict:
        return {
            "packages": _entries_to_list(self.packages),
            "packages_without_metrics": _ids_to_list(self.packages_without_metrics),
        }

    @classmethod
    def from_dict(cls, data: Any) -> QuickSafetyReport:
        return cls(
            packages=_entries_from_list(QuickReportEntry, _require(data, "packages")),
            packages_without_metrics=_ids_from_list(_require(data, "packages_without_metrics")),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> QuickSafetyReport:
        return cls.from_dict(json.loads(text))