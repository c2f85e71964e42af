"""Package lookups by id, name and package specification."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterator, Optional

import semver

from geigerlens.metadata import Dependency, Metadata, Package, VersionReq

_log = logging.getLogger(__name__)

_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _split_name_version(spec: str) -> tuple:
    positions = [index for index in (spec.find("@"), spec.find(":")) if index >= 0]
    if not positions:
        return spec, None
    cut = min(positions)
    return spec[:cut], spec[cut + 1 :]


@dataclass(frozen=True)
class PkgSpec:
    """A package specification such as `serde`, `serde:1.0` or `serde@1.0.150`."""

    name: str
    version: Optional[VersionReq] = None
    url: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> PkgSpec:
        spec = text.strip()
        url = None
        if "://" in spec:
            url, _, fragment = spec.partition("#")
            url_name = url.rstrip("/").rsplit("/", 1)[-1]
            if not fragment:
                spec = url_name
            elif ":" in fragment or "@" in fragment or not fragment[0].isdigit():
                spec = fragment
            else:
                spec = f"{url_name}:{fragment}"
        name, raw_version = _split_name_version(spec)
        if not name or not _NAME_RE.match(name):
            raise ValueError(f"invalid package name in spec: {text!r}")
        version = None
        if raw_version is not None:
            if not raw_version:
                raise ValueError(f"missing version in spec: {text!r}")
            version = VersionReq.parse(f"={raw_version}")
        return cls(name=name, version=version, url=url)

    def matches(self, package: Package) -> bool:
        if package.name != self.name:
            return False
        if self.version is not None and not self.version.matches(package.version):
            return False
        if self.url is not None:
            return package.source is not None and self.url in package.source
        return True


class Krates:
    """Index of the packages of a metadata set, keyed by package id."""

    def __init__(self, metadata: Metadata) -> None:
        self._packages = {package.id: package for package in metadata.packages}

    def node_for_kid(self, package_id: str) -> Optional[Package]:
        return self._packages.get(package_id)

    def krates_by_name(self, name: str) -> Iterator[Package]:
        return (package for package in self._packages.values() if package.name == name)

    def licence(self, package_id: str) -> Optional[str]:
        package = self.node_for_kid(package_id)
        return None if package is None else package.license

    def name_and_version(self, package_id: str) -> Optional[tuple]:
        package = self.node_for_kid(package_id)
        return None if package is None else (package.name, package.version)

    def repository(self, package_id: str) -> Optional[str]:
        package = self.node_for_kid(package_id)
        return None if package is None else package.repository

    def query_resolve(self, query: str) -> Optional[str]:
        """Id of the last package matching a package specification, or None."""
        try:
            spec = PkgSpec.parse(query)
        except ValueError:
            _log.warning("Failed to construct PkgSpec from string: %s", query)
            return None
        matching = [package.id for package in self.krates_by_name(spec.name) if spec.matches(package)]
        return matching[-1] if matching else None

    def matches_ignoring_source(self, dependency: Dependency, package_id: str) -> Optional[bool]:
        """Whether a package satisfies a dependency by name and version; None if unknown."""
        name_and_version = self.name_and_version(package_id)
        if name_and_version is None:
            _log.warning("Failed to match (ignoring source) package: %s", package_id)
            return None
        name, version = name_and_version
        if not isinstance(version, semver.Version):
            version = semver.Version.parse(str(version))
        return name == dependency.name and dependency.req.matches(version)