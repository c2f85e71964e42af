"""Selection of which extra dependency kinds are analysed."""

from __future__ import annotations

import enum

from geigerlens.report import DependencyKind


class ExtraDeps(enum.Enum):
    """Extra dependency kinds to include besides normal dependencies."""

    ALL = "all"
    BUILD = "build"
    DEV = "dev"
    NO_MORE = "no_more"

    def allows(self, dependency_kind: DependencyKind) -> bool:
        if dependency_kind is DependencyKind.NORMAL or self is ExtraDeps.ALL:
            return True
        if self is ExtraDeps.BUILD:
            return dependency_kind is DependencyKind.BUILD
        if self is ExtraDeps.DEV:
            return dependency_kind is DependencyKind.DEVELOPMENT
        return False