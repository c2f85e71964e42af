import pytest

from geigerlens.extra_deps import ExtraDeps
from geigerlens.report import DependencyKind


@pytest.mark.parametrize(
    "extra_deps, kind, expected",
    [
        (ExtraDeps.ALL, DependencyKind.NORMAL, True),
        (ExtraDeps.BUILD, DependencyKind.NORMAL, True),
        (ExtraDeps.DEV, DependencyKind.NORMAL, True),
        (ExtraDeps.NO_MORE, DependencyKind.NORMAL, True),
        (ExtraDeps.ALL, DependencyKind.BUILD, True),
        (ExtraDeps.ALL, DependencyKind.DEVELOPMENT, True),
        (ExtraDeps.BUILD, DependencyKind.BUILD, True),
        (ExtraDeps.BUILD, DependencyKind.DEVELOPMENT, False),
        (ExtraDeps.DEV, DependencyKind.BUILD, False),
        (ExtraDeps.DEV, DependencyKind.DEVELOPMENT, True),
    ],
)
def test_extra_deps_allows(extra_deps, kind, expected):
    assert extra_deps.allows(kind) is expected


@pytest.mark.parametrize("kind", [DependencyKind.BUILD, DependencyKind.DEVELOPMENT])
def test_no_more_rejects_extra_kinds(kind):
    assert ExtraDeps.NO_MORE.allows(kind) is False