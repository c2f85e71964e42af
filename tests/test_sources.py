import pytest

from geigerlens.report import GitSource, PathSource, RegistrySource
from geigerlens.sources import handle_path_source, handle_source_repr


@pytest.mark.parametrize(
    "source_repr, expected",
    [
        (
            "registry+https://github.com/rust-lang/crates.io-index",
            RegistrySource(name="crates.io", url="https://github.com/rust-lang/crates.io-index"),
        ),
        (
            "git+https://github.com/rust-itertools/itertools.git?rev=8761fbefb3b209",
            GitSource(url="https://github.com/rust-itertools/itertools.git", rev="8761fbefb3b209"),
        ),
        (
            "git+https://github.com/rust-itertools/itertools.git",
            GitSource(url="https://github.com/rust-itertools/itertools.git", rev=""),
        ),
    ],
)
def test_handle_source_repr(source_repr, expected):
    assert handle_source_repr(source_repr) == expected


def test_handle_source_repr_unrecognised():
    with pytest.raises(ValueError, match="Unrecognised source type: svn"):
        handle_source_repr("svn+https://example.com/repo")


def test_handle_source_repr_invalid_url():
    with pytest.raises(ValueError):
        handle_source_repr("registry")


def test_handle_path_source():
    source = handle_path_source(
        "(path+file:///cargo_geiger/test_crates/test1_package_with_no_deps)"
    )
    assert source == PathSource(url="file:///cargo_geiger/test_crates/test1_package_with_no_deps")


def test_handle_path_source_without_file():
    with pytest.raises(ValueError):
        handle_path_source("(registry+https://example.com)")