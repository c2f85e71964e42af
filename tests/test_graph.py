import pytest

from geigerlens.args import Args, DepsArgs, TargetArgs
from geigerlens.extra_deps import ExtraDeps
from geigerlens.graph import (
    Cfg,
    Graph,
    Platform,
    build_graph,
    build_graph_prerequisites,
)
from geigerlens.krates import Krates
from geigerlens.metadata import Metadata
from geigerlens.report import DependencyKind

REGISTRY = "registry+https://example.com/index"
ROOT_ID = "app 0.1.0 (path+file:///work/app)"
SERDE_ID = f"serde 1.0.150 ({REGISTRY})"
ITOA_ID = f"itoa 1.0.5 ({REGISTRY})"
CC_ID = f"cc 1.0.78 ({REGISTRY})"
TEMPFILE_ID = f"tempfile 3.3.0 ({REGISTRY})"
WINAPI_ID = f"winapi 0.3.9 ({REGISTRY})"
LIBC_ID = f"libc 0.2.139 ({REGISTRY})"

HOST = "x86_64-unknown-linux-gnu"
LINUX_CFGS = [Cfg("unix"), Cfg("target_os", "linux")]


def _package(package_id, name, version, dependencies=(), source=REGISTRY):
    return {
        "id": package_id,
        "name": name,
        "version": version,
        "manifest_path": f"/reg/{name}-{version}/Cargo.toml",
        "source": source,
        "dependencies": list(dependencies),
    }


@pytest.fixture
def metadata():
    return Metadata.from_dict(
        {
            "packages": [
                _package(
                    ROOT_ID,
                    "app",
                    "0.1.0",
                    [
                        {"name": "serde", "req": "^1.0", "kind": None},
                        {"name": "cc", "req": "^1.0", "kind": "build"},
                        {"name": "tempfile", "req": "^3", "kind": "dev"},
                        {"name": "winapi", "req": "^0.3", "kind": None, "target": "cfg(windows)"},
                        {"name": "libc", "req": "^0.2", "kind": None, "target": "cfg(unix)"},
                    ],
                    source=None,
                ),
                _package(SERDE_ID, "serde", "1.0.150", [{"name": "itoa", "req": "^1.0", "kind": None}]),
                _package(ITOA_ID, "itoa", "1.0.5"),
                _package(CC_ID, "cc", "1.0.78"),
                _package(TEMPFILE_ID, "tempfile", "3.3.0", [{"name": "itoa", "req": "^1", "kind": "dev"}]),
                _package(WINAPI_ID, "winapi", "0.3.9"),
                _package(LIBC_ID, "libc", "0.2.139"),
            ]
        }
    )


@pytest.mark.parametrize(
    "deps_args, expected",
    [
        (DepsArgs(all_deps=True), ExtraDeps.ALL),
        (DepsArgs(build_deps=True), ExtraDeps.BUILD),
        (DepsArgs(dev_deps=True), ExtraDeps.DEV),
        (DepsArgs(), ExtraDeps.NO_MORE),
    ],
)
def test_prerequisites_extra_deps(deps_args, expected):
    extra_deps, _ = build_graph_prerequisites("config_host", deps_args, TargetArgs())
    assert extra_deps is expected


@pytest.mark.parametrize(
    "target_args, expected",
    [
        (TargetArgs(all_targets=True, target=None), None),
        (TargetArgs(all_targets=False, target=None), "default_config_host"),
        (TargetArgs(all_targets=False, target="provided_config_host"), "provided_config_host"),
    ],
)
def test_prerequisites_target(target_args, expected):
    _, target = build_graph_prerequisites("default_config_host", DepsArgs(), target_args)
    assert target == expected


def test_cfg_parse():
    assert Cfg.parse("unix") == Cfg("unix")
    assert Cfg.parse('target_os = "linux"') == Cfg("target_os", "linux")


@pytest.mark.parametrize("text", ["", "= \"x\"", 'key = value', "unix extra"])
def test_cfg_parse_invalid(text):
    with pytest.raises(ValueError):
        Cfg.parse(text)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("cfg(unix)", True),
        ("cfg(windows)", False),
        ("cfg(not(windows))", True),
        ('cfg(all(unix, target_os = "linux"))', True),
        ('cfg(all(unix, target_os = "macos"))', False),
        ("cfg(any(windows, unix))", True),
        ("cfg(any())", False),
        ("cfg(all())", True),
        (HOST, True),
        ("x86_64-pc-windows-msvc", False),
    ],
)
def test_platform_matches(text, expected):
    assert Platform.parse(text).matches(HOST, LINUX_CFGS) is expected


@pytest.mark.parametrize("text", ["", "cfg(all(unix)", "bad triple!", "cfg(not(a, b))"])
def test_platform_parse_invalid(text):
    with pytest.raises(ValueError):
        Platform.parse(text)


def test_graph_add_node_and_edge():
    graph = Graph()
    assert graph.add_node("a") == 0
    assert graph.add_node("b") == 1
    assert graph.add_node("a") == 0
    graph.add_edge("a", "b", DependencyKind.BUILD)
    graph.add_edge("a", "c", DependencyKind.NORMAL)
    assert graph.dependencies("a") == [("b", DependencyKind.BUILD), ("c", DependencyKind.NORMAL)]
    assert graph.nodes["c"] == 2
    assert graph.dependencies("b") == []


def test_build_graph_default(metadata):
    graph = build_graph(Args(), Krates(metadata), metadata, HOST, LINUX_CFGS, ROOT_ID)
    assert set(graph.nodes) == {ROOT_ID, SERDE_ID, LIBC_ID, ITOA_ID}
    assert set(graph.dependencies(ROOT_ID)) == {
        (SERDE_ID, DependencyKind.NORMAL),
        (LIBC_ID, DependencyKind.NORMAL),
    }
    assert graph.dependencies(SERDE_ID) == [(ITOA_ID, DependencyKind.NORMAL)]
    assert graph.nodes[ROOT_ID] == 0


def test_build_graph_all_dependencies(metadata):
    args = Args(deps_args=DepsArgs(all_deps=True))
    graph = build_graph(args, Krates(metadata), metadata, HOST, LINUX_CFGS, ROOT_ID)
    assert set(graph.dependencies(ROOT_ID)) == {
        (SERDE_ID, DependencyKind.NORMAL),
        (CC_ID, DependencyKind.BUILD),
        (TEMPFILE_ID, DependencyKind.DEVELOPMENT),
        (LIBC_ID, DependencyKind.NORMAL),
    }
    # Development dependencies only count for the root package.
    assert graph.dependencies(TEMPFILE_ID) == []


def test_build_graph_build_dependencies_only(metadata):
    args = Args(deps_args=DepsArgs(build_deps=True))
    graph = build_graph(args, Krates(metadata), metadata, HOST, LINUX_CFGS, ROOT_ID)
    assert CC_ID in graph.nodes
    assert TEMPFILE_ID not in graph.nodes


def test_build_graph_all_targets(metadata):
    args = Args(target_args=TargetArgs(all_targets=True))
    graph = build_graph(args, Krates(metadata), metadata, HOST, None, ROOT_ID)
    assert {WINAPI_ID, LIBC_ID} <= set(graph.nodes)


def test_build_graph_without_cfgs(metadata):
    graph = build_graph(Args(), Krates(metadata), metadata, HOST, None, ROOT_ID)
    assert set(graph.nodes) == {ROOT_ID, SERDE_ID, ITOA_ID}


def test_build_graph_unknown_root(metadata):
    graph = build_graph(Args(), Krates(metadata), metadata, HOST, LINUX_CFGS, "missing 1.0.0")
    assert graph.nodes == {"missing 1.0.0": 0}
    assert graph.edges == []