"""DependencyDiscoverer 单元测试"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from fakes import FakeRepo, FakeSource, manifest_json, sha

from cppkg.core.exceptions import InvalidDeclarationError, NetworkOrVcsError, ResolutionError
from cppkg.core.models import PackageManifest
from cppkg.core.resolver.discovery import DependencyDiscoverer
from cppkg.core.resolver.version import VersionResolver

A = "https://example.com/a.git"
B = "https://example.com/b.git"
C = "https://example.com/c.git"
D = "https://example.com/d.git"


def _root(**deps: str) -> PackageManifest:
    return PackageManifest(name="app", dependencies=deps)


def _discoverer(source: FakeSource, tmp_path: Path, progress=None) -> DependencyDiscoverer:
    return DependencyDiscoverer(VersionResolver(source, tmp_path), progress=progress)


@pytest.fixture()
def diamond() -> FakeSource:
    """app -> a; a -> b, c; b -> c"""
    return FakeSource({
        A: FakeRepo(
            tags={"1.0.0": sha("a1")},
            files={sha("a1"): {"cppkg.json": manifest_json("a", {"b": f"{B}#^1.0.0", "c": f"{C}#^2.0.0"})}},
        ),
        B: FakeRepo(
            tags={"1.0.0": sha("b1")},
            files={sha("b1"): {"cppkg.json": manifest_json("b", {"c": f"{C}#^1.0.0"})}},
        ),
        C: FakeRepo(
            tags={"1.5.0": sha("c15"), "2.1.0": sha("c21")},
            files={
                sha("c15"): {"cppkg.json": manifest_json("c", {"d": f"{D}#^1.0.0"})},
                sha("c21"): {"include/c.h": ""},
            },
        ),
        D: FakeRepo(tags={"1.0.0": sha("d1")}),
    })


class TestDiscover:
    def test_collects_constraints_per_request_edge(self, diamond: FakeSource, tmp_path: Path) -> None:
        graph = _discoverer(diamond, tmp_path).discover(_root(a=f"{A}#^1.0.0"))
        assert graph.names() == ["a", "b", "c"]
        assert graph.constraints["a"] == ["^1.0.0"]
        assert graph.constraints["b"] == ["^1.0.0"]
        assert graph.constraints["c"] == ["^2.0.0", "^1.0.0"]
        assert graph.urls == {"a": A, "b": B, "c": C}

    def test_expands_only_first_constraint(self, diamond: FakeSource, tmp_path: Path) -> None:
        """c 只按 ^2.0.0 探测，1.5.0 声明的 d 不会被发现"""
        graph = _discoverer(diamond, tmp_path).discover(_root(a=f"{A}#^1.0.0"))
        assert "d" not in graph.constraints
        assert D not in diamond.clone_urls

    def test_each_package_probed_once(self, diamond: FakeSource, tmp_path: Path) -> None:
        _discoverer(diamond, tmp_path).discover(_root(a=f"{A}#^1.0.0"))
        assert sorted(diamond.clone_urls) == [A, B, C]

    def test_cycle_terminates(self, tmp_path: Path) -> None:
        source = FakeSource({
            A: FakeRepo(
                tags={"1.0.0": sha("a1")},
                files={sha("a1"): {"cppkg.json": manifest_json("a", {"b": f"{B}#^1.0.0"})}},
            ),
            B: FakeRepo(
                tags={"1.0.0": sha("b1")},
                files={sha("b1"): {"cppkg.json": manifest_json("b", {"a": f"{A}#^1.0.0"})}},
            ),
        })
        graph = _discoverer(source, tmp_path).discover(_root(a=f"{A}#^1.0.0"))
        assert graph.constraints == {"a": ["^1.0.0", "^1.0.0"], "b": ["^1.0.0"]}
        assert source.clone_urls == [A, B]

    def test_package_without_manifest_is_leaf(self, diamond: FakeSource, tmp_path: Path) -> None:
        graph = _discoverer(diamond, tmp_path).discover(_root(d=f"{D}#^1.0.0"))
        assert graph.constraints == {"d": ["^1.0.0"]}

    def test_empty_root(self, diamond: FakeSource, tmp_path: Path) -> None:
        graph = _discoverer(diamond, tmp_path).discover(_root())
        assert graph.names() == []
        assert diamond.clone_urls == []

    def test_probes_do_not_leak(self, diamond: FakeSource, tmp_path: Path) -> None:
        _discoverer(diamond, tmp_path).discover(_root(a=f"{A}#^1.0.0"))
        assert diamond.leaked() == []

    def test_progress_lines(self, diamond: FakeSource, tmp_path: Path) -> None:
        lines: list[str] = []
        _discoverer(diamond, tmp_path, progress=lines.append).discover(_root(a=f"{A}#^1.0.0"))
        assert lines == [
            "  - Discovered dependencies in a @ 1.0.0...",
            "  - Discovered dependencies in b @ 1.0.0...",
        ]


class TestDiscoverErrors:
    def test_unreachable_dependency_aborts(self, diamond: FakeSource, tmp_path: Path) -> None:
        missing = "https://example.com/missing.git"
        with pytest.raises(ResolutionError) as exc:
            _discoverer(diamond, tmp_path).discover(_root(a=f"{A}#^1.0.0", missing=f"{missing}#^1.0.0"))
        assert exc.value.package == "missing"
        assert exc.value.stage == "discover"
        assert isinstance(exc.value.cause, NetworkOrVcsError)
        assert diamond.leaked() == []

    def test_invalid_root_declaration(self, diamond: FakeSource, tmp_path: Path) -> None:
        with pytest.raises(ResolutionError) as exc:
            _discoverer(diamond, tmp_path).discover(_root(a="no-version-here"))
        assert exc.value.package == "app"
        assert isinstance(exc.value.cause, InvalidDeclarationError)

    def test_invalid_child_manifest(self, tmp_path: Path) -> None:
        source = FakeSource({
            A: FakeRepo(tags={"1.0.0": sha("a1")}, files={sha("a1"): {"cppkg.json": "{not json"}}),
        })
        with pytest.raises(ResolutionError, match=r"\[discover\] a"):
            _discoverer(source, tmp_path).discover(_root(a=f"{A}#^1.0.0"))


def test_conflicting_url_keeps_first(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    mirror = "https://mirror.example.com/b.git"
    source = FakeSource({
        A: FakeRepo(
            tags={"1.0.0": sha("a1")},
            files={sha("a1"): {"cppkg.json": manifest_json("a", {"b": f"{mirror}#^1.0.0"})}},
        ),
        B: FakeRepo(tags={"1.0.0": sha("b1")}),
    })
    with caplog.at_level(logging.WARNING, logger="cppkg.core.resolver.discovery"):
        graph = _discoverer(source, tmp_path).discover(_root(a=f"{A}#^1.0.0", b=f"{B}#^1.0.0"))
    assert graph.urls["b"] == B
    assert graph.constraints["b"] == ["^1.0.0", "^1.0.0"]
    assert mirror in caplog.text
    assert mirror not in source.clone_urls
