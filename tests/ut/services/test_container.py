"""ServiceContainer 单元测试"""

from __future__ import annotations

import pytest
from fakes import FakeSource

import cppkg.core.config as cfgmod
from cppkg.core.config import Config
from cppkg.services.container import ServiceContainer
from cppkg.utils.git import GitSource


class TestServiceContainer:
    def test_lazy_loading(self, make_config) -> None:
        c = ServiceContainer(make_config())
        assert c._project is None
        _ = c.project
        assert c._project is not None

    def test_shared_instances(self, make_config) -> None:
        c = ServiceContainer(make_config(), source=FakeSource())
        assert c.project is c.project
        assert c.project.source is c.source

    def test_default_source_uses_config(self, make_config) -> None:
        c = ServiceContainer(make_config(vcs_timeout=42, vcs_retries=5))
        assert isinstance(c.source, GitSource)
        assert c.source.timeout == 42
        assert c.source.retries == 5

    def test_falls_back_to_global_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        cfg = Config(modules_dir="deps")
        monkeypatch.setattr(cfgmod, "_current", cfg)
        assert ServiceContainer().config is cfg

    def test_progress_reaches_installer(self, make_config) -> None:
        lines: list[str] = []
        c = ServiceContainer(make_config(), source=FakeSource(), progress=lines.append)
        c.project.init("app")
        c.project.install()
        assert lines[0] == "Resolving dependency graph..."
