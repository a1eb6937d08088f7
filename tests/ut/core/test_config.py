"""Config 单元测试"""

from __future__ import annotations

from pathlib import Path

import pytest

import cppkg.core.config as cfgmod
from cppkg.core.config import Config
from cppkg.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CPPKG_CACHE_DIR", raising=False)
    monkeypatch.delenv("CPPKG_MAX_WORKERS", raising=False)


class TestConfig:
    def test_defaults(self) -> None:
        cfg = Config()
        assert cfg.manifest_file == "cppkg.json"
        assert cfg.modules_dir == "cpp_modules"
        assert cfg.max_workers == 1
        assert cfg.conflict_strategy == "highest"

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        assert Config.from_file(str(tmp_path / "none.yml")) == Config()

    def test_from_file(self, tmp_path: Path) -> None:
        p = tmp_path / "cppkg.yml"
        p.write_text("modules_dir: deps\nmax_workers: 4\nconflict_strategy: strict\nmirror: internal\n")
        cfg = Config.from_file(str(p))
        assert cfg.modules_dir == "deps"
        assert cfg.max_workers == 4
        assert cfg.conflict_strategy == "strict"
        assert cfg.extra == {"mirror": "internal"}

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        p = tmp_path / "cppkg.yml"
        p.write_text("cache_dir: from-file\nmax_workers: 2\n")
        monkeypatch.setenv("CPPKG_CACHE_DIR", "/var/cache/cppkg")
        monkeypatch.setenv("CPPKG_MAX_WORKERS", "8")
        cfg = Config.from_file(str(p))
        assert cfg.cache_dir == "/var/cache/cppkg"
        assert cfg.max_workers == 8

    def test_path_resolution(self, tmp_path: Path) -> None:
        cfg = Config(project_dir=str(tmp_path), cache_dir="/abs/cache")
        assert cfg.path("modules_dir") == tmp_path / "cpp_modules"
        assert cfg.path("cache_dir") == Path("/abs/cache")

    def test_shipped_config_loads(self) -> None:
        shipped = Path(__file__).resolve().parents[3] / "configs" / "cppkg.yml"
        assert Config.from_file(str(shipped)) == Config()


class TestConfigErrors:
    def test_unknown_strategy(self) -> None:
        with pytest.raises(ConfigError, match="newest"):
            Config(conflict_strategy="newest")

    @pytest.mark.parametrize("workers", [0, -1, "many"])
    def test_invalid_workers(self, workers: object) -> None:
        with pytest.raises(ConfigError):
            Config(max_workers=workers)  # type: ignore[arg-type]

    def test_invalid_env_workers(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CPPKG_MAX_WORKERS", "lots")
        with pytest.raises(ConfigError, match="CPPKG_MAX_WORKERS"):
            Config.from_file(str(tmp_path / "none.yml"))

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        p = tmp_path / "cppkg.yml"
        p.write_text("max_workers: [1\n")
        with pytest.raises(ConfigError):
            Config.from_file(str(p))


class TestGlobalConfig:
    def test_init_and_get(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(cfgmod, "_current", None)
        assert cfgmod.get_config() == Config()
        p = tmp_path / "cppkg.yml"
        p.write_text("lock_file: deps.lock\n")
        cfgmod.init_config(str(p))
        assert cfgmod.get_config().lock_file == "deps.lock"
