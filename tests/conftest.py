"""测试共享 fixture"""

from __future__ import annotations

from pathlib import Path

import pytest

from cppkg.core.config import Config


@pytest.fixture()
def make_config(tmp_path: Path):
    """构造指向 tmp_path 下项目目录和缓存目录的配置"""
    def _make(**overrides: object) -> Config:
        project = tmp_path / "project"
        project.mkdir(exist_ok=True)
        fields = {"project_dir": str(project), "cache_dir": str(tmp_path / "cache")}
        fields.update(overrides)
        return Config(**fields)  # type: ignore[arg-type]
    return _make
