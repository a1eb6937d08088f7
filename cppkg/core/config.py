"""集中配置管理

提供统一的配置入口：文件名、目录、VCS 超时与重试、并行度、冲突策略。
支持从 YAML 文件加载 + 环境变量覆盖 + 编程式覆盖。
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path

import yaml

from cppkg.core.exceptions import ConfigError
from cppkg.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "configs/cppkg.yml"
CONFLICT_STRATEGIES = ("highest", "strict")


@dataclass
class Config:
    """cppkg 全局配置"""

    # 文件与目录（相对 project_dir）
    project_dir: str = "."
    manifest_file: str = "cppkg.json"
    lock_file: str = "cppkg.lock"
    modules_dir: str = "cpp_modules"
    cache_dir: str = ".cppkg_cache"
    cmake_file: str = "cppkg.cmake"

    # VCS
    vcs_timeout: float = 600
    vcs_retries: int = 2

    # 执行
    max_workers: int = 1
    conflict_strategy: str = "highest"   # highest | strict

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.conflict_strategy not in CONFLICT_STRATEGIES:
            raise ConfigError(
                f"未知的冲突策略: {self.conflict_strategy}，"
                f"可选: {', '.join(CONFLICT_STRATEGIES)}"
            )
        try:
            workers = int(self.max_workers)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"max_workers 不是整数: {self.max_workers}") from e
        if workers < 1:
            raise ConfigError(f"max_workers 必须 >= 1: {self.max_workers}")
        self.max_workers = workers

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认；环境变量优先级最高"""
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, OSError, ValueError) as e:
            raise ConfigError(f"无法读取配置文件 {path}: {e}") from e
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}

        if os.getenv("CPPKG_CACHE_DIR"):
            matched["cache_dir"] = os.environ["CPPKG_CACHE_DIR"]
        if os.getenv("CPPKG_MAX_WORKERS"):
            try:
                matched["max_workers"] = int(os.environ["CPPKG_MAX_WORKERS"])
            except ValueError as e:
                raise ConfigError(f"CPPKG_MAX_WORKERS 不是整数: {e}") from e

        try:
            cfg = cls(**matched)
        except TypeError as e:
            raise ConfigError(f"配置文件 {path} 无效: {e}") from e
        cfg.extra = extra
        return cfg

    def path(self, name: str) -> Path:
        """将相对路径字段解析到项目目录下"""
        p = Path(getattr(self, name))
        return p if p.is_absolute() else Path(self.project_dir) / p

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
