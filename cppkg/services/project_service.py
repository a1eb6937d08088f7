"""项目服务: init / 添加依赖 / 安装 / 升级 / 卸载 / 缓存管理

编排核心引擎:
  清单 → 依赖发现 → 冲突仲裁 → 安装器（缓存 / 复制 / 锁文件 / cppkg.cmake / 钩子）

每次 install / upgrade 都做完整的重新解析，不读取旧锁文件。
"""

from __future__ import annotations

import logging
from typing import IO

from cppkg.core.cache import PackageCache
from cppkg.core.config import Config
from cppkg.core.exceptions import ManifestError
from cppkg.core.installer import Installer
from cppkg.core.manifest import ManifestStore
from cppkg.core.models import CacheEntry, Declaration, LockEntry, Lockfile, PackageManifest
from cppkg.core.protocols import ProgressSink, RevisionSource
from cppkg.core.resolver import (
    ConflictResolver,
    DependencyDiscoverer,
    VersionResolver,
    make_strategy,
)

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "my-cpp-project"
DEFAULT_PROJECT_VERSION = "0.1.0"


class ProjectService:
    """单个项目目录的依赖生命周期管理"""

    def __init__(
        self,
        config: Config,
        source: RevisionSource,
        *,
        progress: ProgressSink | None = None,
        transfer_progress: IO[str] | None = None,
    ) -> None:
        self.config = config
        self.source = source
        self._progress = progress or (lambda msg: None)
        self.store = ManifestStore(
            config.project_dir, config.manifest_file, config.lock_file,
        )
        self.cache = PackageCache(config.path("cache_dir"))
        self.resolver = VersionResolver(source)
        self.installer = Installer(
            source, self.cache, self.store,
            modules_dir=config.modules_dir,
            cmake_file=config.cmake_file,
            max_workers=config.max_workers,
            progress=self._progress,
            transfer_progress=transfer_progress,
        )

    # ---- 清单 ----

    def init(self, name: str = DEFAULT_PROJECT_NAME) -> bool:
        """创建空清单；已存在时不做任何修改并返回 False"""
        if self.store.exists():
            return False
        self.store.save(PackageManifest(name=name, version=DEFAULT_PROJECT_VERSION))
        logger.info("已创建 %s", self.store.manifest_path)
        return True

    def add(self, declaration: str) -> str:
        """把 url#constraint 写入清单，返回推导出的包名"""
        decl = Declaration.parse(declaration)
        manifest = self.store.load()
        name = decl.package_name
        manifest.dependencies[name] = str(decl)
        self.store.save(manifest)
        logger.info("已添加依赖: %s -> %s", name, decl)
        return name

    def remove(self, name: str) -> None:
        manifest = self.store.load()
        if name not in manifest.dependencies:
            raise ManifestError(f"{self.store.manifest_path.name} 中没有依赖包 {name}")
        del manifest.dependencies[name]
        self.store.save(manifest)

    # ---- 解析与安装 ----

    def resolve(self, manifest: PackageManifest | None = None) -> dict[str, LockEntry]:
        """发现 + 仲裁，不落盘"""
        manifest = manifest or self.store.load()
        discoverer = DependencyDiscoverer(
            self.resolver,
            manifest_file=self.config.manifest_file,
            progress=self._progress,
        )
        graph = discoverer.discover(manifest)
        strategy = make_strategy(self.config.conflict_strategy, self.resolver)
        return ConflictResolver(strategy, progress=self._progress).resolve_conflicts(graph)

    def install(self, *, upgrade: bool = False) -> Lockfile:
        """完整重新解析并安装全部依赖"""
        manifest = self.store.load()
        if upgrade:
            self._progress("Checking for new package versions...")
        else:
            self._progress("Resolving dependency graph...")
        entries = self.resolve(manifest)
        return self.installer.install(entries, manifest)

    def upgrade(self) -> Lockfile:
        return self.install(upgrade=True)

    def uninstall(self, name: str) -> Lockfile:
        """从清单移除依赖并重新安装"""
        self._progress(f"Uninstalling {name}...")
        self.remove(name)
        self._progress("Re-resolving dependencies after uninstall...")
        return self.install()

    # ---- 缓存 ----

    def cache_entries(self) -> list[CacheEntry]:
        return self.cache.entries()

    def clear_cache(self, name: str | None = None) -> int:
        return self.cache.clear(name)
