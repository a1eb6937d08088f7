"""安装器

把仲裁后的锁定条目落地到输出目录:

  1. 删除并重建输出目录（总是从干净状态开始）
  2. 每个包: 缓存命中则复制；否则 clone → checkout 精确 commit →
     去掉 .git → 写入缓存 → 复制到输出目录
  3. 整体重写锁文件
  4. 生成 cppkg.cmake
  5. 执行根清单的 postinstall 钩子

失败时抛 InstallError(包名, 阶段)，不回滚已复制的包；
下次安装会因第 1 步重新构建整个输出目录。

max_workers > 1 时不同包并行安装，各自使用私有临时目录，
缓存写入按键隔离（见 PackageCache.store）。
"""

from __future__ import annotations

import logging
import sys
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import IO

from cppkg.core.cache import PackageCache
from cppkg.core.cmake import write_cmake
from cppkg.core.exceptions import CppkgError, FilesystemError, InstallError
from cppkg.core.hooks import POSTINSTALL, ShellRunner, run_hook
from cppkg.core.manifest import ManifestStore
from cppkg.core.models import LockEntry, Lockfile, PackageManifest
from cppkg.core.protocols import ProgressSink, RevisionSource
from cppkg.core.resolver.version import release_checkout
from cppkg.utils.fs import copy_tree, reset_dir, strip_vcs
from cppkg.utils.shell import run_shell

logger = logging.getLogger(__name__)

INSTALL_PREFIX = "cppkg-install-"


class Installer:
    """锁定条目落地 + 锁文件 / 构建文件 / 钩子"""

    def __init__(
        self,
        source: RevisionSource,
        cache: PackageCache,
        store: ManifestStore,
        *,
        modules_dir: str = "cpp_modules",
        cmake_file: str = "cppkg.cmake",
        max_workers: int = 1,
        progress: ProgressSink | None = None,
        transfer_progress: IO[str] | None = None,
        tmp_root: str | Path | None = None,
        hook_runner: ShellRunner = run_shell,
    ) -> None:
        self.source = source
        self.cache = cache
        self.store = store
        self.modules_label = modules_dir
        self.modules_dir = store.project_dir / modules_dir
        self.cmake_path = store.project_dir / cmake_file
        self.max_workers = max(1, max_workers)
        self._progress = progress or (lambda msg: None)
        self._transfer_progress = transfer_progress
        self.tmp_root = str(tmp_root) if tmp_root else None
        self._hook_runner = hook_runner

    def install(self, entries: dict[str, LockEntry], manifest: PackageManifest) -> Lockfile:
        """安装全部条目并持久化锁文件，返回新锁文件"""
        try:
            reset_dir(self.modules_dir)
        except FilesystemError as e:
            raise InstallError("", "prepare", e) from e

        self._progress("Installing packages...")
        names = sorted(entries)
        if self.max_workers == 1 or len(names) <= 1:
            for name in names:
                self._install_one(name, entries[name])
        else:
            self._install_parallel(names, entries)

        lock = Lockfile(dependencies={name: entries[name] for name in names})
        try:
            self.store.save_lockfile(lock)
        except CppkgError as e:
            raise InstallError("", "lockfile", e) from e

        self._progress(f"  - Generating {self.cmake_path.name}")
        try:
            write_cmake(self.cmake_path, lock, self.modules_label)
        except OSError as e:
            raise InstallError("", "generate", FilesystemError(str(e))) from e

        try:
            run_hook(
                manifest, POSTINSTALL,
                cwd=self.store.project_dir, progress=self._progress, runner=self._hook_runner,
            )
        except CppkgError as e:
            raise InstallError("", "hook", e) from e
        return lock

    def _install_parallel(self, names: list[str], entries: dict[str, LockEntry]) -> None:
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(self._install_one, n, entries[n]) for n in names]
            try:
                for future in futures:
                    future.result()
            except BaseException:
                # 首个失败即放弃尚未开始的安装
                for f in futures:
                    f.cancel()
                raise

    def _install_one(self, name: str, entry: LockEntry) -> None:
        self._progress(f"  - Installing {name} @ {entry.version}")
        dest = self.modules_dir / name

        if self.cache.has(name, entry.commit):
            logger.info(
                "缓存命中: %s", self.cache.key(name, entry.commit),
                extra={"package": name, "commit": entry.commit},
            )
            try:
                self.cache.copy_to(name, entry.commit, dest)
            except CppkgError as e:
                raise InstallError(name, "copy", e) from e
            return

        self._progress(f"  -> Downloading {name} from {entry.url}")
        tmp = Path(tempfile.mkdtemp(prefix=INSTALL_PREFIX, dir=self.tmp_root))
        stage = "fetch"
        try:
            self.source.clone(entry.url, tmp, progress=self._transfer_progress or sys.stderr)
            self.source.checkout(tmp, entry.commit)
            strip_vcs(tmp)
            stage = "cache"
            self.cache.store(name, entry.commit, tmp)
            stage = "copy"
            copy_tree(tmp, dest)
        except CppkgError as e:
            raise InstallError(name, stage, e) from e
        finally:
            release_checkout(tmp)
