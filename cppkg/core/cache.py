"""包缓存管理

职责:
- 以 (name, commit) 为缓存键保存去掉 .git 的检出副本
- 缓存命中检查与复制
- 显式清理（缓存不会自动失效）

缓存策略:
  - 目录名为 <name>-<commit 前 12 位>，位于缓存根目录下
  - 条目一经写入不再修改；过期条目与新条目无法区分，
    只能通过 clear() 手动清理
  - 写入时先复制到缓存根目录下的隐藏临时目录，再 rename 到最终位置，
    并发读者不会看到写了一半的条目；同键并发写入时先 rename 的胜出
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from cppkg.core.exceptions import FilesystemError
from cppkg.core.models import CacheEntry
from cppkg.utils.fs import copy_tree, remove_tree

logger = logging.getLogger(__name__)

SHORT_COMMIT_LEN = 12


class PackageCache:
    """按 (name, commit) 寻址的持久缓存"""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    @staticmethod
    def key(name: str, commit: str) -> str:
        return f"{name}-{commit[:SHORT_COMMIT_LEN]}"

    def path_for(self, name: str, commit: str) -> Path:
        return self.root / self.key(name, commit)

    def has(self, name: str, commit: str) -> bool:
        return self.path_for(name, commit).is_dir()

    def store(self, name: str, commit: str, src: Path) -> Path:
        """把 src 原子地写入缓存，返回缓存条目路径"""
        target = self.path_for(name, commit)
        if target.is_dir():
            return target

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            tmp = Path(tempfile.mkdtemp(prefix=f".{target.name}-", dir=str(self.root)))
        except OSError as e:
            raise FilesystemError(f"无法创建缓存目录 {self.root}: {e}") from e

        try:
            copy_tree(src, tmp)
            try:
                os.rename(tmp, target)
            except OSError as e:
                if not target.is_dir():
                    raise FilesystemError(f"写入缓存失败 {target}: {e}") from e
                logger.debug("缓存条目已由其他写入者创建: %s", target)
        finally:
            if tmp.exists():
                remove_tree(tmp)

        logger.info("已缓存: %s", target.name)
        return target

    def copy_to(self, name: str, commit: str, dest: Path) -> None:
        """把缓存条目复制到 dest"""
        copy_tree(self.path_for(name, commit), dest)

    def entries(self) -> list[CacheEntry]:
        """列出全部缓存条目（忽略写入中的隐藏临时目录）"""
        if not self.root.exists():
            return []
        result: list[CacheEntry] = []
        for d in sorted(self.root.iterdir()):
            if not d.is_dir() or d.name.startswith("."):
                continue
            name, _, short = d.name.rpartition("-")
            result.append(CacheEntry(name=name or d.name, short_commit=short, path=d))
        return result

    def clear(self, name: str | None = None) -> int:
        """清理缓存，返回删除的条目数；name 为空时清空全部（含残留临时目录）"""
        if not self.root.exists():
            return 0
        count = 0
        for d in list(self.root.iterdir()):
            if not d.is_dir():
                continue
            if d.name.startswith("."):
                if name is None:
                    remove_tree(d)
                continue
            entry_name = d.name.rpartition("-")[0]
            if name is None or entry_name == name:
                remove_tree(d)
                count += 1
        logger.info("已清理 %d 个缓存条目%s", count, f" ({name})" if name else "")
        return count
