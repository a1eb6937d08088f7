"""版本解析器

将 (url, constraint) 解析为具体的 (版本标签, commit)，副产物是一个临时检出目录。

流程:
  1. clone 到新的临时目录
  2. 列出全部 tag
  3. constraint 能解析为版本范围 → 取满足范围的最大 tag，解析 commit 并检出
     否则视为字面引用（tag / 分支 / commit）→ 刷新远程引用后直接解析并检出
  4. 返回 (label, commit, 检出目录)

临时目录的生命周期:
  - resolve(): 成功时由调用方负责删除，失败时在抛出前删除
  - probe():   上下文管理器，任何退出路径（成功 / 异常 / 中断）都会删除
"""

from __future__ import annotations

import contextlib
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Iterator

from cppkg.core.exceptions import NoSatisfyingVersionError
from cppkg.core.models import ResolvedVersion
from cppkg.core.protocols import RevisionSource
from cppkg.core.resolver.versions import highest_matching, parse_range, sorted_versions

logger = logging.getLogger(__name__)

RESOLVE_PREFIX = "cppkg-resolve-"


def release_checkout(path: Path) -> None:
    """删除临时检出目录；清理失败只记录日志，不覆盖原异常"""
    shutil.rmtree(path, ignore_errors=True)
    if path.exists():
        logger.warning("临时目录清理失败: %s", path)


class VersionResolver:
    """单个 (url, constraint) 的版本解析"""

    def __init__(self, source: RevisionSource, tmp_root: str | Path | None = None) -> None:
        self.source = source
        self.tmp_root = str(tmp_root) if tmp_root else None

    def resolve(self, url: str, constraint: str, *, exact: bool = False) -> ResolvedVersion:
        """解析版本并保留检出目录（调用方负责删除 result.checkout）

        exact=True 时 constraint 按 tag 名原样解析，不当作版本范围；
        冲突仲裁后按胜出标签取 commit 时使用。
        """
        tmp = Path(tempfile.mkdtemp(prefix=RESOLVE_PREFIX, dir=self.tmp_root))
        try:
            self.source.clone(url, tmp)
            if exact:
                label, commit = constraint, self._checkout_ref(tmp, constraint, refresh=False)
            else:
                label, commit = self._resolve_in(tmp, url, constraint)
        except BaseException:
            release_checkout(tmp)
            raise
        logger.debug("解析 %s#%s -> %s (%s)", url, constraint, label, commit[:12])
        return ResolvedVersion(label=label, commit=commit, checkout=tmp)

    @contextlib.contextmanager
    def probe(
        self, url: str, constraint: str, *, exact: bool = False,
    ) -> Iterator[ResolvedVersion]:
        """解析版本，退出上下文时总是删除检出目录"""
        resolved = self.resolve(url, constraint, exact=exact)
        try:
            yield resolved
        finally:
            release_checkout(resolved.checkout)

    def list_versions(self, url: str) -> list[str]:
        """列出仓库中全部语义化版本 tag（升序）"""
        tmp = Path(tempfile.mkdtemp(prefix=RESOLVE_PREFIX, dir=self.tmp_root))
        try:
            self.source.clone(url, tmp)
            return sorted_versions(self.source.list_tags(tmp))
        finally:
            release_checkout(tmp)

    def _resolve_in(self, path: Path, url: str, constraint: str) -> tuple[str, str]:
        tags = self.source.list_tags(path)
        spec = parse_range(constraint)

        if spec is None:
            # 字面引用: 不做版本过滤，直接解析
            return constraint, self._checkout_ref(path, constraint, refresh=True)

        best = highest_matching(tags, spec)
        if best is None:
            raise NoSatisfyingVersionError(
                f"没有满足约束 '{constraint}' 的版本: {url}"
            )
        return best, self._checkout_ref(path, best, refresh=False)

    def _checkout_ref(self, path: Path, ref: str, *, refresh: bool) -> str:
        commit = self.source.resolve_to_commit(path, ref, refresh=refresh)
        self.source.checkout(path, commit)
        return commit
