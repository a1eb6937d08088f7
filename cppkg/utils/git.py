"""Git 版本来源 — 基于 git 命令行

职责：
- clone 远程仓库（可选流式输出传输进度）
- 列出 tag
- checkout 指定引用
- 将 tag / 分支 / commit 解析为完整 commit SHA

所有网络操作受 timeout 约束，超时视为可重试的 NetworkOrVcsError，
最多重试 retries 次。
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import IO, Callable, TypeVar

from cppkg.core.exceptions import NetworkOrVcsError, UnresolvableReferenceError
from cppkg.utils.shell import CommandExecutor, CommandResult, get_executor

logger = logging.getLogger(__name__)

_SAFE_REF_RE = re.compile(r"^[a-zA-Z0-9_./@+\-]+$")

T = TypeVar("T")


def _subcommand(args: list[str]) -> str:
    """从 git 参数中取出子命令名（跳过 -c key=value）"""
    rest = iter(args[1:])
    for a in rest:
        if a == "-c":
            next(rest, None)
            continue
        if not a.startswith("-"):
            return a
    return "?"


class GitSource:
    """Git 仓库来源，满足 RevisionSource 协议"""

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        *,
        timeout: float | None = 600,
        retries: int = 2,
    ) -> None:
        self._executor = executor or get_executor()
        self.timeout = timeout
        self.retries = max(0, retries)

    # ---- 协议方法 ----

    def clone(self, url: str, dest: Path, progress: IO[str] | None = None) -> None:
        """克隆仓库到 dest；progress 非空时把 git 进度流式写入该流"""
        def _clone() -> None:
            # 超时重试前清掉残留的半成品目录，git 只接受空目录
            if dest.exists() and any(dest.iterdir()):
                shutil.rmtree(dest, ignore_errors=True)
            args = ["git", "clone", "--progress" if progress else "--quiet", url, str(dest)]
            self._run(args, stderr_sink=progress, network=True)

        logger.debug("git clone %s -> %s", url, dest)
        self._with_retries(f"clone {url}", _clone)

    def list_tags(self, path: Path) -> list[str]:
        r = self._run(["git", "tag", "-l"], cwd=path)
        return [t.strip() for t in r.stdout.splitlines() if t.strip()]

    def checkout(self, path: Path, ref: str) -> None:
        self._check_ref(ref)
        self._run(
            ["git", "-c", "advice.detachedHead=false", "checkout", "--quiet", ref],
            cwd=path,
        )

    def resolve_to_commit(self, path: Path, ref: str, *, refresh: bool = True) -> str:
        """将 tag / 远程分支 / commit 解析为完整 SHA

        查找顺序: refs/tags/<ref> → refs/remotes/origin/<ref> → <ref>。
        refresh=True 时先 fetch 远程引用。
        """
        self._check_ref(ref)
        if refresh:
            self._with_retries(
                f"fetch {path}",
                lambda: self._run(
                    ["git", "fetch", "--all", "--tags", "--quiet"], cwd=path, network=True,
                ),
            )

        for candidate in (f"refs/tags/{ref}", f"refs/remotes/origin/{ref}", ref):
            r = self._exec(
                ["git", "rev-parse", "--verify", "--quiet", f"{candidate}^{{commit}}"],
                cwd=path,
            )
            if r.success and r.stdout.strip():
                return r.stdout.strip()
        raise UnresolvableReferenceError(f"引用不存在: '{ref}' ({path})")

    # ---- 内部工具 ----

    @staticmethod
    def _check_ref(ref: str) -> None:
        if not ref or not _SAFE_REF_RE.match(ref) or ref.startswith("-"):
            raise UnresolvableReferenceError(f"ref 包含非法字符: {ref!r}")

    def _exec(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        stderr_sink: IO[str] | None = None,
        network: bool = False,
    ) -> CommandResult:
        try:
            return self._executor.execute(
                args,
                cwd=str(cwd) if cwd else ".",
                timeout=self.timeout if network else None,
                stderr_sink=stderr_sink,
            )
        except subprocess.TimeoutExpired as e:
            raise NetworkOrVcsError(
                f"git {_subcommand(args)} 超时（{self.timeout}秒）", retryable=True,
            ) from e
        except OSError as e:
            raise NetworkOrVcsError(f"无法执行 git: {e}") from e

    def _run(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        stderr_sink: IO[str] | None = None,
        network: bool = False,
    ) -> CommandResult:
        r = self._exec(args, cwd=cwd, stderr_sink=stderr_sink, network=network)
        if not r.success:
            raise NetworkOrVcsError(
                f"git {_subcommand(args)} 失败 (rc={r.returncode}): {r.stderr.strip()[:300]}"
            )
        return r

    def _with_retries(self, label: str, fn: Callable[[], T]) -> T:
        attempt = 0
        while True:
            try:
                return fn()
            except NetworkOrVcsError as e:
                if not e.retryable or attempt >= self.retries:
                    raise
                attempt += 1
                logger.warning("%s 失败，第 %d 次重试: %s", label, attempt, e)
