"""Shell 命令执行工具 — 统一子进程调用

通过 CommandExecutor 协议抽象子进程执行，方便测试替换。
GitSource 的所有 git 调用都经由执行器完成。
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import IO, Protocol

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 — 抽象子进程调用

    测试时可注入 mock 实现，无需 patch subprocess。
    超时由实现方抛出 subprocess.TimeoutExpired。
    """

    def execute(
        self,
        cmd: str | list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: float | None = None,
        stderr_sink: IO[str] | None = None,
    ) -> CommandResult:
        """执行命令并返回结果

        stderr_sink 非空时 stderr 直接流式写入该流（用于 git 传输进度），
        结果中的 stderr 为空串。
        """
        ...


# =========================================================================
# 默认实现: 本地执行器
# =========================================================================

class LocalExecutor:
    """本地命令执行器（默认实现）"""

    def execute(
        self,
        cmd: str | list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: float | None = None,
        stderr_sink: IO[str] | None = None,
    ) -> CommandResult:
        args = shlex.split(cmd) if isinstance(cmd, str) else cmd
        if stderr_sink is not None and _has_fileno(stderr_sink):
            r = subprocess.run(
                args, stdout=subprocess.PIPE, stderr=stderr_sink, text=True,
                cwd=cwd, env=env, check=False, timeout=timeout,
            )
            return CommandResult(returncode=r.returncode, stdout=r.stdout or "", stderr="")
        r = subprocess.run(
            args, capture_output=True, text=True,
            cwd=cwd, env=env, check=False, timeout=timeout,
        )
        if stderr_sink is not None:
            # 内存流（如 click 测试替身）没有文件描述符，事后整体转写
            stderr_sink.write(r.stderr)
        return CommandResult(
            returncode=r.returncode,
            stdout=r.stdout,
            stderr=r.stderr,
        )


def _has_fileno(stream: IO[str]) -> bool:
    try:
        stream.fileno()
    except (AttributeError, OSError, ValueError):
        return False
    return True


# =========================================================================
# 全局默认执行器（可替换）
# =========================================================================

_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    """获取全局默认命令执行器"""
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """替换全局默认命令执行器（用于测试）"""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor


def run_shell(
    cmd: str, *, cwd: str = ".",
    env: dict[str, str] | None = None,
    label: str = "cmd",
) -> int:
    """通过 sh -c 执行脚本，输出直接继承当前终端，返回退出码

    生命周期脚本常含管道和 &&，因此不做 shlex 拆分。
    """
    logger.info("  %s: %s (cwd=%s)", label, cmd, cwd)
    r = subprocess.run(["sh", "-c", cmd], cwd=cwd, env=env, check=False)  # noqa: S603
    return r.returncode
