"""领域协议定义

集中定义核心引擎与外部协作者之间的接口契约（Protocol），
解析器和安装器依赖抽象而非具体的 git 实现。
"""

from __future__ import annotations

from pathlib import Path
from typing import IO, Callable, Protocol

# 面向用户的进度输出（CLI 传入 click.echo）
ProgressSink = Callable[[str], None]


# =========================================================================
# 版本来源协议
# =========================================================================

class RevisionSource(Protocol):
    """版本来源协议

    抽象 clone / 列 tag / checkout / 引用解析，
    使版本解析器和安装器不依赖 git 命令行的具体实现。
    """

    def clone(self, url: str, dest: Path, progress: IO[str] | None = None) -> None:
        """克隆仓库到 dest"""
        ...

    def list_tags(self, path: Path) -> list[str]:
        """列出全部 tag"""
        ...

    def checkout(self, path: Path, ref: str) -> None:
        """检出指定引用"""
        ...

    def resolve_to_commit(self, path: Path, ref: str, *, refresh: bool = True) -> str:
        """将引用解析为完整 commit SHA（refresh=True 时先刷新远程引用）"""
        ...
