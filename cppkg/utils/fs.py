"""文件系统工具: 目录复制 / 删除 / 剥离 VCS 元数据"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from cppkg.core.exceptions import FilesystemError

logger = logging.getLogger(__name__)

VCS_DIRS = (".git",)


def copy_tree(src: Path, dst: Path) -> None:
    """递归复制目录（保留权限位与符号链接），目标已存在时合并"""
    try:
        shutil.copytree(src, dst, symlinks=True, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise FilesystemError(f"复制失败 {src} -> {dst}: {e}") from e


def remove_tree(path: Path) -> None:
    """删除目录；不存在时静默返回"""
    if not path.exists() and not path.is_symlink():
        return
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        raise FilesystemError(f"删除失败 {path}: {e}") from e


def strip_vcs(path: Path) -> None:
    """删除检出目录中的 VCS 元数据"""
    for name in VCS_DIRS:
        remove_tree(path / name)


def reset_dir(path: Path) -> None:
    """清空并重建目录"""
    remove_tree(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"创建目录失败 {path}: {e}") from e
