"""生成 cppkg.cmake（依赖包头文件路径）"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from cppkg.core.models import Lockfile
from cppkg.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

HEADER = (
    "# This file is auto-generated by cppkg.\n"
    "# Do not edit this file manually.\n"
    "\n"
    "# Add include directories for all installed dependencies.\n"
)


def render_cmake(lock: Lockfile, modules_dir: str) -> str:
    """每个已安装包生成一行 include_directories，按包名排序"""
    lines = [HEADER]
    for name in sorted(lock.dependencies):
        include = PurePosixPath(Path(modules_dir).as_posix()) / name / "include"
        lines.append(f"include_directories(${{CMAKE_CURRENT_SOURCE_DIR}}/{include})\n")
    return "".join(lines)


def write_cmake(path: Path, lock: Lockfile, modules_dir: str) -> None:
    atomic_write(path, render_cmake(lock, modules_dir))
    logger.info("已生成 %s", path)
