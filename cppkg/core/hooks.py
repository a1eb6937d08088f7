"""生命周期脚本执行

清单 scripts 段中的 postinstall 在安装完成后于项目目录执行，
非零退出码抛 HookFailureError。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from cppkg.core.exceptions import HookFailureError
from cppkg.core.models import PackageManifest
from cppkg.core.protocols import ProgressSink
from cppkg.utils.shell import run_shell

logger = logging.getLogger(__name__)

POSTINSTALL = "postinstall"

ShellRunner = Callable[..., int]


def run_hook(
    manifest: PackageManifest,
    hook: str,
    *,
    cwd: Path,
    progress: ProgressSink | None = None,
    runner: ShellRunner = run_shell,
) -> bool:
    """执行清单中声明的钩子；未声明返回 False"""
    script = manifest.scripts.get(hook)
    if not script:
        return False

    if progress:
        progress(f"  - Executing {hook} hook: '{script}'")
    rc = runner(script, cwd=str(cwd), label=hook)
    if rc != 0:
        raise HookFailureError(f"{hook} 脚本失败 (rc={rc}): {script}", returncode=rc)
    return True
