"""cppkg 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
所有 CppkgError 统一转换为 click 错误（stderr 输出，退出码 1）。
"""

from __future__ import annotations

from typing import Callable, TypeVar

import click

from cppkg import __version__
from cppkg.core.config import DEFAULT_CONFIG_FILE, init_config
from cppkg.core.exceptions import CppkgError
from cppkg.services.container import ServiceContainer
from cppkg.utils.logger import setup_logging_from_env

T = TypeVar("T")


def guarded(action: str, fn: Callable[[], T]) -> T:
    """执行服务调用，把业务异常转换为带上下文的 click 错误"""
    try:
        return fn()
    except CppkgError as e:
        raise click.ClickException(f"{action}: {e}") from e


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default=DEFAULT_CONFIG_FILE, help="配置文件路径")
@click.option("--project-dir", "-C", default=None, help="项目目录（包含 cppkg.json）")
@click.pass_context
def main(ctx: click.Context, config_path: str, project_dir: str | None) -> None:
    """cppkg - C/C++ 依赖包管理器"""
    setup_logging_from_env()
    if ctx.obj is None:
        cfg = guarded("Error loading config", lambda: init_config(config_path))
        if project_dir:
            cfg.project_dir = project_dir
        ctx.obj = ServiceContainer(cfg, progress=click.echo)


# 注册各领域子命令
from cppkg.cli.cmd_project import register as _reg_project  # noqa: E402
from cppkg.cli.cmd_cache import register as _reg_cache  # noqa: E402

_reg_project(main)
_reg_cache(main)
