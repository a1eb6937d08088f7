"""CLI: 包缓存命令"""

from __future__ import annotations

import click

from cppkg.cli import guarded
from cppkg.services.container import ServiceContainer


def register(group: click.Group) -> None:
    group.add_command(cache)


@click.group()
def cache() -> None:
    """管理本地包缓存（按 name + commit 寻址，不会自动失效）"""


@cache.command(name="list")
@click.pass_obj
def list_cache(container: ServiceContainer) -> None:
    """列出缓存条目"""
    entries = guarded("Error reading cache", container.project.cache_entries)
    if not entries:
        click.echo("Cache is empty.")
        return
    for e in entries:
        click.echo(f"  {e.name:24s} {e.short_commit}  {e.path}")


@cache.command(name="clear")
@click.option("--name", default=None, help="只清理指定包的缓存")
@click.pass_obj
def clear_cache(container: ServiceContainer, name: str | None) -> None:
    """清理缓存条目"""
    count = guarded("Error clearing cache", lambda: container.project.clear_cache(name))
    click.echo(f"Removed {count} cache entr{'y' if count == 1 else 'ies'}.")
