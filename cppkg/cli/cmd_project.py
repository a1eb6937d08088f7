"""CLI 项目依赖命令: init / install / upgrade / uninstall"""

from __future__ import annotations

import click

from cppkg.cli import guarded
from cppkg.services.container import ServiceContainer


def register(group: click.Group) -> None:
    group.add_command(init)
    group.add_command(install)
    group.add_command(upgrade)
    group.add_command(uninstall)


@click.command()
@click.pass_obj
def init(container: ServiceContainer) -> None:
    """初始化项目（创建 cppkg.json）"""
    project = container.project
    created = guarded("Error creating cppkg.json", project.init)
    if created:
        click.echo("Initialized empty C++ project (created cppkg.json).")
    else:
        click.echo("cppkg.json already exists.")


@click.command()
@click.argument("package", required=False, metavar="[URL#VERSION]")
@click.pass_obj
def install(container: ServiceContainer, package: str | None) -> None:
    """安装 cppkg.json 中的全部依赖；指定 URL#VERSION 时先加入清单"""
    project = container.project
    if package:
        guarded(f"Error adding package {package}", lambda: project.add(package))
    lock = guarded("Error installing dependencies", project.install)
    click.echo(f"Installed {len(lock.dependencies)} package(s).")


@click.command()
@click.pass_obj
def upgrade(container: ServiceContainer) -> None:
    """升级全部依赖到约束允许的最新版本"""
    click.echo("Upgrading all packages to the latest versions satisfying cppkg.json...")
    lock = guarded("Error upgrading dependencies", container.project.upgrade)
    click.echo(f"Installed {len(lock.dependencies)} package(s).")


@click.command()
@click.argument("name")
@click.pass_obj
def uninstall(container: ServiceContainer, name: str) -> None:
    """从项目中移除依赖并重新解析"""
    guarded(f"Error uninstalling package {name}", lambda: container.project.uninstall(name))
    click.echo(f"Removed {name}.")
