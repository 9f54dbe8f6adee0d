"""CLI — 内置包查询命令"""

from __future__ import annotations

import sys

import click

from inboxpkgs.core.exceptions import InboxError
from inboxpkgs.core.models import DEFAULT_FAMILY
from inboxpkgs.core.registry import FrameworkPackageRegistry


def register(group: click.Group) -> None:
    group.add_command(check)
    group.add_command(show)
    group.add_command(list_frameworks)
    group.add_command(serve)


def _registry(data_dir: str | None) -> FrameworkPackageRegistry:
    from inboxpkgs.core.registry import default_registry
    try:
        if data_dir:
            return FrameworkPackageRegistry.from_directory(data_dir)
        return default_registry()
    except InboxError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e


_data_dir_option = click.option(
    "--data-dir", default=None, help="框架包表目录（默认使用包内置数据）",
)


# ---- 查询 ----

@click.command()
@click.argument("framework")
@click.argument("package_id")
@click.argument("version")
@click.option("--family", default=None, help="只检查指定框架族（默认检查全部）")
@_data_dir_option
def check(framework: str, package_id: str, version: str, family: str | None, data_dir: str | None) -> None:
    """检查某个包版本是否已由目标框架内置提供（退出码 0=内置, 1=否）"""
    registry = _registry(data_dir)
    try:
        if family:
            in_box = registry.is_in_box(family, framework, package_id, version)
        else:
            in_box = registry.is_framework_package(framework, package_id, version)
        inbox_version = registry.lookup(family or DEFAULT_FAMILY, framework, package_id)
    except InboxError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e

    detail = f" (内置版本 {inbox_version})" if inbox_version else ""
    if in_box:
        click.echo(f"内置: {package_id} {version} @ {framework}{detail}")
        return
    click.echo(f"非内置: {package_id} {version} @ {framework}{detail}")
    sys.exit(1)


@click.command()
@click.argument("framework")
@click.option("--family", default=DEFAULT_FAMILY, help="框架族")
@click.option("--flatten", is_flag=True, help="合并父链，输出完整包表")
@_data_dir_option
def show(framework: str, family: str, flatten: bool, data_dir: str | None) -> None:
    """显示框架的内置包表"""
    registry = _registry(data_dir)
    try:
        node = registry.get(family, framework)
    except InboxError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e
    if node is None:
        click.echo(f"没有 {family}/{framework} 的内置包表。")
        return

    parent = node.parent.framework if node.parent else "-"
    click.echo(f"{node.framework_name} {node.framework} (父框架: {parent})")
    packages = node.flatten() if flatten else {
        node.names[key]: version for key, version in node.packages.items()
    }
    for package_id in sorted(packages, key=str.lower):
        click.echo(f"  {package_id:60s} {packages[package_id]}")


@click.command(name="frameworks")
@click.option("--family", default=None, help="只列出指定框架族")
@_data_dir_option
def list_frameworks(family: str | None, data_dir: str | None) -> None:
    """列出已加载的框架族与框架"""
    registry = _registry(data_dir)
    families = [family] if family else registry.families()
    for fam in families:
        frameworks = registry.frameworks(fam)
        if not frameworks:
            click.echo(f"{fam}: (无)")
            continue
        click.echo(f"{fam}: {', '.join(str(fw) for fw in frameworks)}")


# ---- 查询服务 ----

@click.command()
@click.option("--host", default="127.0.0.1", help="监听地址")
@click.option("--port", default=8888, help="监听端口")
def serve(host: str, port: int) -> None:
    """启动内置包查询 Web API"""
    from inboxpkgs.web.app import run_server
    run_server(port=port, host=host)
