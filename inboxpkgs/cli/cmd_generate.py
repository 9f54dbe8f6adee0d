"""CLI — 框架包表生成命令"""

from __future__ import annotations

import click

from inboxpkgs.core.exceptions import InboxError


def register(group: click.Group) -> None:
    group.add_command(generate)


@click.command()
@click.option("--config", "-c", "config_path", default="configs/default.yml", help="配置文件路径")
@click.option("--output-dir", "-o", default=None, help="输出目录（覆盖配置中的 output_dir）")
@click.option("--no-assemblies", is_flag=True, help="跳过引用程序集评估，只使用运行时种子与覆盖")
def generate(config_path: str, output_dir: str | None, no_assemblies: bool) -> None:
    """从 NuGet 拉取框架引用包，生成各框架的内置包表"""
    from inboxpkgs.core.config import init_config
    from inboxpkgs.core.generator import FrameworkTableBuilder, emit_tables
    from inboxpkgs.core.nuget import NuGetClient

    cfg = init_config(config_path)
    if no_assemblies:
        cfg.evaluate_assemblies = False

    try:
        builder = FrameworkTableBuilder.from_config(NuGetClient.from_config())
        result = builder.build()
        written = emit_tables(result, output_dir or cfg.output_dir)
    except InboxError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e

    for path in written:
        click.echo(f"已生成: {path}")
