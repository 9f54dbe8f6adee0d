"""inboxpkgs 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os

import click

from inboxpkgs import __version__
from inboxpkgs.utils.logger import setup_logging


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """inboxpkgs - .NET 框架内置包表生成与查询"""
    setup_logging(
        level=os.getenv("INBOXPKGS_LOG_LEVEL", "INFO"),
        json_output=os.getenv("INBOXPKGS_LOG_JSON", "") == "1",
    )


# 注册各领域子命令
from inboxpkgs.cli.cmd_generate import register as _reg_generate  # noqa: E402
from inboxpkgs.cli.cmd_query import register as _reg_query  # noqa: E402

_reg_generate(main)
_reg_query(main)
