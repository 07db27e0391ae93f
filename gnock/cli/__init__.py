"""gnock 命令行接口

每个子命令模块通过 register() 把自己挂到 main group。
"""

import os

import click

from gnock import __version__
from gnock.utils.logger import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="gnock")
def main() -> None:
    """gnock - 拉取代码仓并安装其中的 gno 包"""
    setup_logging(
        level=os.getenv("GNOCK_LOG_LEVEL", "INFO"),
        json_output=os.getenv("GNOCK_LOG_JSON", "") == "1",
    )


from gnock.cli.cmd_get import register as _reg_get  # noqa: E402

_reg_get(main)
