"""CLI — 拉取并安装命令"""

from __future__ import annotations

import sys

import click

from gnock.core.config import DEFAULT_CONFIG_FILE, init_config
from gnock.core.exceptions import GnockError
from gnock.core.fetcher import FETCHER_NAMES, get_fetcher
from gnock.core.installer import InstalledPackage, PackageInstaller
from gnock.services.fetch_service import FetchOrchestrator


def register(group: click.Group) -> None:
    group.add_command(get)


def _echo_installed(pkg: InstalledPackage) -> None:
    click.echo(f"Package {pkg.module_path} installed successfully to {pkg.destination}")


@click.command()
@click.argument("url")
@click.option("--workspace", "-w", default="", help="工作空间根目录（默认取配置 workspace_root）")
@click.option("--source", "-s", default=None, type=click.Choice(FETCHER_NAMES), help="拉取方式（默认取配置 source）")
@click.option("--config", "-c", "config_path", default=DEFAULT_CONFIG_FILE, help="配置文件路径")
def get(url: str, workspace: str, source: str | None, config_path: str) -> None:
    """拉取 URL 指向的代码仓并安装其中的全部包（例: gnock get github.com/owner/repo）"""
    try:
        cfg = init_config(config_path)
        name = source or cfg.source
        kwargs = {"command": cfg.vcs_command, "default_scheme": cfg.default_scheme} if name == "git" else {}
        fetcher = get_fetcher(name, **kwargs)
        installer = PackageInstaller(
            workspace or cfg.workspace_root,
            examples_dir=cfg.examples_dir,
            manifest_filename=cfg.manifest_filename,
            on_installed=_echo_installed,
        )
        FetchOrchestrator(fetcher, installer, temp_prefix=cfg.temp_prefix).fetch_and_install(url)
    except GnockError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
