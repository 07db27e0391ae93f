"""包安装器

遍历拉取下来的源码树，找出所有包含 gno.mod 的目录（包根），
按清单中的 module 路径把整个包根复制到工作空间:

    <workspace_root>/<examples_dir>/<module path>/

嵌套的包根各自独立安装；外层包的复制同样包含嵌套目录。
任意一个清单解析失败或复制失败都会中止整次安装，不做部分成功处理。
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from gnock.core import modfile
from gnock.core.copier import copy_tree
from gnock.core.exceptions import (
    ErrorKind,
    FileSystemError,
    GnockError,
    InvalidDeclarationError,
)

logger = logging.getLogger(__name__)


@dataclass
class PackageRoot:
    """源码树中发现的包根目录"""

    directory: Path
    relpath: str
    manifest: Path


@dataclass
class InstalledPackage:
    """安装结果"""

    module_path: str
    destination: Path
    relpath: str = ""


class PackageInstaller:
    """包安装器"""

    def __init__(
        self,
        workspace_root: str | Path = "",
        *,
        examples_dir: str = "",
        manifest_filename: str = "",
        copier: Callable[[Path, Path], None] = copy_tree,
        on_installed: Callable[[InstalledPackage], None] | None = None,
    ) -> None:
        if not workspace_root or not examples_dir or not manifest_filename:
            from gnock.core.config import get_config
            cfg = get_config()
            workspace_root = workspace_root or cfg.workspace_root
            examples_dir = examples_dir or cfg.examples_dir
            manifest_filename = manifest_filename or cfg.manifest_filename
        self.workspace_root = Path(workspace_root)
        self.examples_dir = examples_dir
        self.manifest_filename = manifest_filename
        self.copier = copier
        self.on_installed = on_installed

    @property
    def examples_root(self) -> Path:
        return self.workspace_root / self.examples_dir

    def discover(self, root_dir: str | Path, relpath: str = "") -> list[PackageRoot]:
        """深度优先查找所有包根，同级条目按名称排序

        Raises:
            FileSystemError: 目录无法列出
        """
        found: list[PackageRoot] = []
        stack: list[tuple[Path, str]] = [(Path(root_dir), relpath)]
        while stack:
            directory, rel = stack.pop()
            try:
                entries = sorted(os.scandir(directory), key=lambda e: e.name)
            except OSError as e:
                raise FileSystemError(f"读取目录失败 {directory}: {e}", path=str(directory)) from e

            subdirs: list[tuple[Path, str]] = []
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append((Path(entry.path), f"{rel}/{entry.name}" if rel else entry.name))
                elif entry.name == self.manifest_filename:
                    found.append(PackageRoot(directory=directory, relpath=rel, manifest=Path(entry.path)))
            # 逆序压栈，出栈顺序与名称顺序一致
            stack.extend(reversed(subdirs))
        return found

    def destination_for(self, module: modfile.ModuleDescriptor) -> Path:
        """由 module 路径推导安装目录，拒绝逃出 examples 根目录的路径"""
        segments = module.segments
        if module.path.startswith("/") or not segments or ".." in segments:
            raise InvalidDeclarationError(
                f"module 路径无法映射到工作空间: {module.path}", line=module.path,
            )
        return self.examples_root.joinpath(*segments)

    def install(self, root_dir: str | Path, relpath: str = "") -> list[InstalledPackage]:
        """安装 root_dir 下发现的全部包，返回安装结果（按安装顺序）"""
        installed: list[InstalledPackage] = []
        for pkg_root in self.discover(root_dir, relpath):
            installed.append(self._install_one(pkg_root))
        if not installed:
            logger.warning("未发现任何 %s: %s", self.manifest_filename, root_dir)
        return installed

    def _install_one(self, pkg_root: PackageRoot) -> InstalledPackage:
        where = pkg_root.relpath or "."
        try:
            module = modfile.parse(pkg_root.manifest)
        except GnockError as e:
            raise GnockError(
                f"解析 {self.manifest_filename} 失败 ({where}): {e}",
                path=where, kind=e.kind,
            ) from e
        except OSError as e:
            raise GnockError(
                f"读取 {self.manifest_filename} 失败 ({where}): {e}",
                path=where, kind=ErrorKind.IO,
            ) from e

        try:
            dest = self.destination_for(module)
        except InvalidDeclarationError as e:
            raise InvalidDeclarationError(f"{e} ({where})", line=e.line, path=where) from e

        try:
            dest.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"创建目标目录失败 {dest}: {e}", path=str(dest)) from e

        try:
            self.copier(pkg_root.directory, dest)
        except GnockError as e:
            raise FileSystemError(
                f"复制 {where} 到 {dest} 失败: {e}", path=e.path or str(dest),
            ) from e
        except OSError as e:
            raise FileSystemError(f"复制 {where} 到 {dest} 失败: {e}", path=str(dest)) from e

        pkg = InstalledPackage(module_path=module.path, destination=dest, relpath=pkg_root.relpath)
        logger.info("Package %s installed successfully to %s", module.path, dest)
        if self.on_installed is not None:
            self.on_installed(pkg)
        return pkg
