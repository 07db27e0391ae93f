"""gno.mod 清单解析

只识别第一条 module 声明，require 等其余内容一律忽略:

    module gno.land/r/demo/foo

    require (
        gno.land/p/demo/ufmt v0.0.0-latest
    )
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from gnock.core.exceptions import DeclarationNotFoundError, InvalidDeclarationError

MODULE_KEYWORD = "module"


def _is_utf8(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _printable(text: str) -> str:
    """surrogateescape 读入的非法字节替换为 U+FFFD，便于输出"""
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


@dataclass(frozen=True)
class ModuleDescriptor:
    """清单声明的模块标识"""

    path: str

    @property
    def segments(self) -> list[str]:
        """按 / 拆分的路径段，用于推导安装目录"""
        return [s for s in self.path.split("/") if s]


def parse_lines(lines: Iterable[str], source: str = "") -> ModuleDescriptor:
    """从文本行中解析 module 声明（无 IO）

    Raises:
        InvalidDeclarationError: 声明行拆分后不是恰好两个 token，或路径含非 UTF-8 字节
        DeclarationNotFoundError: 没有以 module 开头的行
    """
    for raw in lines:
        line = raw.strip()
        if not line.startswith(MODULE_KEYWORD):
            continue
        parts = line.split()
        if len(parts) != 2:
            raise InvalidDeclarationError(
                f"无效的 module 声明: {_printable(line)}", line=_printable(line), path=source,
            )
        if not _is_utf8(parts[1]):
            raise InvalidDeclarationError(
                f"module 路径不是合法的 UTF-8: {_printable(line)}", line=_printable(line), path=source,
            )
        return ModuleDescriptor(path=parts[1])

    where = f": {source}" if source else ""
    raise DeclarationNotFoundError(f"未找到 module 声明{where}", path=source)


def parse(path: str | Path) -> ModuleDescriptor:
    """解析单个清单文件

    读取失败（文件不存在、无权限）原样抛出 OSError。
    非 UTF-8 字节只在落入 module 路径时才报错，注释等其余行不受影响。

    Raises:
        InvalidDeclarationError: module 路径含非 UTF-8 字节
    """
    p = Path(path)
    with open(p, encoding="utf-8", errors="surrogateescape") as f:
        return parse_lines(f, source=str(p))
