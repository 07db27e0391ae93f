"""子进程执行工具

通过 CommandExecutor 协议抽象子进程执行，方便测试替换。
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandExecutor(Protocol):
    """命令执行器协议

    测试时可注入 mock 实现，无需 patch subprocess。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...


class LocalExecutor:
    """本地命令执行器（默认实现）

    启动失败（命令不存在等）时抛 OSError，由调用方决定如何包装。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        logger.debug("执行: %s (cwd=%s)", " ".join(cmd), cwd or ".")
        r = subprocess.run(
            cmd, capture_output=True, text=True,
            cwd=cwd, check=False, timeout=timeout,
        )
        return CommandResult(returncode=r.returncode, stdout=r.stdout, stderr=r.stderr)
