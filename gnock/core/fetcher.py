"""代码仓拉取器 - 支持 Git / 本地目录

RepositoryFetcher 为可替换的能力接口，编排器只依赖该协议，
替换拉取方式（其他 VCS、归档下载、本地路径）无需改动安装逻辑。
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol

from gnock.core.copier import copy_tree
from gnock.core.exceptions import ConfigError, FileSystemError, RetrievalError
from gnock.utils.shell import CommandExecutor, LocalExecutor

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
_SCP_RE = re.compile(r"^[\w.\-]+@[\w.\-]+:")

# stderr 截断长度，避免错误信息过长
_STDERR_LIMIT = 300


class RepositoryFetcher(Protocol):
    """代码仓拉取协议"""

    def fetch(self, url: str, dest: str | Path) -> None:
        """把 url 指向的源码树填充到 dest，失败抛 RetrievalError"""
        ...


class GitFetcher:
    """通过 git clone 拉取"""

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        command: str = "git",
        default_scheme: str = "https",
    ) -> None:
        self.executor = executor or LocalExecutor()
        self.command = command
        self.default_scheme = default_scheme

    def clone_url(self, url: str) -> str:
        """补全协议头: github.com/a/b -> https://github.com/a/b"""
        if _SCHEME_RE.match(url) or _SCP_RE.match(url):
            return url
        return f"{self.default_scheme}://{url}"

    def fetch(self, url: str, dest: str | Path) -> None:
        target = self.clone_url(url)
        logger.info("git clone: %s -> %s", target, dest)
        try:
            r = self.executor.execute([self.command, "clone", target, str(dest)])
        except OSError as e:
            raise RetrievalError(f"克隆仓库失败 {url}: {e}", url=url) from e
        if not r.success:
            detail = r.stderr.strip()[:_STDERR_LIMIT]
            raise RetrievalError(
                f"克隆仓库失败 {url} (rc={r.returncode}): {detail}", url=url,
            )


class LocalFetcher:
    """把本地目录当作源码树（离线 vendoring）"""

    def fetch(self, url: str, dest: str | Path) -> None:
        src = Path(url).expanduser()
        if not src.is_dir():
            raise RetrievalError(f"本地目录不存在: {url}", url=url)
        logger.info("本地复制: %s -> %s", src, dest)
        try:
            copy_tree(src, dest)
        except FileSystemError as e:
            raise RetrievalError(f"复制本地目录失败 {url}: {e}", url=url, path=e.path) from e


_FETCHERS: dict[str, type[GitFetcher] | type[LocalFetcher]] = {
    "git": GitFetcher,
    "local": LocalFetcher,
}

FETCHER_NAMES = tuple(_FETCHERS)


def get_fetcher(name: str, **kwargs: object) -> RepositoryFetcher:
    """按名称创建拉取器，kwargs 透传给构造函数"""
    cls = _FETCHERS.get(name)
    if cls is None:
        raise ConfigError(f"不支持的来源类型: {name}，可用: {', '.join(FETCHER_NAMES)}")
    return cls(**kwargs)  # type: ignore[arg-type]
