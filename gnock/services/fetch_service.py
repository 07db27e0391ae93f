"""拉取编排服务

状态流转: VALIDATING -> CLONING -> INSTALLING -> DONE，
前三个阶段任一失败进入 FAILED 并原样抛出异常。
临时目录由 TemporaryDirectory 持有，任何退出路径都会被删除。
"""

from __future__ import annotations

import logging
import tempfile
from enum import Enum

from gnock.core.exceptions import FileSystemError, InvalidURLError
from gnock.core.fetcher import GitFetcher, RepositoryFetcher
from gnock.core.installer import InstalledPackage, PackageInstaller

logger = logging.getLogger(__name__)

# authority / owner / repo
MIN_URL_SEGMENTS = 3


class FetchState(str, Enum):
    VALIDATING = "validating"
    CLONING = "cloning"
    INSTALLING = "installing"
    DONE = "done"
    FAILED = "failed"


def validate_url(url: str) -> list[str]:
    """校验 URL 至少包含 authority/owner/repo 三段，返回路径段

    github.com/username/repo/...
    |---------|--------|-----|
      initial   owner    repo

    Raises:
        InvalidURLError: 段数不足或前三段存在空段
    """
    stripped = url.strip()
    if "://" in stripped:
        stripped = stripped.split("://", 1)[1]
    segments = stripped.strip("/").split("/")
    if len(segments) < MIN_URL_SEGMENTS or not all(segments[:MIN_URL_SEGMENTS]):
        raise InvalidURLError(f"无效的 URL: {url!r}（格式: host/owner/repo）", url=url)
    return segments


class FetchOrchestrator:
    """拉取并安装（单次调用独占一个临时目录）"""

    def __init__(
        self,
        fetcher: RepositoryFetcher | None = None,
        installer: PackageInstaller | None = None,
        temp_prefix: str = "",
    ) -> None:
        if not temp_prefix:
            from gnock.core.config import get_config
            temp_prefix = get_config().temp_prefix
        self.fetcher = fetcher or GitFetcher()
        self.installer = installer or PackageInstaller()
        self.temp_prefix = temp_prefix
        self.state = FetchState.VALIDATING

    def fetch_and_install(self, url: str) -> list[InstalledPackage]:
        """拉取 url 并安装其中发现的全部包"""
        self.state = FetchState.VALIDATING
        target = url.strip()
        try:
            validate_url(url)
            self.state = FetchState.CLONING
            with tempfile.TemporaryDirectory(prefix=self.temp_prefix) as scratch:
                self.fetcher.fetch(target, scratch)
                self.state = FetchState.INSTALLING
                installed = self.installer.install(scratch, "")
        except OSError as e:
            # 临时目录创建或清理失败
            self.state = FetchState.FAILED
            raise FileSystemError(f"拉取 {url} 时 IO 失败: {e}", path=str(e.filename or ""), url=url) from e
        except Exception:
            self.state = FetchState.FAILED
            logger.debug("拉取失败: %s", url, exc_info=True)
            raise

        self.state = FetchState.DONE
        logger.info("拉取完成: %s，共安装 %d 个包", url, len(installed))
        return installed
