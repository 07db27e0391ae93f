"""目录树复制

按相对路径镜像整个子树，保留文件和目录的权限位。
不做过滤、不做符号链接特殊处理，遇到第一个 IO 错误即失败，不回滚已复制内容。
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path

from gnock.core.exceptions import FileSystemError

logger = logging.getLogger(__name__)


def _raise_walk_error(exc: OSError) -> None:
    raise exc


def copy_tree(src: str | Path, dst: str | Path) -> None:
    """递归复制 src 到 dst

    目录权限在其内容写完后再设置，只读的源目录也能完整复制。

    Raises:
        FileSystemError: 读取、写入或创建目录失败，path 为出错的路径
    """
    src_root = Path(src)
    dst_root = Path(dst)
    dir_modes: list[tuple[Path, int]] = []

    current = src_root
    try:
        for dirpath, dirnames, filenames in os.walk(src_root, onerror=_raise_walk_error):
            dirnames.sort()
            current = Path(dirpath)
            target_dir = dst_root / current.relative_to(src_root)
            target_dir.mkdir(parents=True, exist_ok=True)
            dir_modes.append((target_dir, stat.S_IMODE(current.stat().st_mode)))

            for name in sorted(filenames):
                current = Path(dirpath) / name
                target = target_dir / name
                target.write_bytes(current.read_bytes())
                shutil.copymode(current, target)

        # 先子后父，避免父目录先变只读
        for target_dir, mode in reversed(dir_modes):
            current = target_dir
            os.chmod(target_dir, mode)
    except OSError as e:
        failed = e.filename or current
        raise FileSystemError(f"复制失败 {failed}: {e.strerror or e}", path=str(failed)) from e

    logger.debug("已复制 %s -> %s", src_root, dst_root)
