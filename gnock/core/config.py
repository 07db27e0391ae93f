"""集中配置管理

替代各模块散落的默认常量，提供统一的配置入口。
支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from gnock.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "gnock.yml"


@dataclass
class Config:
    """全局配置"""

    # 安装目标: <cwd>/<workspace_root>/<examples_dir>/<module path>
    workspace_root: str = "gno"
    examples_dir: str = "examples"
    manifest_filename: str = "gno.mod"

    # 拉取
    source: str = "git"
    vcs_command: str = "git"
    default_scheme: str = "https"
    temp_prefix: str = "gnock-"

    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.debug("配置已加载: %s", path)
    return _current


def reset_config() -> None:
    """丢弃全局配置，下次 get_config() 返回默认值"""
    global _current  # noqa: PLW0603
    _current = None
