"""YAML 文件读取工具

统一 encoding="utf-8"、空值保护和大小限制，解析失败统一转换为 ConfigError。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from gnock.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# 配置文件最大 1MB，防止误把大文件当配置读入内存
MAX_YAML_SIZE = 1024 * 1024


def load_yaml(path: str | Path) -> dict[str, Any]:
    """安全读取 YAML 文件

    参数:
        path: YAML 文件路径

    返回:
        dict: 解析后的字典。文件不存在或为空时返回空字典

    异常:
        ConfigError: 文件过大、YAML 语法错误或顶层不是映射
        ConfigError: 文件存在但无法读取（目录、无权限等）

    示例:
        >>> data = load_yaml("gnock.yml")
        >>> data.get("workspace_root", "gno")
    """
    p = Path(path)
    if not p.exists():
        return {}

    file_size = p.stat().st_size
    if file_size > MAX_YAML_SIZE:
        raise ConfigError(
            f"YAML 文件过大: {p} ({file_size} 字节), 超过限制 {MAX_YAML_SIZE} 字节",
            path=str(p),
        )

    try:
        with open(p, encoding="utf-8") as f:
            result = yaml.safe_load(f)
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        logger.error("解析 YAML 文件失败: %s, 错误: %s", p, e)
        raise ConfigError(f"YAML 格式错误: {p}: {e}", path=str(p)) from e
    except OSError as e:
        raise ConfigError(f"读取配置文件失败: {p}: {e}", path=str(p)) from e

    if result is None:
        return {}
    if not isinstance(result, dict):
        raise ConfigError(
            f"{p} 内容不是映射类型 (实际类型: {type(result).__name__})",
            path=str(p),
        )
    return result
