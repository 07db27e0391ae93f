"""gnock 日志配置

只配置 gnock 命名空间下的日志器，不改动宿主程序的根日志器。
JSON 模式下，GnockError 的 kind / path / url 作为独立字段输出。
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from gnock.core.exceptions import GnockError

LOGGER_NAMESPACE = "gnock"
DEFAULT_LEVEL = logging.INFO


class JSONFormatter(logging.Formatter):
    """单行 JSON 日志，便于 CI 流水线消费"""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        exc = record.exc_info[1] if record.exc_info else None
        if isinstance(exc, GnockError):
            entry["kind"] = exc.code
            if exc.path:
                entry["path"] = exc.path
            if exc.url:
                entry["url"] = exc.url
        if exc is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def resolve_level(level: str | int) -> int | None:
    """级别名（不区分大小写）或数值转为 logging 级别，无法识别返回 None"""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else None


def setup_logging(level: str | int = "INFO", json_output: bool = False) -> logging.Logger:
    """配置 gnock 日志器，输出到 stderr（stdout 只留给安装结果）

    重复调用会替换之前安装的 handler，不会重复输出。
    无法识别的级别回退为 INFO 并记一条警告。
    """
    log = logging.getLogger(LOGGER_NAMESPACE)
    reset_logging()

    resolved = resolve_level(level)
    log.setLevel(resolved if resolved is not None else DEFAULT_LEVEL)
    log.propagate = False

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"))
    log.addHandler(handler)

    if resolved is None:
        log.warning("未知日志级别 %r，使用 INFO", level)
    return log


def reset_logging() -> None:
    """移除 gnock 日志器上的 handlers，恢复向根日志器传播"""
    log = logging.getLogger(LOGGER_NAMESPACE)
    for handler in log.handlers[:]:
        log.removeHandler(handler)
        handler.close()
    log.propagate = True
