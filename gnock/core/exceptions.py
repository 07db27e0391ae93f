"""统一异常体系

所有业务异常继承 GnockError，按 ErrorKind 分类，调用方可按 kind 分支处理，
无需匹配错误字符串。CLI 层据此输出友好提示并以非零状态退出。
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """错误类别（封闭枚举）"""

    INVALID_URL = "INVALID_URL"
    RETRIEVAL = "RETRIEVAL_ERROR"
    IO = "IO_ERROR"
    INVALID_DECLARATION = "INVALID_DECLARATION"
    DECLARATION_NOT_FOUND = "DECLARATION_NOT_FOUND"
    CONFIG = "CONFIG_ERROR"


class GnockError(Exception):
    """基础异常

    path / url 为定位问题所需的上下文；kind 可在构造时覆盖，
    用于上层包装下层异常时保留原始类别。
    """

    kind: ErrorKind = ErrorKind.IO

    def __init__(
        self,
        message: str,
        *,
        path: str = "",
        url: str = "",
        kind: ErrorKind | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.url = url
        if kind is not None:
            self.kind = kind

    @property
    def code(self) -> str:
        return self.kind.value


class InvalidURLError(GnockError):
    """URL 格式无效（路径段不足）"""

    kind = ErrorKind.INVALID_URL


class RetrievalError(GnockError):
    """外部拉取机制失败"""

    kind = ErrorKind.RETRIEVAL


class FileSystemError(GnockError):
    """文件读写或目录创建失败"""

    kind = ErrorKind.IO


class InvalidDeclarationError(GnockError):
    """module 声明行存在但格式非法"""

    kind = ErrorKind.INVALID_DECLARATION

    def __init__(self, message: str, *, line: str = "", path: str = "") -> None:
        super().__init__(message, path=path)
        self.line = line


class DeclarationNotFoundError(GnockError):
    """文件结束前未找到 module 声明"""

    kind = ErrorKind.DECLARATION_NOT_FOUND


class ConfigError(GnockError):
    """配置文件内容无效"""

    kind = ErrorKind.CONFIG
