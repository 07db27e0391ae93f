"""gnock - gno 包拉取与安装工具"""

__version__ = "0.1.0"
