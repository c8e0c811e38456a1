"""日志工具。

统一通过 :class:`LoggerFactory` 获取日志器，确保包内只配置一次处理器，并在
调用方通过 ``extra={"trace_id": ...}`` 传入追踪 ID 时把它追加到输出行尾。"""
from __future__ import annotations

import logging
from threading import Lock


ROOT_LOGGER_NAME = "sf_virtuoso_acl"
_DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class TraceIdFormatter(logging.Formatter):
    """在日志末尾附加 trace_id（若存在）。"""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        trace_id = getattr(record, "trace_id", None)
        if trace_id:
            return f"{message} trace_id={trace_id}"
        return message


class LoggerFactory:
    """日志器工厂。"""

    _configured = False
    _lock = Lock()

    @classmethod
    def configure(cls, level: str | int = "INFO", fmt: str = _DEFAULT_FORMAT) -> None:
        """为包根日志器安装处理器并设置级别，可重复调用以调整级别。"""

        root = logging.getLogger(ROOT_LOGGER_NAME)
        with cls._lock:
            if not cls._configured:
                handler = logging.StreamHandler()
                handler.setFormatter(TraceIdFormatter(fmt))
                root.addHandler(handler)
                cls._configured = True
        root.setLevel(level if isinstance(level, int) else level.upper())

    @classmethod
    def create_default_logger(cls, name: str) -> logging.Logger:
        """返回指定名称的日志器，首次调用时完成默认配置。"""

        if not cls._configured:
            cls.configure()
        return logging.getLogger(name)


__all__ = ["LoggerFactory", "TraceIdFormatter", "ROOT_LOGGER_NAME"]
