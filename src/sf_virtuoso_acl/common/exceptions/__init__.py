"""平台异常体系。

所有异常均携带 :class:`ErrorCode`、可读消息以及 ``details`` 字典，便于上层统一
记录日志或转换为接口响应。"""
from __future__ import annotations

from typing import Any

from .codes import ErrorCode


class PlatformError(Exception):
    """平台异常基类。"""

    def __init__(self, code: ErrorCode, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"[{self.code.value}] {self.message} {self.details}"
        return f"[{self.code.value}] {self.message}"


class ConfigurationError(PlatformError):
    """配置缺失或非法。"""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.CONFIG_ERROR, message, details=details)


class ExternalServiceError(PlatformError):
    """外部服务（Virtuoso）调用失败。"""


class RepositoryConnectionError(ExternalServiceError, ConnectionError):
    """建立连接或认证失败。

    同时继承内置 :class:`ConnectionError`，调用方可直接 ``except ConnectionError``。"""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.VIRTUOSO_CONNECT_ERROR, message, details=details)


class QueryExecutionError(ExternalServiceError):
    """语句被存储拒绝或执行失败。"""

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.VIRTUOSO_QUERY_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code, message, details=details)


class RepositoryStateError(PlatformError):
    """在未连接或已关闭的仓库上执行操作。"""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.INVALID_STATE, message, details=details)


InvalidStateError = RepositoryStateError


class UnsupportedOperationError(PlatformError, NotImplementedError):
    """当前传输方式不支持的操作（例如 HTTP 通道执行 SQL 存储过程）。"""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.UNSUPPORTED_OPERATION, message, details=details)


__all__ = [
    "ErrorCode",
    "PlatformError",
    "ConfigurationError",
    "ExternalServiceError",
    "RepositoryConnectionError",
    "QueryExecutionError",
    "RepositoryStateError",
    "InvalidStateError",
    "UnsupportedOperationError",
]
