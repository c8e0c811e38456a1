"""平台统一错误码。"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """错误码枚举，值即对外暴露的字符串标识。"""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFIG_ERROR = "CONFIG_ERROR"
    INVALID_STATE = "INVALID_STATE"
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"
    VIRTUOSO_CONNECT_ERROR = "VIRTUOSO_CONNECT_ERROR"
    VIRTUOSO_QUERY_ERROR = "VIRTUOSO_QUERY_ERROR"
    VIRTUOSO_CIRCUIT_OPEN = "VIRTUOSO_CIRCUIT_OPEN"
