"""Prometheus 指标定义与上报函数。"""
from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


_REQUESTS = Counter(
    "sf_virtuoso_requests_total",
    "Virtuoso 请求总数",
    ["transport", "operation", "status"],
)
_LATENCY = Histogram(
    "sf_virtuoso_request_seconds",
    "Virtuoso 请求耗时（秒）",
    ["transport", "operation"],
)
_FAILURES = Counter(
    "sf_virtuoso_failures_total",
    "Virtuoso 请求失败次数",
    ["transport", "operation", "reason"],
)
_CIRCUIT_STATE = Gauge(
    "sf_virtuoso_circuit_breaker_state",
    "熔断器状态：1 打开，0 关闭",
    ["operation"],
)


def observe_virtuoso_response(transport: str, operation: str, status: int | str, duration_seconds: float) -> None:
    """记录一次完成的请求及其耗时。"""

    _REQUESTS.labels(transport=transport, operation=operation, status=str(status)).inc()
    _LATENCY.labels(transport=transport, operation=operation).observe(max(0.0, duration_seconds))


def observe_virtuoso_failure(transport: str, operation: str, reason: str) -> None:
    """记录一次失败，``reason`` 为归一化后的原因标签。"""

    _FAILURES.labels(transport=transport, operation=operation, reason=reason).inc()


def set_virtuoso_circuit_state(operation: str, is_open: bool) -> None:
    """更新熔断器状态指标。"""

    _CIRCUIT_STATE.labels(operation=operation).set(1 if is_open else 0)


__all__ = [
    "observe_virtuoso_response",
    "observe_virtuoso_failure",
    "set_virtuoso_circuit_state",
]
