"""Virtuoso SPARQL HTTP 端点客户端。

通过 SPARQL 1.1 Protocol 与 Virtuoso 的 ``/sparql-auth``（或 ``/sparql``）端点交互，
在客户端侧内置以下能力：

* 按请求级别的超时控制与指数退避重试；
* 基于失败次数的熔断器（circuit breaker）；
* 失败/成功指标上报，便于监控可视化；
* 统一的 trace id 透传机制。

所有请求均使用 HTTP POST 完成；该通道不支持 Virtuoso SQL 存储过程，批量加载器
等操作需改用 SQL 通道。"""
from __future__ import annotations

import random
import time
from threading import Lock
from typing import Any

import httpx

from sf_virtuoso_acl.common.exceptions import (
    ErrorCode,
    ExternalServiceError,
    QueryExecutionError,
    RepositoryConnectionError,
    RepositoryStateError,
    UnsupportedOperationError,
)
from sf_virtuoso_acl.common.logging import LoggerFactory
from sf_virtuoso_acl.common.observability import (
    observe_virtuoso_failure,
    observe_virtuoso_response,
    set_virtuoso_circuit_state,
)

from .cursor import ResultCursor


class VirtuosoHTTPClient:
    """与 Virtuoso SPARQL 端点交互的 HTTP 客户端。"""

    transport = "http"
    supports_sql = False

    _DEFAULT_RETRY_CODES = {408, 409, 429, 500, 502, 503, 504}
    _CHECK_QUERY = "ASK { }"

    def __init__(
        self,
        endpoint: str,
        *,
        path: str = "/sparql-auth",
        auth: tuple[str, str] | None = None,
        auth_scheme: str = "digest",
        trace_header: str = "X-Trace-Id",
        default_timeout: int = 30,
        max_timeout: int = 120,
        retry_policy: dict[str, Any] | None = None,
        circuit_breaker: dict[str, Any] | None = None,
        check_on_connect: bool = True,
    ) -> None:
        """构造 HTTP 客户端。

        参数：
            endpoint：Virtuoso HTTP 服务地址。例如 ``"http://192.168.0.119:8890"``。
            path：SPARQL 端点路径，需要认证时使用 ``"/sparql-auth"``。
            auth：可选凭据 ``("dba", "dba")``。
            auth_scheme：``"digest"``（Virtuoso 默认）、``"basic"`` 或 ``"none"``。
            trace_header：用于携带 ``trace_id`` 的 HTTP 请求头名称，默认 ``"X-Trace-Id"``。
            default_timeout：默认超时时间（秒），示例 ``30``，必须 >= 1。
            max_timeout：允许的最大超时上限（秒），示例 ``120``，必须 >= ``default_timeout``。
            retry_policy：自定义重试策略，可包含：
                * ``max_attempts``：最大尝试次数（>=1）；
                * ``backoff_seconds``：首轮退避（秒）；
                * ``backoff_multiplier``：指数退避乘子；
                * ``jitter_seconds``：随机扰动范围；
                * ``retryable_status_codes``：自定义可重试的 HTTP 状态码集合。
            circuit_breaker：熔断器配置，可包含：
                * ``failureThreshold``：连续失败阈值，示例 ``5``；
                * ``recoveryTimeout``：熔断后休眠时间（秒），示例 ``30``；
                * ``recordTimeoutOnly``：是否只将超时计入熔断统计。
            check_on_connect：``connect()`` 时是否发送 ``ASK { }`` 验证连通性与凭据。"""

        self.endpoint = endpoint.rstrip("/")
        self.path = "/" + path.lstrip("/")
        self.trace_header = trace_header
        self._default_timeout = default_timeout
        self._max_timeout = max(max_timeout, default_timeout)
        self._retry_policy = {
            "max_attempts": 3,
            "backoff_seconds": 0.5,
            "backoff_multiplier": 2.0,
            "jitter_seconds": 0.1,
        }
        if retry_policy:
            self._retry_policy.update({k: v for k, v in retry_policy.items() if v is not None})
        self._retry_codes = set(self._DEFAULT_RETRY_CODES)
        if retry_policy and "retryable_status_codes" in retry_policy:
            codes = retry_policy["retryable_status_codes"]
            self._retry_codes = set(codes) or self._retry_codes
        self._auth = self._build_auth(auth, auth_scheme)
        self._check_on_connect = check_on_connect
        self._client: httpx.Client | None = None
        self._logger = LoggerFactory.create_default_logger(__name__)

        cb = circuit_breaker or {}
        self._cb_failure_threshold = int(cb.get("failureThreshold", 5))
        self._cb_recovery_timeout = float(cb.get("recoveryTimeout", 30.0))
        self._cb_record_timeout_only = bool(cb.get("recordTimeoutOnly", False))
        self._cb_failure_count = 0
        self._cb_open_until: float | None = None
        self._breaker_lock = Lock()

    @property
    def url(self) -> str:
        return f"{self.endpoint}{self.path}"

    def connect(self) -> None:
        """创建底层 ``httpx.Client``，并按需探测端点与凭据。"""

        if self._client is not None:
            return
        self._client = httpx.Client(timeout=self._resolve_timeout(None), auth=self._auth)
        if not self._check_on_connect:
            return
        try:
            self._execute(
                operation="query",
                query=self._CHECK_QUERY,
                accept="application/sparql-results+json",
                content_type="application/sparql-query",
                timeout=None,
                trace_id=None,
            )
        except RepositoryConnectionError:
            self.close()
            raise
        except ExternalServiceError as exc:
            self.close()
            raise RepositoryConnectionError(
                "Virtuoso 端点探测失败",
                details={"endpoint": self.url, "code": exc.code.value, **exc.details},
            ) from exc

    def select(self, query: str, *, timeout: int | None = None, trace_id: str | None = None) -> ResultCursor:
        """执行 SPARQL SELECT 请求，返回结果游标。"""

        response, duration_ms = self._execute(
            operation="query",
            query=query,
            accept="application/sparql-results+json",
            content_type="application/sparql-query",
            timeout=timeout,
            trace_id=trace_id,
        )
        try:
            data = response.json()
        except ValueError as exc:
            raise QueryExecutionError(
                "Virtuoso 返回了无法解析的 SELECT 结果",
                details={"status": response.status_code, "body": response.text[:1024]},
            ) from exc
        return ResultCursor(
            data.get("head", {}).get("vars", []),
            data.get("results", {}).get("bindings", []),
            stats={"status": response.status_code, "durationMs": duration_ms},
        )

    def construct(self, query: str, *, timeout: int | None = None, trace_id: str | None = None) -> str:
        """执行 SPARQL CONSTRUCT 请求，返回 Turtle 文本。"""

        response, _ = self._execute(
            operation="query",
            query=query,
            accept="text/turtle",
            content_type="application/sparql-query",
            timeout=timeout,
            trace_id=trace_id,
        )
        return response.text

    def update(self, update: str, *, timeout: int | None = None, trace_id: str | None = None) -> dict[str, Any]:
        """执行 SPARQL UPDATE 请求并返回执行统计。"""

        response, duration_ms = self._execute(
            operation="update",
            query=update,
            accept="application/sparql-results+json",
            content_type="application/sparql-update",
            timeout=timeout,
            trace_id=trace_id,
        )
        return {
            "status": response.status_code,
            "durationMs": duration_ms,
        }

    def execute_sql(self, statement: str, *, trace_id: str | None = None) -> dict[str, Any]:
        raise UnsupportedOperationError(
            "HTTP 通道不支持执行 Virtuoso SQL",
            details={"transport": self.transport, "statement": statement[:256]},
        )

    def health(self) -> dict[str, Any]:
        """返回快速探活信息，避免产生实际负载。"""

        return {"ok": self._client is not None, "backend": "virtuoso", "transport": self.transport, "endpoint": self.url}

    def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            client.close()

    # ---- 内部工具 -----------------------------------------------------

    def _execute(
        self,
        *,
        operation: str,
        query: str,
        accept: str,
        content_type: str,
        timeout: int | None,
        trace_id: str | None,
    ) -> tuple[httpx.Response, float]:
        """执行底层 HTTP POST 请求并应用重试/熔断策略。

        参数：
            operation：``"query"`` 或 ``"update"``，用于指标与熔断标签。
            query：要提交的 SPARQL 字符串，例如 ``"SELECT * WHERE { ?s ?p ?o }"``。
            accept：HTTP `Accept` 头部，例如 ``"application/sparql-results+json"``。
            content_type：HTTP `Content-Type`，如 ``"application/sparql-query"``。
            timeout：单次请求的超时（秒），范围 ``1``~``max_timeout``，``None`` 表示默认值。
            trace_id：链路追踪 ID，例如 ``"span-2025-10-18-01"``。

        返回：二元组 ``(response, duration_ms)``，其中 ``duration_ms`` 是耗时（毫秒）。

        异常：连接失败抛出 :class:`RepositoryConnectionError`，其他不可恢复错误或达到最大
        重试次数时抛出 :class:`QueryExecutionError`。"""

        if self._client is None:
            raise RepositoryStateError("HTTP 客户端尚未连接", details={"endpoint": self.url})
        self._ensure_circuit_allows(operation, trace_id)

        resolved_timeout = self._resolve_timeout(timeout)
        headers = {
            "Accept": accept,
            "Content-Type": content_type,
        }
        if trace_id:
            headers[self.trace_header] = trace_id

        attempt = 0
        backoff = float(self._retry_policy["backoff_seconds"])
        max_attempts = int(self._retry_policy["max_attempts"])
        multiplier = float(self._retry_policy["backoff_multiplier"])
        jitter = float(self._retry_policy["jitter_seconds"] or 0.0)

        while True:
            attempt += 1
            start = time.perf_counter()
            try:
                response = self._client.post(
                    self.url,
                    content=query.encode("utf-8"),
                    headers=headers,
                    timeout=resolved_timeout,
                )
                duration_ms = (time.perf_counter() - start) * 1000
                status_code = response.status_code

                if status_code >= 400:
                    observe_virtuoso_response(self.transport, operation, status_code, duration_ms / 1000)
                    reason = self._response_reason(status_code)
                    should_break = self._should_count_failure_status(status_code)
                    observe_virtuoso_failure(self.transport, operation, reason)
                    self._record_failure(operation, reason, should_break, trace_id)
                    if self._should_retry(status_code, attempt, max_attempts):
                        self._sleep(backoff, jitter)
                        backoff *= multiplier
                        continue
                    self._raise_http_error(response, reason)

                self._record_success(operation)
                observe_virtuoso_response(self.transport, operation, status_code, duration_ms / 1000)
                return response, duration_ms
            except httpx.TransportError as exc:
                reason = self._exception_reason(exc)
                count_for_breaker = not self._cb_record_timeout_only or isinstance(exc, httpx.TimeoutException)
                observe_virtuoso_failure(self.transport, operation, reason)
                self._record_failure(operation, reason, count_for_breaker, trace_id)
                if attempt >= max_attempts:
                    details = {"endpoint": self.url, "error": str(exc), "reason": reason}
                    # 已建立连接后的超时视为语句执行失败，其余传输层错误视为连接失败
                    if isinstance(exc, httpx.TimeoutException) and not isinstance(exc, httpx.ConnectTimeout):
                        raise QueryExecutionError("Virtuoso 请求超时", details=details) from exc
                    raise RepositoryConnectionError("Virtuoso 连接失败", details=details) from exc
                self._sleep(backoff, jitter)
                backoff *= multiplier

    def _resolve_timeout(self, timeout: int | None) -> httpx.Timeout:
        """计算本次请求使用的超时时间对象。"""

        if timeout is None:
            effective = self._default_timeout
        else:
            effective = max(1, min(timeout, self._max_timeout))
        return httpx.Timeout(effective, connect=effective)

    def _should_retry(self, status_code: int, attempt: int, max_attempts: int) -> bool:
        """根据状态码与重试次数判断是否继续重试。"""

        return status_code in self._retry_codes and attempt < max_attempts

    def _sleep(self, backoff: float, jitter: float) -> None:
        """根据退避参数阻塞等待。"""

        delay = backoff + random.uniform(0, jitter)
        time.sleep(delay)

    def _raise_http_error(self, response: httpx.Response, reason: str) -> None:
        """将 HTTP 错误响应转换为平台统一异常。"""

        message = response.text
        code = ErrorCode.VIRTUOSO_QUERY_ERROR
        if response.status_code == 400:
            code = ErrorCode.BAD_REQUEST
        elif response.status_code == 404:
            code = ErrorCode.NOT_FOUND
        elif response.status_code in {401, 403}:
            code = ErrorCode.FORBIDDEN if response.status_code == 403 else ErrorCode.UNAUTHENTICATED
        raise QueryExecutionError(
            "Virtuoso 查询失败",
            code=code,
            details={"status": response.status_code, "message": message[:1024], "reason": reason},
        )

    @staticmethod
    def _build_auth(auth: tuple[str, str] | None, scheme: str) -> httpx.Auth | None:
        if not auth or scheme == "none":
            return None
        if scheme == "basic":
            return httpx.BasicAuth(*auth)
        return httpx.DigestAuth(*auth)

    # ---- 熔断与指标 -----------------------------------------------------

    def _ensure_circuit_allows(self, operation: str, trace_id: str | None) -> None:
        """检查熔断器状态，必要时直接拒绝请求。"""

        with self._breaker_lock:
            if self._cb_open_until is None:
                return
            now = self._now()
            if now >= self._cb_open_until:
                # 熔断窗口已结束，允许半开重试
                self._cb_open_until = None
                self._cb_failure_count = 0
                set_virtuoso_circuit_state(operation, False)
                self._logger.info("Virtuoso 熔断窗口结束，允许请求重试", extra={"trace_id": trace_id})
                return
            remaining = max(0.0, self._cb_open_until - now)
        observe_virtuoso_failure(self.transport, operation, "circuit_open")
        raise QueryExecutionError(
            "Virtuoso 服务已被熔断",
            code=ErrorCode.VIRTUOSO_CIRCUIT_OPEN,
            details={"recoveryAfter": remaining, "operation": operation},
        )

    def _record_failure(self, operation: str, reason: str, count_for_breaker: bool, trace_id: str | None) -> None:
        """记录失败并在达到阈值后打开熔断。"""

        if not count_for_breaker:
            return
        with self._breaker_lock:
            if self._cb_open_until is not None:
                return
            self._cb_failure_count += 1
            if self._cb_failure_count >= self._cb_failure_threshold:
                self._cb_open_until = self._now() + self._cb_recovery_timeout
                set_virtuoso_circuit_state(operation, True)
                self._logger.warning(
                    "Virtuoso 熔断器已打开",
                    extra={
                        "trace_id": trace_id,
                        "operation": operation,
                        "reason": reason,
                        "recovery_timeout": self._cb_recovery_timeout,
                    },
                )

    def _record_success(self, operation: str) -> None:
        """在成功请求后重置熔断状态。"""

        with self._breaker_lock:
            self._cb_failure_count = 0
            if self._cb_open_until is not None:
                self._cb_open_until = None
            set_virtuoso_circuit_state(operation, False)

    def _should_count_failure_status(self, status_code: int) -> bool:
        """是否将该状态码计入熔断失败次数。"""

        return status_code >= 500 or status_code in self._retry_codes

    @staticmethod
    def _response_reason(status_code: int) -> str:
        """根据状态码映射统一的失败原因标签。"""

        if status_code >= 500:
            return "server_error"
        if status_code == 429:
            return "rate_limited"
        if status_code == 408:
            return "timeout"
        if status_code == 409:
            return "conflict"
        if status_code in {401, 403}:
            return "auth_error"
        return "client_error"

    @staticmethod
    def _exception_reason(exc: Exception) -> str:
        """将异常对象归类为标准原因标签。"""

        if isinstance(exc, httpx.ConnectTimeout):
            return "connect_timeout"
        if isinstance(exc, httpx.PoolTimeout):
            return "pool_timeout"
        if isinstance(exc, httpx.TimeoutException):
            return "timeout"
        if isinstance(exc, httpx.ConnectError):
            return "connect_error"
        if isinstance(exc, httpx.ProtocolError):
            return "protocol_error"
        if isinstance(exc, httpx.NetworkError):
            return "network_error"
        return "transport_error"

    @staticmethod
    def _now() -> float:
        """返回单调递增时间戳，用于计算熔断窗口。"""

        return time.monotonic()
