"""Virtuoso 传输层协议定义。

仓库（:class:`~sf_virtuoso_acl.repository.VirtuosoRepository`）只依赖这里定义的
:class:`RDFClient` 协议，具体走 SQL、SPARQL HTTP 端点还是 rdflib 存储由可插拔的实现
决定：

* :class:`~sf_virtuoso_acl.connection.sql.VirtuosoSQLClient`
* :class:`~sf_virtuoso_acl.connection.http.VirtuosoHTTPClient`
* :class:`~sf_virtuoso_acl.connection.store.RDFLibStoreClient`
"""
from __future__ import annotations

from typing import Any, Protocol

from .cursor import ResultCursor


class RDFClient(Protocol):
    """RDF 传输最小协议。

    每个实现持有且仅持有一个到存储的连接；``connect`` 失败时抛出
    :class:`~sf_virtuoso_acl.common.exceptions.RepositoryConnectionError`，语句失败时抛出
    :class:`~sf_virtuoso_acl.common.exceptions.QueryExecutionError`。"""

    #: 传输名称，用于日志与指标标签，例如 ``"sql"``。
    transport: str
    #: 是否支持执行 Virtuoso SQL / 存储过程。
    supports_sql: bool

    def connect(self) -> None:
        """建立连接并完成认证。"""

    def select(self, query: str, *, timeout: int | None = None, trace_id: str | None = None) -> ResultCursor:
        """执行 SPARQL SELECT，返回惰性游标。

        参数：
            query：完整的 SPARQL SELECT 语句（已带 PREFIX 块）。
            timeout：本次请求超时（秒），不支持超时的通道忽略该参数。
            trace_id：可选的链路追踪 ID。"""

    def construct(self, query: str, *, timeout: int | None = None, trace_id: str | None = None) -> str:
        """执行 SPARQL CONSTRUCT，返回 Turtle 文本。"""

    def update(self, update: str, *, timeout: int | None = None, trace_id: str | None = None) -> dict[str, Any]:
        """执行 SPARQL UPDATE，返回包含 ``status``、``durationMs`` 的统计字典。"""

    def execute_sql(self, statement: str, *, trace_id: str | None = None) -> dict[str, Any]:
        """执行 Virtuoso SQL 语句；不支持的通道抛出 ``UnsupportedOperationError``。"""

    def health(self) -> dict[str, Any]:
        """返回简要健康信息。"""

    def close(self) -> None:
        """关闭连接。"""


class StatementExecutor(Protocol):
    """图管理、三元组写入与加载器所依赖的执行入口（由仓库实现）。"""

    @property
    def supports_sql(self) -> bool: ...

    def execute_update(self, query: str, *, log_query: bool = False, trace_id: str | None = None) -> dict[str, Any]: ...

    def execute_select(self, query: str, *, trace_id: str | None = None) -> ResultCursor: ...

    def execute_construct(self, query: str, *, trace_id: str | None = None) -> str: ...

    def execute_sql(self, statement: str, *, log_query: bool = False, trace_id: str | None = None) -> dict[str, Any]: ...
