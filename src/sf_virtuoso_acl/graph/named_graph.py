"""命名图管理工具。

封装计数、存在性检查、清空、复制、重命名与反物化等常见操作。命名图不在本地维护
任何元数据，每次调用都会重新访问存储。
"""
from __future__ import annotations

from typing import Any

from sf_virtuoso_acl.common.exceptions import ExternalServiceError, QueryExecutionError
from sf_virtuoso_acl.common.logging import LoggerFactory
from sf_virtuoso_acl.connection.client import StatementExecutor
from sf_virtuoso_acl.converter.result_mapper import ResultMapper
from sf_virtuoso_acl.query.builder import StatementBuilder


NO_DEFAULT: Any = object()


class NamedGraphManager:
    """命名图管理器。

主要职责：
1. 通过 :class:`StatementBuilder` 生成带校验的语句，经执行入口下发。
2. 提供 count/exists/clear/copy/rename/dereify 等高频操作。
3. 统一透传 ``trace_id`` 以便日志排查与链路追踪。
"""

    def __init__(
        self,
        executor: StatementExecutor,
        *,
        builder: StatementBuilder | None = None,
        mapper: ResultMapper | None = None,
    ) -> None:
        """初始化管理器。

参数：
    executor：语句执行入口，通常是 :class:`~sf_virtuoso_acl.repository.VirtuosoRepository`。
    builder：语句模板，缺省时新建。
"""

        self._executor = executor
        self._builder = builder or StatementBuilder()
        self._mapper = mapper or ResultMapper()
        self._logger = LoggerFactory.create_default_logger(__name__)

    def count_triples(self, graph: str | None = None, *, default: Any = NO_DEFAULT, trace_id: str | None = None) -> int:
        """统计命名图（或整个存储）中的三元组数量。

参数：
    graph：命名图 IRI，例如 ``"http://example.org/graph/v1"``；``None`` 表示整个存储。
    default：执行失败时返回的值，例如 ``0``；缺省时失败直接抛出异常。
    trace_id：链路追踪 ID。

返回：
    聚合列解析出的整数。

异常：
    :class:`QueryExecutionError` 等外部服务异常（未提供 ``default`` 时）。
"""

        query = self._builder.count_triples(graph)
        try:
            with self._executor.execute_select(query, trace_id=trace_id) as cursor:
                row = cursor.fetchone()
                var = cursor.vars[0] if cursor.vars else "count"
        except ExternalServiceError as exc:
            if default is NO_DEFAULT:
                raise
            self._logger.warning("统计三元组失败，返回默认值 %r: %s", default, exc, extra={"trace_id": trace_id})
            return default
        if row is None:
            return 0
        value = self._mapper.to_python(row.get(var))
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise QueryExecutionError(
                "无法解析三元组计数结果",
                details={"graph": graph, "value": value},
            ) from exc

    def graph_exists(self, graph: str, *, default: bool | None = False, trace_id: str | None = None) -> bool:
        """以 ``LIMIT 2`` 探测命名图是否至少包含一条三元组。

参数：
    graph：命名图 IRI。
    default：执行失败时的返回值（记录警告日志）；``None`` 表示失败时抛出异常。
"""

        query = self._builder.graph_existence_query(graph)
        try:
            with self._executor.execute_select(query, trace_id=trace_id) as cursor:
                return cursor.fetchone() is not None
        except ExternalServiceError as exc:
            if default is None:
                raise
            self._logger.warning("检查命名图存在性失败: %s", exc, extra={"trace_id": trace_id})
            return default

    def clear(self, graph: str, *, trace_id: str | None = None) -> dict[str, Any]:
        """清空命名图中的全部三元组。"""

        self._executor.execute_update(self._builder.clear_graph(graph), trace_id=trace_id)
        return {"graph": graph}

    def copy(self, source: str, destination: str, *, trace_id: str | None = None) -> dict[str, Any]:
        """将源命名图的三元组追加到目标命名图，目标图原有数据保留。"""

        self._executor.execute_update(self._builder.copy_graph(source, destination), trace_id=trace_id)
        return {"source": source, "target": destination}

    def rename(self, old_name: str, new_name: str, *, trace_id: str | None = None) -> dict[str, Any]:
        """重命名命名图。

SQL 通道直接改写 ``RDF_QUAD`` 表中的图标识；其他通道使用 SPARQL 1.1 ``MOVE GRAPH``
（目标图原有数据会被替换）。

返回：
    字典，包含 ``source``、``target`` 以及实际使用的 ``method``（``"sql"`` 或 ``"move"``）。
"""

        if self._executor.supports_sql:
            self._executor.execute_sql(self._builder.rename_graph_sql(old_name, new_name), trace_id=trace_id)
            method = "sql"
        else:
            self._executor.execute_update(self._builder.move_graph(old_name, new_name), trace_id=trace_id)
            method = "move"
        return {"source": old_name, "target": new_name, "method": method}

    def dereify(self, reified_source: str, destination: str, *, trace_id: str | None = None) -> dict[str, Any]:
        """把 diachron 物化记录还原为普通三元组并写入目标图。"""

        self._executor.execute_update(self._builder.dereify(reified_source, destination), trace_id=trace_id)
        return {"source": reified_source, "target": destination}
