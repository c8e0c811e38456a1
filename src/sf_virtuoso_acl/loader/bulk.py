"""Virtuoso 服务端批量加载。

封装 Virtuoso 批量加载器（``DB.DBA.load_list`` 队列 + ``rdf_loader_run``）以及
单文件导入存储过程。所有文件路径均为 **服务端** 路径，且必须位于 Virtuoso
``DirsAllowed`` 允许的目录内。仅 SQL 通道可用。

批量导入不是原子操作：若在清空命名图之后、加载器运行之前失败，命名图将保持为空。
"""
from __future__ import annotations

import time
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Any, ContextManager

from sf_virtuoso_acl.common.exceptions import UnsupportedOperationError
from sf_virtuoso_acl.common.logging import LoggerFactory
from sf_virtuoso_acl.connection.client import StatementExecutor
from sf_virtuoso_acl.converter.formats import RDFFormat
from sf_virtuoso_acl.query.builder import StatementBuilder


@dataclass
class BulkImportResult:
    """批量导入结果。"""

    graph: str
    folder: str
    file_mask: str
    cleared: bool
    statements: list[str] = field(default_factory=list)
    duration_ms: float = 0.0


class BulkLoader:
    """服务端批量加载器。

    参数：
        executor：语句执行入口，必须支持 SQL。
        lock：可选的可重入锁，``bulk_import`` 在整个步骤序列期间持有该锁。
    """

    def __init__(
        self,
        executor: StatementExecutor,
        *,
        builder: StatementBuilder | None = None,
        lock: ContextManager[Any] | None = None,
    ) -> None:
        self._executor = executor
        self._builder = builder or StatementBuilder()
        self._lock = lock
        self._logger = LoggerFactory.create_default_logger(__name__)

    def import_single_rdf_file(self, filename: str, graph: str, *, trace_id: str | None = None) -> dict[str, Any]:
        """通过 ``RDF_LOAD_RDFXML_MT`` 导入单个服务端 RDF/XML 文件。"""

        return self._sql(self._builder.load_rdfxml_file(filename, graph), "import_single_rdf_file", trace_id)

    def import_single_n3_file(self, filename: str, graph: str, *, trace_id: str | None = None) -> dict[str, Any]:
        """通过 ``TTLP_MT`` 导入单个服务端 N3 / Turtle / N-Triples 文件。"""

        return self._sql(self._builder.load_turtle_file(filename, graph), "import_single_n3_file", trace_id)

    def clear_load_list(self, *, trace_id: str | None = None) -> dict[str, Any]:
        """清空加载器队列。"""

        return self._sql(self._builder.clear_load_list(), "clear_load_list", trace_id)

    def add_files_to_load(
        self, folder: str, file_format: RDFFormat | str, graph: str, *, trace_id: str | None = None
    ) -> dict[str, Any]:
        """把目录下匹配格式掩码的文件登记到加载器队列。"""

        mask = RDFFormat.parse(file_format).file_mask
        return self._sql(self._builder.register_directory(folder, mask, graph), "add_files_to_load", trace_id)

    def run_loader(self, *, trace_id: str | None = None) -> dict[str, Any]:
        """运行加载器，处理队列中的全部文件。"""

        return self._sql(self._builder.run_loader(), "run_loader", trace_id)

    def checkpoint(self, *, trace_id: str | None = None) -> dict[str, Any]:
        """执行检查点，把已加载数据持久化。"""

        return self._sql(self._builder.checkpoint(), "checkpoint", trace_id)

    def bulk_import(
        self,
        folder: str,
        file_format: RDFFormat | str,
        graph: str,
        *,
        incremental: bool = False,
        trace_id: str | None = None,
    ) -> BulkImportResult:
        """批量导入服务端目录中的 RDF 文件。

        依次执行：清空命名图（仅 ``incremental=False``）、清空加载队列、登记目录、
        运行加载器、检查点。共 4 条语句，需清空命名图时为 5 条。

        参数：
            folder：服务端目录，例如 ``"/data/dumps"``。
            file_format：文件格式，例如 ``RDFFormat.NTRIPLES`` 或 ``"nt"``。
            graph：目标命名图 IRI。
            incremental：``True`` 时保留命名图原有数据。

        异常：
            :class:`UnsupportedOperationError`：当前通道不支持 SQL。
        """

        self._require_sql("bulk_import")
        fmt = RDFFormat.parse(file_format)
        start = time.perf_counter()
        result = BulkImportResult(graph=graph, folder=folder, file_mask=fmt.file_mask, cleared=not incremental)
        # 先生成全部语句，参数非法时不会对存储产生任何副作用
        register = self._builder.register_directory(folder, fmt.file_mask, graph)
        clear = None if incremental else self._builder.clear_graph(graph)

        with self._lock if self._lock is not None else nullcontext():
            if clear is not None:
                self._executor.execute_update(clear, trace_id=trace_id)
                result.statements.append(clear)
            for statement in (
                self._builder.clear_load_list(),
                register,
                self._builder.run_loader(),
                self._builder.checkpoint(),
            ):
                self._executor.execute_sql(statement, trace_id=trace_id)
                result.statements.append(statement)

        result.duration_ms = (time.perf_counter() - start) * 1000
        self._logger.info(
            "批量导入完成: graph=%s folder=%s mask=%s cleared=%s",
            graph,
            folder,
            fmt.file_mask,
            result.cleared,
            extra={"trace_id": trace_id},
        )
        return result

    def _sql(self, statement: str, operation: str, trace_id: str | None) -> dict[str, Any]:
        self._require_sql(operation)
        return self._executor.execute_sql(statement, trace_id=trace_id)

    def _require_sql(self, operation: str) -> None:
        if not self._executor.supports_sql:
            raise UnsupportedOperationError(
                "当前通道不支持 Virtuoso 批量加载器",
                details={"operation": operation},
            )
