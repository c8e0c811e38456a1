"""基于 rdflib ``SPARQLUpdateStore`` 的 Virtuoso 客户端。

适用于已经以 rdflib 为中心的调用方：查询与更新通过 rdflib 的 SPARQL 存储插件
发往 Virtuoso 的 SPARQL 端点。rdflib 的连接器只支持 Basic 认证，Virtuoso 侧需为
该端点开启 Basic 认证或使用免认证的 ``/sparql`` 路径。"""
from __future__ import annotations

import time
from http.client import HTTPException
from typing import Any
from urllib.error import HTTPError, URLError

from rdflib.plugin import PluginException
from rdflib.plugins.stores.sparqlconnector import SPARQLConnectorException
from rdflib.plugins.stores.sparqlstore import SPARQLUpdateStore

from sf_virtuoso_acl.common.exceptions import (
    QueryExecutionError,
    RepositoryConnectionError,
    RepositoryStateError,
    UnsupportedOperationError,
)
from sf_virtuoso_acl.common.logging import LoggerFactory
from sf_virtuoso_acl.common.observability import observe_virtuoso_failure, observe_virtuoso_response
from sf_virtuoso_acl.converter.result_mapper import ResultMapper

from .cursor import ResultCursor


# SPARQLUpdateStore 查询与更新可能抛出的异常
_STORE_ERRORS = (OSError, ValueError, HTTPException, SPARQLConnectorException, PluginException)


class RDFLibStoreClient:
    """rdflib 存储通道。"""

    transport = "rdflib"
    supports_sql = False

    _CHECK_QUERY = "ASK { }"

    def __init__(
        self,
        query_endpoint: str,
        *,
        update_endpoint: str | None = None,
        auth: tuple[str, str] | None = None,
        check_on_connect: bool = True,
        mapper: ResultMapper | None = None,
    ) -> None:
        self.query_endpoint = query_endpoint
        self.update_endpoint = update_endpoint or query_endpoint
        self._auth = auth
        self._check_on_connect = check_on_connect
        self._mapper = mapper or ResultMapper()
        self._store: SPARQLUpdateStore | None = None
        self._logger = LoggerFactory.create_default_logger(__name__)

    def connect(self) -> None:
        if self._store is not None:
            return
        kwargs: dict[str, Any] = {
            "query_endpoint": self.query_endpoint,
            "update_endpoint": self.update_endpoint,
            "autocommit": True,
            "method": "POST",
        }
        if self._auth:
            kwargs["auth"] = self._auth
        store = SPARQLUpdateStore(**kwargs)
        if self._check_on_connect:
            try:
                store.query(self._CHECK_QUERY)
            except _STORE_ERRORS as exc:
                store.close()
                details: dict[str, Any] = {"endpoint": self.query_endpoint, "error": str(exc)}
                if isinstance(exc, HTTPError):
                    details["status"] = exc.code
                raise RepositoryConnectionError("Virtuoso 端点探测失败", details=details) from exc
        self._store = store

    def select(self, query: str, *, timeout: int | None = None, trace_id: str | None = None) -> ResultCursor:
        """执行 SELECT，并把 rdflib 结果行转换为 SPARQL JSON 风格单元格。"""

        store = self._require_store()
        start = time.perf_counter()
        try:
            result = store.query(query)
        except _STORE_ERRORS as exc:
            raise self._failure("query", exc, query) from exc
        duration_ms = (time.perf_counter() - start) * 1000
        observe_virtuoso_response(self.transport, "query", "ok", duration_ms / 1000)
        names = [str(var) for var in (result.vars or [])]
        rows = (
            {name: self._mapper.from_term(term) for name, term in row.asdict().items() if term is not None}
            for row in result
        )
        return ResultCursor(names, rows, stats={"durationMs": duration_ms})

    def construct(self, query: str, *, timeout: int | None = None, trace_id: str | None = None) -> str:
        store = self._require_store()
        start = time.perf_counter()
        try:
            result = store.query(query)
        except _STORE_ERRORS as exc:
            raise self._failure("query", exc, query) from exc
        observe_virtuoso_response(self.transport, "query", "ok", time.perf_counter() - start)
        if result.graph is None:
            return ""
        return result.graph.serialize(format="turtle")

    def update(self, update: str, *, timeout: int | None = None, trace_id: str | None = None) -> dict[str, Any]:
        store = self._require_store()
        start = time.perf_counter()
        try:
            store.update(update)
        except _STORE_ERRORS as exc:
            raise self._failure("update", exc, update) from exc
        duration_ms = (time.perf_counter() - start) * 1000
        observe_virtuoso_response(self.transport, "update", "ok", duration_ms / 1000)
        return {"status": "ok", "durationMs": duration_ms}

    def execute_sql(self, statement: str, *, trace_id: str | None = None) -> dict[str, Any]:
        raise UnsupportedOperationError(
            "rdflib 通道不支持执行 Virtuoso SQL",
            details={"transport": self.transport, "statement": statement[:256]},
        )

    def health(self) -> dict[str, Any]:
        return {
            "ok": self._store is not None,
            "backend": "virtuoso",
            "transport": self.transport,
            "endpoint": self.query_endpoint,
        }

    def close(self) -> None:
        store, self._store = self._store, None
        if store is not None:
            store.close()

    def _require_store(self) -> SPARQLUpdateStore:
        if self._store is None:
            raise RepositoryStateError("rdflib 存储尚未连接", details={"endpoint": self.query_endpoint})
        return self._store

    def _failure(self, operation: str, exc: Exception, statement: str) -> Exception:
        observe_virtuoso_failure(self.transport, operation, "statement_error")
        details: dict[str, Any] = {"statement": statement[:1024], "error": str(exc)}
        if isinstance(exc, HTTPError):
            details["status"] = exc.code
        elif isinstance(exc, URLError):
            return RepositoryConnectionError("Virtuoso 端点不可达", details=details)
        return QueryExecutionError("Virtuoso 查询失败", details=details)
