"""绑定到单个命名图的仓库视图。"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

from sf_virtuoso_acl.connection.cursor import ResultCursor
from sf_virtuoso_acl.query.builder import SPARQLSanitizer, StatementBuilder

if TYPE_CHECKING:
    from sf_virtuoso_acl.repository import VirtuosoRepository
    from sf_virtuoso_acl.transaction.triples import TripleString, WriteResult


class GraphView:
    """固定命名图的便捷句柄，所有调用都经过所属仓库执行。

    示例::

        view = repo.bind_graph("http://example.org/graph/v1")
        view.add_triple("http://ex/s", "http://ex/p", "http://ex/o")
        assert view.exists()
    """

    def __init__(
        self, repository: "VirtuosoRepository", graph: str, *, builder: StatementBuilder | None = None
    ) -> None:
        self.graph = SPARQLSanitizer.escape_uri(graph)
        self._repository = repository
        self._builder = builder or StatementBuilder()

    def __repr__(self) -> str:
        return f"GraphView(graph={self.graph!r})"

    def add_triple(self, subject: str, predicate: str, obj: str, *, trace_id: str | None = None) -> "WriteResult":
        return self._repository.add_triple(subject, predicate, obj, self.graph, trace_id=trace_id)

    def add_literal_triple(
        self,
        subject: str,
        predicate: str,
        value: str | int | float | bool,
        *,
        lang: str | None = None,
        datatype: str | None = None,
        trace_id: str | None = None,
    ) -> "WriteResult":
        return self._repository.add_literal_triple(
            subject, predicate, value, self.graph, lang=lang, datatype=datatype, trace_id=trace_id
        )

    def add_triples(self, triples: Iterable["TripleString"], *, trace_id: str | None = None) -> "WriteResult":
        return self._repository.add_triples(triples, self.graph, trace_id=trace_id)

    def count(self, *, trace_id: str | None = None) -> int:
        return self._repository.count_triples(self.graph, trace_id=trace_id)

    def exists(self, *, trace_id: str | None = None) -> bool:
        return self._repository.graph_exists(self.graph, trace_id=trace_id)

    def clear(self, *, trace_id: str | None = None) -> dict[str, Any]:
        return self._repository.clear_graph(self.graph, trace_id=trace_id)

    def select(
        self,
        pattern: str,
        *,
        variables: Iterable[str] = ("*",),
        limit: int | None = None,
        trace_id: str | None = None,
    ) -> ResultCursor:
        """在本命名图内执行 SELECT，``pattern`` 为 WHERE 子句中的图模式。"""

        query = self._builder.select_in_graph(self.graph, pattern, variables=variables, limit=limit)
        return self._repository.execute_select(query, trace_id=trace_id)
