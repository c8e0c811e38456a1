"""客户端文件导入与导出。

与 :mod:`sf_virtuoso_acl.loader.bulk` 不同，这里处理的是 **本地** 文件：导入时用
rdflib 解析后分批以 ``INSERT DATA`` 提交；导出时以 CONSTRUCT 取回命名图，再用 rdflib
序列化为目标格式。三种通道均可使用。
"""
from __future__ import annotations

import os
from typing import IO, Any, Iterator, Tuple, Union

from rdflib import BNode, Graph
from rdflib.term import Node

from sf_virtuoso_acl.common.logging import LoggerFactory
from sf_virtuoso_acl.connection.client import StatementExecutor
from sf_virtuoso_acl.converter.formats import RDFFormat
from sf_virtuoso_acl.query.builder import StatementBuilder


Source = Union[str, "os.PathLike[str]", IO[bytes]]
Triple = Tuple[Node, Node, Node]


class FileTransfer:
    """本地 RDF 文件与命名图之间的传输。"""

    def __init__(
        self,
        executor: StatementExecutor,
        *,
        builder: StatementBuilder | None = None,
        batch_size: int = 1000,
    ) -> None:
        self._executor = executor
        self._builder = builder or StatementBuilder()
        self._batch_size = batch_size
        self._logger = LoggerFactory.create_default_logger(__name__)

    def import_file(
        self,
        source: Source,
        file_format: RDFFormat | str,
        graph: str,
        *,
        trace_id: str | None = None,
    ) -> dict[str, Any]:
        """解析本地文件并写入命名图。

        参数：
            source：文件路径或二进制流。
            file_format：文件格式，例如 ``RDFFormat.TURTLE``。
            graph：目标命名图 IRI。

        返回：
            字典，包含 ``graph``、``triples``（写入数量）与 ``batches``。

        通过空白节点关联的三元组总在同一条语句中提交，这类批次可能超过 ``batch_size``。
        """

        fmt = RDFFormat.parse(file_format)
        parsed = Graph()
        parsed.parse(source, format=fmt.rdflib_name)

        fragments: list[str] = []
        batches = 0
        for group in self._statement_groups(parsed):
            # 空白节点标签只在单个请求内有效，同组三元组不能跨批次拆分
            if fragments and len(fragments) + len(group) > self._batch_size:
                self._flush(graph, fragments, trace_id)
                batches += 1
                fragments = []
            fragments.extend(f"{s.n3()} {p.n3()} {o.n3()}" for s, p, o in group)
            if len(fragments) >= self._batch_size:
                self._flush(graph, fragments, trace_id)
                batches += 1
                fragments = []
        if fragments:
            self._flush(graph, fragments, trace_id)
            batches += 1
        self._logger.info("文件导入完成: graph=%s triples=%d", graph, len(parsed), extra={"trace_id": trace_id})
        return {"graph": graph, "triples": len(parsed), "batches": batches}

    def export_file(
        self,
        destination: Source,
        file_format: RDFFormat | str,
        graph: str,
        *,
        trace_id: str | None = None,
    ) -> dict[str, Any]:
        """把命名图导出到本地文件或二进制流。"""

        fmt = RDFFormat.parse(file_format)
        turtle = self._executor.execute_construct(self._builder.construct_graph(graph), trace_id=trace_id)
        exported = Graph()
        if turtle.strip():
            exported.parse(data=turtle, format="turtle")
        exported.serialize(destination=destination, format=fmt.rdflib_name)
        return {"graph": graph, "format": fmt.name, "triples": len(exported)}

    def _flush(self, graph: str, fragments: list[str], trace_id: str | None) -> None:
        self._executor.execute_update(self._builder.insert_data(graph, fragments), trace_id=trace_id)

    @staticmethod
    def _statement_groups(parsed: Graph) -> Iterator[list[Triple]]:
        """把三元组按空白节点连通性分组。

        不含空白节点的三元组各自成组；通过空白节点相互关联的三元组归入同一组。
        """

        parent: dict[BNode, BNode] = {}

        def find(node: BNode) -> BNode:
            parent.setdefault(node, node)
            while parent[node] != node:
                parent[node] = parent[parent[node]]
                node = parent[node]
            return node

        linked: list[Triple] = []
        for triple in parsed:
            blanks = [term for term in (triple[0], triple[2]) if isinstance(term, BNode)]
            if not blanks:
                yield [triple]
                continue
            linked.append(triple)
            root = find(blanks[0])
            for other in blanks[1:]:
                parent[find(other)] = root

        components: dict[BNode, list[Triple]] = {}
        for subject, predicate, obj in linked:
            anchor = subject if isinstance(subject, BNode) else obj
            components.setdefault(find(anchor), []).append((subject, predicate, obj))
        yield from components.values()
