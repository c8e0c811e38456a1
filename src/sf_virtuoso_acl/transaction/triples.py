"""三元组写入：``TripleString`` 模型与批量写入器。

所有写入最终都以 ``INSERT DATA { GRAPH <g> { ... } }`` 形式提交。对象位置按
:class:`TripleType` 决定渲染方式：``URI`` 包裹尖括号，``LITERAL`` 转义后加引号，
数值与布尔字面量自动附带 XSD 数据类型。

示例::

    writer.add_triples(
        [
            TripleString(subject="http://ex/s1", predicate="http://ex/p", object="http://ex/o1"),
            TripleString(subject="http://ex/s1", predicate="http://ex/label", object="示例", type=TripleType.LITERAL, lang="zh"),
        ],
        graph="http://ex/graph",
    )
"""
from __future__ import annotations

import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Union

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from sf_virtuoso_acl.common.logging import LoggerFactory
from sf_virtuoso_acl.connection.client import StatementExecutor
from sf_virtuoso_acl.query.builder import NamespaceTable, SPARQLSanitizer, StatementBuilder


XSD = "http://www.w3.org/2001/XMLSchema#"


def _double_lexical(value: float) -> str:
    """返回 ``xsd:double`` 的词法形式，非有限值使用 ``NaN``、``INF``、``-INF``。"""

    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    return repr(value)


class TripleType(str, Enum):
    """对象位置的类型标记。"""

    URI = "uri"
    LITERAL = "literal"


class TripleString(BaseModel):
    """一条待写入的三元组。

    参数：
        subject/predicate：IRI，构造时校验。
        object：``type=URI`` 时为 IRI；``type=LITERAL`` 时可为字符串、整数、浮点或布尔。
        lang/datatype：字面量的语言标签或数据类型 IRI，二者互斥，仅对 ``LITERAL`` 有效；
            ``lang`` 只能用于字符串，布尔值不能另指定 ``datatype``。
    """

    model_config = ConfigDict(frozen=True)

    subject: str
    predicate: str
    object: Union[bool, int, float, str]
    type: TripleType = TripleType.URI
    lang: str | None = None
    datatype: str | None = None

    @field_validator("subject", "predicate")
    @classmethod
    def _validate_iri(cls, value: str) -> str:
        return SPARQLSanitizer.escape_uri(value)

    @model_validator(mode="after")
    def _validate_object(self) -> "TripleString":
        if self.type is TripleType.URI:
            if not isinstance(self.object, str):
                raise ValueError("URI 类型三元组的对象必须是 IRI 字符串")
            if self.lang or self.datatype:
                raise ValueError("URI 类型三元组不能指定 lang 或 datatype")
            SPARQLSanitizer.escape_uri(self.object)
        elif self.lang and self.datatype:
            raise ValueError("字面量不能同时指定 lang 与 datatype")
        elif self.lang and not isinstance(self.object, str):
            raise ValueError("只有字符串字面量可以指定 lang")
        elif self.datatype and isinstance(self.object, bool):
            raise ValueError("布尔字面量的数据类型固定为 xsd:boolean")
        return self

    def object_term(self) -> str:
        """渲染对象位置。"""

        if self.type is TripleType.URI:
            return SPARQLSanitizer.format_uri(self.object)
        value = self.object
        if isinstance(value, bool):
            return SPARQLSanitizer.escape_literal("true" if value else "false", datatype=XSD + "boolean")
        if isinstance(value, int):
            return SPARQLSanitizer.escape_literal(str(value), datatype=self.datatype or XSD + "integer")
        if isinstance(value, float):
            return SPARQLSanitizer.escape_literal(_double_lexical(value), datatype=self.datatype or XSD + "double")
        return SPARQLSanitizer.escape_literal(value, datatype=self.datatype, lang=self.lang)

    def render(self) -> str:
        """渲染为 ``<s> <p> <o>`` 片段（不含结尾句点）。"""

        return (
            f"{SPARQLSanitizer.format_uri(self.subject)} "
            f"{SPARQLSanitizer.format_uri(self.predicate)} "
            f"{self.object_term()}"
        )


@dataclass
class WriteResult:
    """写入结果汇总。"""

    graph: str
    inserted: int
    batches: int
    duration_ms: float


class TripleWriter:
    """三元组写入器。

    单条写入与批量写入都经由执行入口的 ``execute_update``；批量写入按
    ``batch_size`` 切分，每批一条 ``INSERT DATA`` 语句。
    """

    def __init__(
        self,
        executor: StatementExecutor,
        namespaces: NamespaceTable,
        *,
        builder: StatementBuilder | None = None,
        batch_size: int = 1000,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size 必须 >= 1")
        self._executor = executor
        self._namespaces = namespaces
        self._builder = builder or StatementBuilder()
        self._batch_size = batch_size
        self._logger = LoggerFactory.create_default_logger(__name__)

    def add_triple(self, subject: str, predicate: str, obj: str, graph: str, *, trace_id: str | None = None) -> WriteResult:
        """写入一条对象为 IRI 的三元组。"""

        triple = TripleString(subject=subject, predicate=predicate, object=obj, type=TripleType.URI)
        return self.add_triples([triple], graph, trace_id=trace_id)

    def add_literal_triple(
        self,
        subject: str,
        predicate: str,
        value: str | int | float | bool,
        graph: str,
        *,
        lang: str | None = None,
        datatype: str | None = None,
        trace_id: str | None = None,
    ) -> WriteResult:
        """写入一条对象为字面量的三元组。"""

        triple = TripleString(
            subject=subject,
            predicate=predicate,
            object=value,
            type=TripleType.LITERAL,
            lang=lang,
            datatype=datatype,
        )
        return self.add_triples([triple], graph, trace_id=trace_id)

    def add_triples(
        self,
        triples: Iterable[TripleString],
        graph: str,
        *,
        batch_size: int | None = None,
        trace_id: str | None = None,
    ) -> WriteResult:
        """批量写入三元组。

        参数：
            triples：待写入的 :class:`TripleString` 序列；为空时不发送任何语句。
            graph：目标命名图 IRI。
            batch_size：每条语句包含的最大三元组数，缺省使用构造时的配置。

        返回：
            :class:`WriteResult`，包含写入总数与批次数。
        """

        size = batch_size or self._batch_size
        start = time.perf_counter()
        inserted = 0
        batches = 0
        for chunk in self._chunks(triples, size):
            statement = self._builder.insert_data(graph, [triple.render() for triple in chunk])
            self._executor.execute_update(statement, trace_id=trace_id)
            inserted += len(chunk)
            batches += 1
        duration_ms = (time.perf_counter() - start) * 1000
        if batches > 1:
            self._logger.debug("批量写入完成: graph=%s inserted=%d batches=%d", graph, inserted, batches)
        return WriteResult(graph=graph, inserted=inserted, batches=batches, duration_ms=duration_ms)

    # ---- 模式辅助 -------------------------------------------------------

    def add_schema_class(self, class_iri: str, graph: str, *, trace_id: str | None = None) -> WriteResult:
        """声明 ``class_iri rdf:type rdfs:Class``。"""

        return self.add_triple(
            class_iri,
            self._namespaces.term("rdf", "type"),
            self._namespaces.term("rdfs", "Class"),
            graph,
            trace_id=trace_id,
        )

    def add_schema_property(
        self, property_iri: str, domain: str, range_iri: str, graph: str, *, trace_id: str | None = None
    ) -> WriteResult:
        """声明对象属性及其定义域、值域，三条三元组在同一语句中写入。"""

        return self.add_triples(self._property_triples(property_iri, domain, range_iri), graph, trace_id=trace_id)

    def add_datatype_property(
        self, property_iri: str, domain: str, datatype: str, graph: str, *, trace_id: str | None = None
    ) -> WriteResult:
        """声明数据类型属性，值域为 XSD 数据类型 IRI，例如 ``XSD + "string"``。"""

        return self.add_triples(self._property_triples(property_iri, domain, datatype), graph, trace_id=trace_id)

    def _property_triples(self, property_iri: str, domain: str, range_iri: str) -> list[TripleString]:
        ns = self._namespaces
        return [
            TripleString(subject=property_iri, predicate=ns.term("rdf", "type"), object=ns.term("rdf", "Property")),
            TripleString(subject=property_iri, predicate=ns.term("rdfs", "domain"), object=domain),
            TripleString(subject=property_iri, predicate=ns.term("rdfs", "range"), object=range_iri),
        ]

    @staticmethod
    def _chunks(triples: Iterable[TripleString], size: int) -> Iterator[list[TripleString]]:
        chunk: list[TripleString] = []
        for triple in triples:
            chunk.append(triple)
            if len(chunk) >= size:
                yield chunk
                chunk = []
        if chunk:
            yield chunk
