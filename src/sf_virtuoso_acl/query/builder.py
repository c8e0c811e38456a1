"""SPARQL / Virtuoso SQL 语句模板。

所有发往存储的语句都经由本模块生成：IRI 先校验再包裹尖括号，字面量统一转义，
SQL 字符串参数使用单引号并转义内部引号，避免调用方输入破坏语句结构。"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping


class SPARQLSanitizer:
    """SPARQL 参数安全转义工具。

    提供 IRI 校验、字符串字面量转义、前缀名与语言标签校验，以及 Virtuoso SQL
    字符串参数的引用，尽量在构建语句的早期阶段发现并阻断潜在的注入或格式风险。

    注意：该工具仅负责语法级别的安全防护，不等价于权限与数据级安全控制。
    """

    #: 允许出现在命名图、主语、谓词、宾语中的 IRI 协议。
    ALLOWED_SCHEMES = frozenset({"http", "https", "urn", "tag"})

    _SCHEME_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")
    _DANGEROUS_CHARS = frozenset('<>"{}|\\^`')
    _LANG_PATTERN = re.compile(r"^[A-Za-z]{1,8}(-[A-Za-z0-9]{1,8})*$")
    _FILE_MASK_PATTERN = re.compile(r"^[\w*?.\-]+$")

    @classmethod
    def escape_uri(cls, uri: str) -> str:
        """转义并校验 IRI。

        参数：
            uri: 原始 IRI 字符串，必须带有 ``ALLOWED_SCHEMES`` 中的协议。

        返回：
            通过校验的 IRI 字符串（原样返回，不包角括号）。

        异常：
            ValueError: 当 IRI 为空、类型错误、协议不被允许或包含危险字符时抛出。
        """

        if not uri or not isinstance(uri, str):
            raise ValueError(f"Invalid URI: {uri!r}")

        match = cls._SCHEME_PATTERN.match(uri)
        if not match or match.group(1).lower() not in cls.ALLOWED_SCHEMES:
            raise ValueError(f"Invalid URI scheme: {uri}")

        # 拦截尖括号、引号、空白与控制字符，避免拼接破坏 SPARQL 结构
        if any(ch in cls._DANGEROUS_CHARS or ord(ch) <= 0x20 for ch in uri):
            raise ValueError(f"URI contains dangerous characters: {uri}")

        return uri

    @classmethod
    def format_uri(cls, uri: str) -> str:
        """校验 IRI 并返回 ``<iri>`` 形式。"""

        return f"<{cls.escape_uri(uri)}>"

    @classmethod
    def escape_literal(cls, value: str, datatype: str | None = None, lang: str | None = None) -> str:
        """转义字面量为安全的 SPARQL 表达式。

        参数：
            value: 原始字符串字面量。
            datatype: 可选的数据类型 IRI（不带尖括号）。
            lang: 可选的语言标签，例如 ``"en"``、``"zh-CN"``；与 ``datatype`` 互斥。

        返回：
            转义后的 SPARQL 字面量表达式，例如：
            - 普通字符串："hello"
            - 带类型："2024-01-01"^^<http://www.w3.org/2001/XMLSchema#date>
            - 带语言："hello"@en
        """

        escaped = (
            str(value)
            .replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
            .replace("\t", "\\t")
        )
        if datatype and lang:
            raise ValueError("字面量不能同时指定 datatype 与 lang")
        if datatype:
            return f'"{escaped}"^^{cls.format_uri(datatype)}'
        if lang:
            if not cls._LANG_PATTERN.match(lang):
                raise ValueError(f"Invalid language tag: {lang}")
            return f'"{escaped}"@{lang}'
        return f'"{escaped}"'

    @staticmethod
    def validate_prefix(prefix: str) -> bool:
        """验证前缀名称是否合法。

        参数：
            prefix: 前缀名（需满足 XML NCName 约束）。

        返回：
            True 表示合法，False 表示不合法。
        """

        # XML NCName 的近似校验：首字符字母或下划线，后续为字母/数字/下划线/连字符
        pattern = r"^[A-Za-z_][A-Za-z0-9_-]*$"
        return bool(re.match(pattern, prefix))

    @staticmethod
    def quote_sql(value: str) -> str:
        """将任意文本作为 Virtuoso SQL 字符串常量引用。"""

        text = str(value)
        if "\x00" in text:
            raise ValueError("SQL 字符串参数不能包含 NUL 字符")
        return "'" + text.replace("'", "''") + "'"

    @classmethod
    def validate_file_mask(cls, mask: str) -> str:
        """校验批量加载器使用的文件掩码，例如 ``"*.nt"``。"""

        if not mask or not cls._FILE_MASK_PATTERN.match(mask):
            raise ValueError(f"Invalid file mask: {mask!r}")
        return mask


@dataclass(frozen=True, slots=True)
class PrefixBlock:
    """固定的 PREFIX 声明块。

    除非语句文本中已经出现字面子串 ``"PREFIX"``，否则在 SPARQL 语句前追加一次，
    保证每条语句中该声明块恰好出现一次。"""

    declarations: tuple[tuple[str, str], ...]

    @classmethod
    def from_mapping(cls, prefixes: Mapping[str, str]) -> "PrefixBlock":
        """由 ``{"prefix": "iri"}`` 映射构造，保留传入顺序。"""

        items: list[tuple[str, str]] = []
        for prefix, iri in prefixes.items():
            if not SPARQLSanitizer.validate_prefix(prefix):
                raise ValueError(f"Invalid prefix name: {prefix}")
            items.append((prefix, SPARQLSanitizer.escape_uri(iri)))
        return cls(tuple(items))

    def render(self) -> str:
        """渲染为多行文本，每行一个 PREFIX 声明，结尾带换行。"""

        return "".join(f"PREFIX {prefix}: <{iri}>\n" for prefix, iri in self.declarations)

    def apply(self, query: str) -> str:
        """在语句前追加 PREFIX 块；语句已包含 ``PREFIX`` 时原样返回。"""

        if not self.declarations or "PREFIX" in query:
            return query
        return self.render() + query


@dataclass(frozen=True, slots=True)
class NamespaceTable:
    """只读命名空间表，例如 ``rdf``、``rdfs``。"""

    mapping: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = MappingProxyType({k: SPARQLSanitizer.escape_uri(v) for k, v in dict(self.mapping).items()})
        object.__setattr__(self, "mapping", frozen)

    def __getitem__(self, prefix: str) -> str:
        return self.mapping[prefix]

    def __contains__(self, prefix: object) -> bool:
        return prefix in self.mapping

    def term(self, prefix: str, local: str) -> str:
        """拼接命名空间与本地名，例如 ``term("rdf", "type")``。"""

        try:
            return self.mapping[prefix] + local
        except KeyError:
            raise KeyError(f"未注册的命名空间前缀: {prefix}") from None


class StatementBuilder:
    """生成仓库各项操作所需的语句文本。

    SPARQL 语句不包含 PREFIX 块（由仓库统一追加）；SQL 语句按 Virtuoso 存储过程
    语法生成。所有图 IRI 均经过 :class:`SPARQLSanitizer` 校验。"""

    _DIACHRON = "http://www.diachron-fp7.eu/resource/"
    _VARIABLE_PATTERN = re.compile(r"^[?$][A-Za-z_][A-Za-z0-9_]*$")

    # ---- SPARQL ---------------------------------------------------------

    def count_triples(self, graph: str | None = None) -> str:
        """统计三元组数量；``graph`` 为空时统计整个存储。"""

        if graph is None:
            return "SELECT (COUNT(*) AS ?count) WHERE { ?s ?p ?o }"
        return f"SELECT (COUNT(*) AS ?count) FROM {SPARQLSanitizer.format_uri(graph)} WHERE {{ ?s ?p ?o }}"

    def graph_existence_query(self, graph: str) -> str:
        """命名图存在性探测语句，最多返回两行。"""

        return f"SELECT * FROM {SPARQLSanitizer.format_uri(graph)} WHERE {{ ?s ?p ?o }} LIMIT 2"

    def clear_graph(self, graph: str) -> str:
        return f"CLEAR GRAPH {SPARQLSanitizer.format_uri(graph)}"

    def copy_graph(self, source: str, destination: str) -> str:
        """将源图全部三元组追加到目标图（不清空目标图）。"""

        src = SPARQLSanitizer.format_uri(source)
        dst = SPARQLSanitizer.format_uri(destination)
        return (
            "INSERT {\n"
            f"  GRAPH {dst} {{ ?s ?p ?o }}\n"
            "}\n"
            "WHERE {\n"
            f"  GRAPH {src} {{ ?s ?p ?o }}\n"
            "}"
        )

    def move_graph(self, source: str, destination: str) -> str:
        """SPARQL 1.1 ``MOVE``，用于不支持 SQL 的通道重命名命名图。"""

        return f"MOVE GRAPH {SPARQLSanitizer.format_uri(source)} TO GRAPH {SPARQLSanitizer.format_uri(destination)}"

    def insert_data(self, graph: str, fragments: Iterable[str]) -> str:
        """以 ``INSERT DATA`` 形式写入已渲染的三元组片段。

        参数：
            graph: 目标命名图 IRI。
            fragments: 形如 ``<s> <p> <o>`` 的片段（不带结尾句点），须由调用方事先转义。
        """

        lines = []
        for fragment in fragments:
            text = fragment.strip()
            if text.endswith(" ."):
                text = text[:-2].rstrip()
            lines.append(f"    {text} .")
        if not lines:
            raise ValueError("INSERT DATA 至少需要一条三元组")
        body = "\n".join(lines)
        return (
            "INSERT DATA {\n"
            f"  GRAPH {SPARQLSanitizer.format_uri(graph)} {{\n"
            f"{body}\n"
            "  }\n"
            "}"
        )

    def select_in_graph(
        self,
        graph: str,
        pattern: str,
        *,
        variables: Iterable[str] = ("*",),
        limit: int | None = None,
    ) -> str:
        """在单个命名图内执行的 SELECT。

        参数：
            pattern: WHERE 子句中的图模式，例如 ``"?s ?p ?o"``，由调用方负责其正确性。
            variables: 投影变量，例如 ``("?s", "?o")``；缺省为 ``*``。
            limit: 可选的结果上限。
        """

        names = list(variables)
        for name in names:
            if name != "*" and not self._VARIABLE_PATTERN.match(name):
                raise ValueError(f"Invalid variable name: {name}")
        query = f"SELECT {' '.join(names) or '*'} FROM {SPARQLSanitizer.format_uri(graph)} WHERE {{ {pattern} }}"
        if limit is not None:
            if limit < 0:
                raise ValueError("limit 不能为负数")
            query += f" LIMIT {int(limit)}"
        return query

    def construct_graph(self, graph: str) -> str:
        return (
            "CONSTRUCT { ?s ?p ?o }\n"
            f"WHERE {{ GRAPH {SPARQLSanitizer.format_uri(graph)} {{ ?s ?p ?o }} }}"
        )

    def dereify(self, reified_source: str, destination: str) -> str:
        """将 diachron 物化记录还原为普通三元组写入目标图。"""

        ns = self._DIACHRON
        src = SPARQLSanitizer.format_uri(reified_source)
        dst = SPARQLSanitizer.format_uri(destination)
        return (
            "INSERT {\n"
            f"  GRAPH {dst} {{ ?s ?p ?o }}\n"
            "}\n"
            "WHERE {\n"
            f"  GRAPH {src} {{\n"
            f"    ?record <{ns}subject> ?s ;\n"
            f"            <{ns}hasRecordAttribute> ?ratt .\n"
            f"    ?ratt <{ns}predicate> ?p ;\n"
            f"          <{ns}object> ?o .\n"
            "  }\n"
            "}"
        )

    # ---- Virtuoso SQL ---------------------------------------------------

    def rename_graph_sql(self, old_name: str, new_name: str) -> str:
        """直接改写 ``RDF_QUAD`` 表中的图标识，效率远高于 SPARQL 复制。"""

        old = SPARQLSanitizer.quote_sql(SPARQLSanitizer.escape_uri(old_name))
        new = SPARQLSanitizer.quote_sql(SPARQLSanitizer.escape_uri(new_name))
        return (
            "UPDATE DB.DBA.RDF_QUAD TABLE OPTION (index RDF_QUAD_GS) "
            f"SET g = iri_to_id ({new}) "
            f"WHERE g = iri_to_id ({old}, 0)"
        )

    def load_rdfxml_file(self, filename: str, graph: str) -> str:
        return (
            f"RDF_LOAD_RDFXML_MT(file_to_string_output({SPARQLSanitizer.quote_sql(filename)}), '', "
            f"{SPARQLSanitizer.quote_sql(SPARQLSanitizer.escape_uri(graph))})"
        )

    def load_turtle_file(self, filename: str, graph: str) -> str:
        return (
            f"TTLP_MT(file_to_string_output({SPARQLSanitizer.quote_sql(filename)}), '', "
            f"{SPARQLSanitizer.quote_sql(SPARQLSanitizer.escape_uri(graph))})"
        )

    def clear_load_list(self) -> str:
        return "delete from DB.DBA.load_list"

    def register_directory(self, folder: str, file_mask: str, graph: str) -> str:
        """``ld_dir`` 登记目录下匹配掩码的文件，等待加载器处理。"""

        return (
            f"ld_dir({SPARQLSanitizer.quote_sql(folder)}, "
            f"{SPARQLSanitizer.quote_sql(SPARQLSanitizer.validate_file_mask(file_mask))}, "
            f"{SPARQLSanitizer.quote_sql(SPARQLSanitizer.escape_uri(graph))})"
        )

    def run_loader(self) -> str:
        return "rdf_loader_run()"

    def checkpoint(self) -> str:
        return "checkpoint"
