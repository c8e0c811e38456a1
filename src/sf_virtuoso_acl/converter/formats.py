"""RDF 序列化格式枚举。"""
from __future__ import annotations

from enum import Enum


class RDFFormat(Enum):
    """支持的 RDF 文件格式。

    每个成员携带 rdflib 使用的格式名与批量加载器 ``ld_dir`` 使用的文件掩码。"""

    RDFXML = ("xml", "*.rdf")
    N3 = ("n3", "*.n3")
    NTRIPLES = ("nt", "*.nt")
    TURTLE = ("turtle", "*.ttl")
    JSONLD = ("json-ld", "*.jsonld")

    def __init__(self, rdflib_name: str, file_mask: str) -> None:
        self.rdflib_name = rdflib_name
        self.file_mask = file_mask

    @classmethod
    def parse(cls, value: "RDFFormat | str") -> "RDFFormat":
        """按成员名或常见别名解析格式，例如 ``"rdf/xml"``、``"ttl"``、``"N-Triples"``。"""

        if isinstance(value, RDFFormat):
            return value
        key = str(value).strip().lower().replace("_", "-")
        try:
            return _ALIASES[key]
        except KeyError:
            raise ValueError(f"不支持的 RDF 格式: {value!r}") from None


_ALIASES = {
    "rdfxml": RDFFormat.RDFXML,
    "rdf/xml": RDFFormat.RDFXML,
    "rdf-xml": RDFFormat.RDFXML,
    "xml": RDFFormat.RDFXML,
    "rdf": RDFFormat.RDFXML,
    "n3": RDFFormat.N3,
    "ntriples": RDFFormat.NTRIPLES,
    "n-triples": RDFFormat.NTRIPLES,
    "nt": RDFFormat.NTRIPLES,
    "turtle": RDFFormat.TURTLE,
    "ttl": RDFFormat.TURTLE,
    "json-ld": RDFFormat.JSONLD,
    "jsonld": RDFFormat.JSONLD,
}
