"""SPARQL 结果单元格转换工具。

Virtuoso 三种通道返回的数据形态不同：HTTP 端点与 rdflib 存储给出 SPARQL JSON
风格的单元格，SQL 通道返回的是驱动层的 Python 值。:class:`ResultMapper` 在两者之间
做双向转换，使上层始终面对统一的 ``{"type", "value", ["datatype"], ["xml:lang"]}``
单元格结构，并能按 XSD 类型还原为 Python 值。
"""
from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable

from rdflib import BNode, Literal, URIRef
from rdflib.term import Node


XSD = "http://www.w3.org/2001/XMLSchema#"


class ResultMapper:
    """SPARQL 单元格与 Python 值之间的转换器。

    - 支持常见的 XSD 数值、布尔、日期时间类型自动转换。
    - 遇到未知类型时保持原样，避免误报错或数据丢失。
    """

    #: 可被视为整数的 XSD 类型集合。
    _INT_TYPES = {
        XSD + "integer",
        XSD + "int",
        XSD + "long",
        XSD + "short",
        XSD + "byte",
        XSD + "nonNegativeInteger",
        XSD + "positiveInteger",
        XSD + "nonPositiveInteger",
        XSD + "negativeInteger",
        XSD + "unsignedInt",
        XSD + "unsignedLong",
        XSD + "unsignedShort",
        XSD + "unsignedByte",
    }

    #: 可被视为浮点或高精度小数的 XSD 类型集合。
    _DECIMAL_TYPES = {
        XSD + "decimal",
        XSD + "double",
        XSD + "float",
    }

    _BOOL_TYPE = XSD + "boolean"
    _DATETIME_TYPE = XSD + "dateTime"

    #: SQL 通道中被识别为 IRI 的字符串协议。
    _IRI_PATTERN = re.compile(r"^(https?|urn|tag|mailto|ftp|file):\S+$")
    _BNODE_PREFIX = "nodeID://"

    def to_python(self, cell: dict[str, Any] | None) -> Any:
        """根据单元格的数据类型还原 Python 值。

        参数:
            cell: 原始单元格，如 ``{"type": "literal", "value": "42", "datatype": XSD + "integer"}``；
                变量未绑定时为 ``None``。

        返回:
            转换后的 Python 对象；无法转换时返回原始文本。
        """

        if cell is None:
            return None
        value = cell.get("value")
        dtype = cell.get("datatype")
        if dtype is None:
            return value
        if dtype in self._INT_TYPES:
            try:
                return int(value)
            except (TypeError, ValueError):
                return value
        if dtype in self._DECIMAL_TYPES:
            try:
                return float(Decimal(str(value)))
            except (TypeError, ValueError, ArithmeticError):
                return value
        if dtype == self._BOOL_TYPE:
            return str(value).lower() in {"true", "1"}
        if dtype == self._DATETIME_TYPE:
            return self._normalize_datetime(str(value))
        return value

    def map_rows(self, vars: Iterable[str], rows: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
        """把游标行批量转换为 ``{变量名: Python 值}``，缺失变量为 ``None``。"""

        names = list(vars)
        return [{var: self.to_python(row.get(var)) for var in names} for row in rows]

    def from_value(self, value: Any) -> dict[str, Any] | None:
        """把 SQL 驱动返回的单值转换为 SPARQL JSON 风格单元格。

        ``None`` 表示变量未绑定，返回 ``None``。"""

        if value is None:
            return None
        if isinstance(value, Node):
            return self.from_term(value)
        if isinstance(value, bool):
            return {"type": "literal", "value": "true" if value else "false", "datatype": self._BOOL_TYPE}
        if isinstance(value, int):
            return {"type": "literal", "value": str(value), "datatype": XSD + "integer"}
        if isinstance(value, float):
            return {"type": "literal", "value": repr(value), "datatype": XSD + "double"}
        if isinstance(value, Decimal):
            return {"type": "literal", "value": str(value), "datatype": XSD + "decimal"}
        if isinstance(value, datetime):
            return {"type": "literal", "value": value.isoformat(), "datatype": self._DATETIME_TYPE}
        if isinstance(value, date):
            return {"type": "literal", "value": value.isoformat(), "datatype": XSD + "date"}
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        text = str(value)
        if text.startswith(self._BNODE_PREFIX):
            return {"type": "bnode", "value": text[len(self._BNODE_PREFIX):]}
        if self._IRI_PATTERN.match(text):
            return {"type": "uri", "value": text}
        return {"type": "literal", "value": text}

    @staticmethod
    def from_term(term: Node) -> dict[str, Any]:
        """把 rdflib 项转换为 SPARQL JSON 风格单元格。"""

        if isinstance(term, URIRef):
            return {"type": "uri", "value": str(term)}
        if isinstance(term, BNode):
            return {"type": "bnode", "value": str(term)}
        if isinstance(term, Literal):
            cell: dict[str, Any] = {"type": "literal", "value": str(term)}
            if term.datatype is not None:
                cell["datatype"] = str(term.datatype)
            if term.language:
                cell["xml:lang"] = term.language
            return cell
        return {"type": "literal", "value": str(term)}

    @staticmethod
    def _normalize_datetime(text: str) -> str:
        """将 XSD ``dateTime`` 文本统一为 ISO 8601 字符串。

        - 自动将结尾的 ``Z`` 替换为 ``+00:00`` 再解析。
        - 若原始字符串无时区，将结果补齐 ``Z``。
        """

        normalized = text.replace("Z", "+00:00")
        try:
            dt = datetime.fromisoformat(normalized)
            if dt.tzinfo:
                return dt.isoformat()
            return f"{dt.isoformat()}Z"
        except ValueError:
            return text
