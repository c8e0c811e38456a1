"""语句模板与参数转义工具的便捷导出。"""
from sf_virtuoso_acl.query.builder import NamespaceTable, PrefixBlock, SPARQLSanitizer, StatementBuilder

__all__ = [
    "NamespaceTable",
    "PrefixBlock",
    "SPARQLSanitizer",
    "StatementBuilder",
]
