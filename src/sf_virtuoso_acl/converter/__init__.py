from sf_virtuoso_acl.converter.formats import RDFFormat
from sf_virtuoso_acl.converter.result_mapper import ResultMapper

__all__ = ["RDFFormat", "ResultMapper"]
