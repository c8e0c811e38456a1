from sf_virtuoso_acl.transaction.triples import TripleString, TripleType, TripleWriter, WriteResult

__all__ = ["TripleString", "TripleType", "TripleWriter", "WriteResult"]
