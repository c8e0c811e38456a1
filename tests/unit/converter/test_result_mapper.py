from datetime import date, datetime
from decimal import Decimal

from rdflib import BNode, Literal, URIRef

from sf_virtuoso_acl.converter.result_mapper import XSD, ResultMapper


def test_map_rows_casts_core_types() -> None:
    mapper = ResultMapper()
    rows = [
        {
            "name": {"type": "literal", "value": "Alice", "datatype": XSD + "string"},
            "age": {"type": "literal", "value": "42", "datatype": XSD + "integer"},
            "score": {"type": "literal", "value": "1.5", "datatype": XSD + "double"},
            "active": {"type": "literal", "value": "true", "datatype": XSD + "boolean"},
            "ts": {"type": "literal", "value": "2024-01-01T08:00:00Z", "datatype": XSD + "dateTime"},
            "uri": {"type": "uri", "value": "http://example.com/Alice"},
        }
    ]

    first = mapper.map_rows(["name", "age", "score", "active", "ts", "uri"], rows)[0]

    assert first["age"] == 42
    assert first["score"] == 1.5
    assert first["active"] is True
    assert first["name"] == "Alice"
    assert first["ts"] == "2024-01-01T08:00:00+00:00"
    assert first["uri"] == "http://example.com/Alice"


def test_map_rows_handles_missing_cells() -> None:
    assert ResultMapper().map_rows(["col"], [{}]) == [{"col": None}]


def test_to_python_keeps_unparseable_values() -> None:
    mapper = ResultMapper()

    assert mapper.to_python({"type": "literal", "value": "n/a", "datatype": XSD + "integer"}) == "n/a"
    assert mapper.to_python({"type": "literal", "value": "2024-13-45", "datatype": XSD + "dateTime"}) == "2024-13-45"
    assert mapper.to_python({"type": "literal", "value": "2024-01-01T00:00:00", "datatype": XSD + "dateTime"}).endswith("Z")


def test_from_value_infers_cell_types() -> None:
    mapper = ResultMapper()

    assert mapper.from_value(None) is None
    assert mapper.from_value(True) == {"type": "literal", "value": "true", "datatype": XSD + "boolean"}
    assert mapper.from_value(7)["datatype"] == XSD + "integer"
    assert mapper.from_value(Decimal("1.10"))["value"] == "1.10"
    assert mapper.from_value(datetime(2024, 1, 2, 3, 4, 5))["value"] == "2024-01-02T03:04:05"
    assert mapper.from_value(date(2024, 1, 2))["datatype"] == XSD + "date"
    assert mapper.from_value(b"plain") == {"type": "literal", "value": "plain"}
    assert mapper.from_value("urn:uuid:1234") == {"type": "uri", "value": "urn:uuid:1234"}
    assert mapper.from_value("nodeID://b42") == {"type": "bnode", "value": "b42"}
    # 含空白的文本不会被误判为 IRI
    assert mapper.from_value("http://ex/a b")["type"] == "literal"


def test_from_term_converts_rdflib_nodes() -> None:
    assert ResultMapper.from_term(URIRef("http://ex/a")) == {"type": "uri", "value": "http://ex/a"}
    assert ResultMapper.from_term(BNode("b1")) == {"type": "bnode", "value": "b1"}
    assert ResultMapper.from_term(Literal("hola", lang="es")) == {"type": "literal", "value": "hola", "xml:lang": "es"}
    assert ResultMapper().from_value(Literal("5", datatype=XSD + "int"))["datatype"] == XSD + "int"
