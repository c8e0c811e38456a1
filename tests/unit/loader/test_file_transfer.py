"""本地文件导入导出测试（rdflib 解析与序列化）。"""
from __future__ import annotations

import io
import re
from pathlib import Path

from rdflib import Graph, URIRef

from sf_virtuoso_acl.converter.formats import RDFFormat


G = "http://example.org/graph"

TURTLE = """
@prefix ex: <http://example.org/> .

ex:alice ex:knows ex:bob ;
         ex:name "Alice"@en .
ex:bob ex:age 42 .
"""


def test_import_file_sends_insert_data(tmp_path: Path, repository, client) -> None:
    source = tmp_path / "people.ttl"
    source.write_text(TURTLE, encoding="utf-8")

    result = repository.import_file(str(source), RDFFormat.TURTLE, G)

    assert result == {"graph": G, "triples": 3, "batches": 1}
    statement = client.updates[0]
    assert f"GRAPH <{G}>" in statement
    assert "<http://example.org/alice> <http://example.org/knows> <http://example.org/bob> ." in statement
    assert '"Alice"@en' in statement


def test_import_file_batches_large_input(make_repository) -> None:
    repo, stub = make_repository(insert_batch_size=2)
    stream = io.BytesIO(TURTLE.encode("utf-8"))

    result = repo.import_file(stream, "turtle", G)

    assert result["batches"] == 2
    assert len(stub.updates) == 2


def test_export_file_serializes_construct_result(tmp_path: Path, repository, client) -> None:
    client.construct_result = TURTLE
    target = tmp_path / "export.nt"

    result = repository.export_file(str(target), RDFFormat.NTRIPLES, G)

    assert result["triples"] == 3
    kind, query = client.statements[-1]
    assert kind == "construct"
    assert f"GRAPH <{G}>" in query
    exported = Graph().parse(str(target), format="nt")
    assert (URIRef("http://example.org/alice"), URIRef("http://example.org/knows"), URIRef("http://example.org/bob")) in exported


def test_export_empty_graph_to_stream(repository, client) -> None:
    buffer = io.BytesIO()

    result = repository.export_file(buffer, "rdf/xml", G)

    assert result["triples"] == 0
    assert b"rdf:RDF" in buffer.getvalue()


BLANK_NODE_TURTLE = """
@prefix ex: <http://example.org/> .

_:b ex:p ex:o1 .
_:b ex:q ex:o2 .
ex:a ex:r ex:o3 .
ex:c ex:s _:d .
_:d ex:t _:e .
_:e ex:u "leaf" .
"""


def test_import_file_keeps_blank_node_statements_together(make_repository) -> None:
    repo, stub = make_repository(insert_batch_size=1)

    result = repo.import_file(io.BytesIO(BLANK_NODE_TURTLE.encode("utf-8")), "turtle", G)

    assert result["triples"] == 6
    assert result["batches"] == len(stub.updates) == 3
    for statement in stub.updates:
        labels = re.findall(r"_:\w+", statement)
        if "http://example.org/o1" in statement:
            assert "http://example.org/o2" in statement
            assert len(set(labels)) == 1
        elif "http://example.org/c>" in statement:
            assert '"leaf"' in statement
            assert len(set(labels)) == 2
        else:
            assert labels == []
