"""TripleWriter 与 TripleString 测试。"""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from sf_virtuoso_acl.common.exceptions import QueryExecutionError
from sf_virtuoso_acl.transaction.triples import TripleString, TripleType


G = "http://example.org/graph"
S = "http://example.org/s"
P = "http://example.org/p"
OBJ = "http://example.org/o"
XSD = "http://www.w3.org/2001/XMLSchema#"


def test_add_triple_sends_single_scoped_statement(repository, client) -> None:
    result = repository.add_triple(S, P, OBJ, G)

    assert result.inserted == 1
    assert len(client.updates) == 1
    statement = client.updates[0]
    assert f"<{S}> <{P}> <{OBJ}> ." in statement
    assert f"GRAPH <{G}> {{" in statement
    assert "INSERT DATA" in statement


def test_add_literal_triple_quotes_object(repository, client) -> None:
    repository.add_literal_triple(S, P, 'a "quoted"\nvalue', G)

    assert f'<{S}> <{P}> "a \\"quoted\\"\\nvalue" .' in client.updates[0]


def test_add_literal_triple_with_lang_and_typed_values(repository, client) -> None:
    repository.add_literal_triple(S, P, "示例", G, lang="zh")
    repository.add_literal_triple(S, P, 42, G)
    repository.add_literal_triple(S, P, True, G)

    lang_stmt, int_stmt, bool_stmt = client.updates
    assert '"示例"@zh .' in lang_stmt
    assert f'"42"^^<{XSD}integer> .' in int_stmt
    assert f'"true"^^<{XSD}boolean> .' in bool_stmt


def test_add_triples_batches_statements(make_repository) -> None:
    repo, stub = make_repository(insert_batch_size=2)
    triples = [TripleString(subject=f"http://ex/s{i}", predicate=P, object=OBJ) for i in range(5)]

    result = repo.add_triples(triples, G)

    assert result.inserted == 5
    assert result.batches == 3
    assert len(stub.updates) == 3
    assert stub.updates[0].count(f"<{P}> <{OBJ}> .") == 2
    assert stub.updates[2].count(f"<{P}> <{OBJ}> .") == 1


def test_add_triples_empty_sends_nothing(repository, client) -> None:
    result = repository.add_triples([], G)

    assert result.inserted == 0
    assert client.updates == []


def test_triple_string_rejects_invalid_iri() -> None:
    with pytest.raises(ValidationError):
        TripleString(subject="http://ex/s> } DROP ALL {", predicate=P, object=OBJ)
    with pytest.raises(ValidationError):
        TripleString(subject=S, predicate=P, object="not an iri")
    with pytest.raises(ValidationError):
        TripleString(subject=S, predicate=P, object=OBJ, lang="en")


def test_triple_string_renders_literal() -> None:
    triple = TripleString(subject=S, predicate=P, object="2024-01-01", type=TripleType.LITERAL, datatype=XSD + "date")
    assert triple.render() == f'<{S}> <{P}> "2024-01-01"^^<{XSD}date>'


def test_schema_helpers_use_namespace_table(repository, client) -> None:
    repository.add_schema_class("http://ex/Person", G)
    repository.add_schema_property("http://ex/knows", "http://ex/Person", "http://ex/Person", G)
    repository.add_datatype_property("http://ex/name", "http://ex/Person", XSD + "string", G)

    cls_stmt, prop_stmt, dt_stmt = client.updates
    assert "<http://ex/Person> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <http://www.w3.org/2000/01/rdf-schema#Class> ." in cls_stmt
    assert "<http://www.w3.org/1999/02/22-rdf-syntax-ns#Property>" in prop_stmt
    assert "<http://www.w3.org/2000/01/rdf-schema#domain> <http://ex/Person>" in prop_stmt
    assert f"<http://www.w3.org/2000/01/rdf-schema#range> <{XSD}string>" in dt_stmt


def test_update_failure_propagates(repository, client) -> None:
    client.update_error = QueryExecutionError("rejected")
    with pytest.raises(QueryExecutionError):
        repository.add_triple(S, P, OBJ, G)


@pytest.mark.parametrize(
    ("value", "lexical"),
    [(float("nan"), "NaN"), (float("inf"), "INF"), (float("-inf"), "-INF"), (1.5, "1.5")],
)
def test_double_literals_use_xsd_lexical_forms(value: float, lexical: str) -> None:
    triple = TripleString(subject=S, predicate=P, object=value, type=TripleType.LITERAL)

    assert triple.object_term() == f'"{lexical}"^^<{XSD}double>'


@pytest.mark.parametrize(
    ("value", "options"),
    [(42, {"lang": "en"}), (1.5, {"lang": "en"}), (True, {"lang": "en"}), (True, {"datatype": XSD + "string"})],
)
def test_literal_options_must_fit_the_value(value, options) -> None:
    with pytest.raises(ValidationError):
        TripleString(subject=S, predicate=P, object=value, type=TripleType.LITERAL, **options)


def test_numeric_literal_keeps_explicit_datatype() -> None:
    triple = TripleString(subject=S, predicate=P, object=7, type=TripleType.LITERAL, datatype=XSD + "long")

    assert triple.object_term() == f'"7"^^<{XSD}long>'
