"""BulkLoader 批量加载语句序列测试。"""
from __future__ import annotations

import pytest

from sf_virtuoso_acl.common.exceptions import UnsupportedOperationError
from sf_virtuoso_acl.converter.formats import RDFFormat


G = "http://example.org/graph"


def test_bulk_import_full_sequence(repository, client) -> None:
    result = repository.bulk_import("/data/dump", RDFFormat.NTRIPLES, G, incremental=False)

    kinds = [kind for kind, _ in client.statements]
    texts = [text for _, text in client.statements]
    assert kinds == ["update", "sql", "sql", "sql", "sql"]
    assert texts[0].endswith(f"CLEAR GRAPH <{G}>")
    assert texts[1:] == [
        "delete from DB.DBA.load_list",
        f"ld_dir('/data/dump', '*.nt', '{G}')",
        "rdf_loader_run()",
        "checkpoint",
    ]
    assert result.cleared is True
    assert len(result.statements) == 5


def test_bulk_import_incremental_skips_clear(repository, client) -> None:
    result = repository.bulk_import("/data/dump", "turtle", G, incremental=True)

    assert [kind for kind, _ in client.statements] == ["sql", "sql", "sql", "sql"]
    assert client.statements[1][1] == f"ld_dir('/data/dump', '*.ttl', '{G}')"
    assert result.cleared is False
    assert result.file_mask == "*.ttl"


def test_bulk_import_requires_sql_transport(make_repository) -> None:
    repo, stub = make_repository(supports_sql=False)

    with pytest.raises(UnsupportedOperationError):
        repo.bulk_import("/data/dump", RDFFormat.RDFXML, G)
    assert stub.statements == []


def test_bulk_import_invalid_graph_has_no_side_effects(repository, client) -> None:
    with pytest.raises(ValueError):
        repository.bulk_import("/data/dump", RDFFormat.N3, "not-a-graph")
    assert client.statements == []


def test_individual_loader_steps(repository, client) -> None:
    repository.clear_load_list()
    repository.add_files_to_load("/data/dump", "rdf/xml", G)
    repository.run_loader()
    repository.checkpoint()
    repository.import_single_rdf_file("/data/one.rdf", G)
    repository.import_single_n3_file("/data/one.n3", G)

    texts = [text for _, text in client.statements]
    assert texts[1] == f"ld_dir('/data/dump', '*.rdf', '{G}')"
    assert texts[4].startswith("RDF_LOAD_RDFXML_MT(")
    assert texts[5].startswith("TTLP_MT(")


def test_single_file_import_requires_sql_transport(make_repository) -> None:
    repo, _ = make_repository(supports_sql=False)

    with pytest.raises(UnsupportedOperationError):
        repo.import_single_rdf_file("/data/one.rdf", G)


def test_rdf_format_aliases() -> None:
    assert RDFFormat.parse("N-Triples") is RDFFormat.NTRIPLES
    assert RDFFormat.parse("ttl") is RDFFormat.TURTLE
    assert RDFFormat.parse(RDFFormat.JSONLD) is RDFFormat.JSONLD
    with pytest.raises(ValueError):
        RDFFormat.parse("csv")
