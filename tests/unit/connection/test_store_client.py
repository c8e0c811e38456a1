"""RDFLibStoreClient 测试：替换 SPARQLUpdateStore 以验证结果转换与错误映射。"""
from __future__ import annotations

from http.client import RemoteDisconnected
from typing import Any
from urllib.error import HTTPError, URLError

import pytest
from rdflib import Graph, Literal, URIRef, Variable
from rdflib.plugin import PluginException
from rdflib.plugins.stores.sparqlconnector import SPARQLConnectorException

from sf_virtuoso_acl.common.exceptions import (
    QueryExecutionError,
    RepositoryConnectionError,
    UnsupportedOperationError,
)
from sf_virtuoso_acl.connection.store import RDFLibStoreClient


class _Row:
    def __init__(self, values: dict[str, Any]) -> None:
        self._values = values

    def asdict(self) -> dict[str, Any]:
        return dict(self._values)


class _Result:
    def __init__(self, vars: list[str] | None = None, rows: list[dict[str, Any]] | None = None, graph: Graph | None = None) -> None:
        self.vars = [Variable(name) for name in vars] if vars is not None else None
        self._rows = [_Row(row) for row in rows or []]
        self.graph = graph

    def __iter__(self):
        return iter(self._rows)


class _StoreStub:
    """SPARQLUpdateStore 替身：记录查询并按顺序返回预置结果。"""

    instances: list["_StoreStub"] = []
    responses: list[Any] = []

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self.queries: list[str] = []
        self.updates: list[str] = []
        self.closed = False
        _StoreStub.instances.append(self)

    def _next(self) -> Any:
        item = _StoreStub.responses.pop(0) if _StoreStub.responses else _Result(vars=[])
        if isinstance(item, Exception):
            raise item
        return item

    def query(self, query: str) -> Any:
        self.queries.append(query)
        return self._next()

    def update(self, query: str) -> None:
        self.updates.append(query)
        item = _StoreStub.responses.pop(0) if _StoreStub.responses else None
        if isinstance(item, Exception):
            raise item

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _patch_store(monkeypatch: pytest.MonkeyPatch):
    _StoreStub.instances = []
    _StoreStub.responses = []
    monkeypatch.setattr("sf_virtuoso_acl.connection.store.SPARQLUpdateStore", _StoreStub)
    yield


def test_connect_checks_endpoint_and_passes_auth() -> None:
    client = RDFLibStoreClient("http://virtuoso:8890/sparql-auth", auth=("dba", "dba"))

    client.connect()

    store = _StoreStub.instances[0]
    assert store.kwargs["query_endpoint"] == "http://virtuoso:8890/sparql-auth"
    assert store.kwargs["update_endpoint"] == "http://virtuoso:8890/sparql-auth"
    assert store.kwargs["auth"] == ("dba", "dba")
    assert store.queries == ["ASK { }"]


def test_connect_failure_raises_connection_error() -> None:
    _StoreStub.responses = [URLError("connection refused")]
    client = RDFLibStoreClient("http://virtuoso:8890/sparql")

    with pytest.raises(RepositoryConnectionError):
        client.connect()
    assert _StoreStub.instances[0].closed is True


def test_select_converts_rdflib_terms() -> None:
    _StoreStub.responses = [
        _Result(vars=[]),
        _Result(
            vars=["s", "label"],
            rows=[
                {"s": URIRef("http://ex/a"), "label": Literal("A", lang="en")},
                {"s": URIRef("http://ex/b"), "label": Literal(3)},
            ],
        ),
    ]
    client = RDFLibStoreClient("http://virtuoso:8890/sparql")
    client.connect()

    cursor = client.select("SELECT ?s ?label WHERE { ?s ?p ?label }")
    rows = cursor.fetchall()

    assert cursor.vars == ["s", "label"]
    assert rows[0]["s"] == {"type": "uri", "value": "http://ex/a"}
    assert rows[0]["label"] == {"type": "literal", "value": "A", "xml:lang": "en"}
    assert rows[1]["label"]["datatype"] == "http://www.w3.org/2001/XMLSchema#integer"


def test_construct_serializes_graph() -> None:
    graph = Graph()
    graph.add((URIRef("http://ex/s"), URIRef("http://ex/p"), URIRef("http://ex/o")))
    _StoreStub.responses = [_Result(vars=[]), _Result(graph=graph)]
    client = RDFLibStoreClient("http://virtuoso:8890/sparql")
    client.connect()

    turtle = client.construct("CONSTRUCT { ?s ?p ?o } WHERE { ?s ?p ?o }")

    parsed = Graph().parse(data=turtle, format="turtle")
    assert len(parsed) == 1


def test_update_http_error_is_query_error() -> None:
    client = RDFLibStoreClient("http://virtuoso:8890/sparql", check_on_connect=False)
    client.connect()
    _StoreStub.responses = [HTTPError("http://virtuoso:8890/sparql", 400, "Bad Request", {}, None)]

    with pytest.raises(QueryExecutionError) as exc_info:
        client.update("INSERT DATA { broken")
    assert exc_info.value.details["status"] == 400


def test_execute_sql_is_unsupported() -> None:
    client = RDFLibStoreClient("http://virtuoso:8890/sparql", check_on_connect=False)

    with pytest.raises(UnsupportedOperationError):
        client.execute_sql("checkpoint")


@pytest.mark.parametrize(
    "error",
    [
        SPARQLConnectorException("Unexpected content type text/html"),
        PluginException("No plugin registered for (text/html, ResultParser)"),
        RemoteDisconnected("Remote end closed connection without response"),
    ],
)
def test_store_library_errors_are_query_errors(error: Exception) -> None:
    client = RDFLibStoreClient("http://virtuoso:8890/sparql", check_on_connect=False)
    client.connect()
    _StoreStub.responses = [error]

    with pytest.raises(QueryExecutionError) as exc_info:
        client.select("SELECT * WHERE { ?s ?p ?o }")
    assert exc_info.value.details["error"]


def test_repository_graph_exists_falls_back_on_store_error() -> None:
    from sf_virtuoso_acl.repository import VirtuosoRepository

    client = RDFLibStoreClient("http://virtuoso:8890/sparql", check_on_connect=False)
    repo = VirtuosoRepository(client)
    _StoreStub.responses = [SPARQLConnectorException("Unexpected content type text/html")] * 2

    try:
        assert repo.graph_exists("http://example.org/graph") is False
        assert repo.count_triples("http://example.org/graph", default=0) == 0
    finally:
        repo.terminate()
