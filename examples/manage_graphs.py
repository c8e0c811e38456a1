"""示例：写入少量三元组并演示命名图的计数、复制、重命名与清空。"""
from __future__ import annotations

from sf_virtuoso_acl import TripleString, TripleType, VirtuosoRepository

from helpers import DEMO_GRAPH, open_repository


EX = "http://example.org/"


def run(repo: VirtuosoRepository, graph: str = DEMO_GRAPH) -> dict[str, int]:
    view = repo.bind_graph(graph)
    view.clear(trace_id="demo-reset")

    repo.add_schema_class(EX + "Person", graph)
    repo.add_datatype_property(EX + "name", EX + "Person", "http://www.w3.org/2001/XMLSchema#string", graph)
    view.add_triples(
        [
            TripleString(subject=EX + "alice", predicate=EX + "knows", object=EX + "bob"),
            TripleString(subject=EX + "alice", predicate=EX + "name", object="Alice", type=TripleType.LITERAL, lang="en"),
            TripleString(subject=EX + "bob", predicate=EX + "age", object=42, type=TripleType.LITERAL),
        ],
        trace_id="demo-write",
    )
    before = view.count()
    print(f"{graph} 共 {before} 条三元组")

    backup = graph + "/backup"
    repo.copy_graph(graph, backup)
    renamed = repo.rename_graph(backup, graph + "/archive")
    print("重命名方式:", renamed["method"])

    archived = repo.count_triples(renamed["target"], default=0)
    repo.clear_graph(renamed["target"])
    return {"written": before, "archived": archived}


if __name__ == "__main__":
    with open_repository() as repository:
        print(run(repository))
