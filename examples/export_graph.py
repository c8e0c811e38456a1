"""示例：把命名图导出为本地文件，再导入另一个命名图。"""
from __future__ import annotations

import sys
from pathlib import Path

from sf_virtuoso_acl import RDFFormat, VirtuosoRepository

from helpers import DEMO_GRAPH, open_repository


def run(repo: VirtuosoRepository, target: Path, graph: str = DEMO_GRAPH) -> dict[str, int]:
    exported = repo.export_file(str(target), RDFFormat.NTRIPLES, graph)
    print(f"已导出 {exported['triples']} 条三元组到 {target}")

    copy_graph = graph + "/reimported"
    imported = repo.import_file(str(target), RDFFormat.NTRIPLES, copy_graph)
    return {"exported": exported["triples"], "imported": imported["triples"]}


if __name__ == "__main__":
    output = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("demo-export.nt")
    with open_repository(driver="http") as repository:
        print(run(repository, output))
