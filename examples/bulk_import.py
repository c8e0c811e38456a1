"""示例：使用 Virtuoso 批量加载器导入目录中的 RDF 文件（仅 SQL 通道）。

用法::

    python bulk_import.py /data/dumps turtle http://example.org/graph/dump --incremental
"""
from __future__ import annotations

import argparse

from sf_virtuoso_acl import BulkImportResult, VirtuosoRepository

from helpers import open_repository


def run(repo: VirtuosoRepository, folder: str, file_format: str, graph: str, *, incremental: bool = False) -> BulkImportResult:
    result = repo.bulk_import(folder, file_format, graph, incremental=incremental, trace_id="demo-bulk")
    for statement in result.statements:
        print("  ", statement)
    print(f"导入完成：{result.graph}，耗时 {result.duration_ms:.0f} ms")
    return result


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("folder", help="服务器端可访问的目录（需在 DirsAllowed 中）")
    parser.add_argument("format", help="rdfxml、n3、ntriples、turtle 或 jsonld")
    parser.add_argument("graph", help="目标命名图 IRI")
    parser.add_argument("--incremental", action="store_true", help="保留目标图现有数据")
    args = parser.parse_args()

    with open_repository(driver="sql") as repository:
        run(repository, args.folder, args.format, args.graph, incremental=args.incremental)


if __name__ == "__main__":
    main()
