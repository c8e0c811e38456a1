"""文档构建测试

验证 Sphinx 能够为本项目生成 HTML 文档。
"""
from __future__ import annotations

from pathlib import Path

import pytest


@pytest.mark.slow
def test_sphinx_build_html(tmp_path: Path) -> None:
    """构建 Sphinx HTML 文档并断言首页生成。"""

    pytest.importorskip("sphinx")
    pytest.importorskip("sphinx_autodoc_typehints")
    pytest.importorskip("myst_parser")
    pytest.importorskip("furo")
    from sphinx.application import Sphinx

    # 结构：repo_root/tests/docs/test_docs_build.py
    repo_root = Path(__file__).resolve().parents[2]
    docs_dir = repo_root / "docs"
    assert docs_dir.is_dir(), f"docs dir not found: {docs_dir}"

    outdir = tmp_path / "_build"
    doctreedir = tmp_path / ".doctrees"

    app = Sphinx(
        srcdir=str(docs_dir),
        confdir=str(docs_dir),
        outdir=str(outdir),
        doctreedir=str(doctreedir),
        buildername="html",
    )
    app.build(force_all=True)

    assert (outdir / "index.html").exists(), f"index.html not generated in {outdir}"
