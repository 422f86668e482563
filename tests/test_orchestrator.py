"""Tests for annote.orchestrator."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pytest

from annote.assembler import DocumentAssembler
from annote.config import AnnoteConfig
from annote.errors import ReadFailure, RenderFailure
from annote.models import RenderedBlock
from annote.orchestrator import Annotator
from tests._fixtures.source_tree import SourceTreeBuilder

SAMPLE = """
//
// ### Function: add
// Adds two numbers.
function add(a, b) {
  return a + b;
}

//
// Exported for callers.
module.exports = add;
"""


def _config(tree: SourceTreeBuilder, tmp_path: Path, **overrides) -> AnnoteConfig:
    return AnnoteConfig(path=tree.path(), write_to=tmp_path / "docs").merged(**overrides)


def test_run_writes_one_document_per_file(
    source_tree: SourceTreeBuilder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    source_tree.write({"add.js": SAMPLE, "lib/other.js": "var x = 1;\n"})
    monkeypatch.chdir(tmp_path)

    report = Annotator(_config(source_tree, tmp_path)).run()

    assert report.ok
    assert [outcome.source.name for outcome in report.outcomes] == ["add.js", "other.js"]
    expected = tmp_path / "docs" / "src" / "add.js.html"
    assert report.outcomes[0].output == expected
    html = expected.read_text(encoding="utf-8")
    assert "<h3>Function: add</h3>" in html
    assert html.count('<div class="block">') == 2
    assert html.index("Adds two numbers.") < html.index("Exported for callers.")
    assert report.outcomes[0].characters == len(html)


def test_annotate_source_without_highlight_escapes_code() -> None:
    config = AnnoteConfig(markdown=False, highlight=False)
    html = Annotator(config).annotate_source("// *raw*\nif (a < b) {}\n", "x.js")

    assert '<div class="annotation">*raw*</div>' in html
    assert "<pre><code>if (a &lt; b) {}\n</code></pre>" in html


def test_unreadable_file_does_not_stop_the_batch(source_tree: SourceTreeBuilder, tmp_path: Path) -> None:
    source_tree.write({"good.js": SAMPLE})
    source_tree.write_bytes("bad.js", b"\xff\xfe\x00 not utf-8 \x81")

    report = Annotator(_config(source_tree, tmp_path)).run()

    assert not report.ok
    assert [outcome.source.name for outcome in report.failed] == ["bad.js"]
    assert [outcome.source.name for outcome in report.succeeded] == ["good.js"]
    failure = report.failed[0].error
    assert isinstance(failure, ReadFailure)
    assert failure.stage == "read"
    assert "bad.js" in str(failure)
    assert not report.failed[0].output.exists()
    assert report.succeeded[0].output.exists()


def test_fail_fast_raises_first_failure(source_tree: SourceTreeBuilder, tmp_path: Path) -> None:
    source_tree.write_bytes("bad.js", b"\xff\xfe")
    source_tree.write({"good.js": SAMPLE})

    annotator = Annotator(_config(source_tree, tmp_path, fail_fast=True, jobs=1))
    with pytest.raises(ReadFailure):
        annotator.run()


class _ExplodingAssembler(DocumentAssembler):
    def assemble(self, file: str, blocks: Iterable[RenderedBlock], **kwargs) -> str:
        raise ValueError("template exploded")


def test_render_failure_leaves_no_output(source_tree: SourceTreeBuilder, tmp_path: Path) -> None:
    source_tree.write({"a.js": SAMPLE})
    annotator = Annotator(_config(source_tree, tmp_path), assembler=_ExplodingAssembler())

    report = annotator.run()

    assert len(report.failed) == 1
    outcome = report.failed[0]
    assert isinstance(outcome.error, RenderFailure)
    assert isinstance(outcome.error.cause, ValueError)
    assert not outcome.output.exists()
    assert not (tmp_path / "docs").exists()


def test_run_with_no_matches_returns_empty_report(source_tree: SourceTreeBuilder, tmp_path: Path) -> None:
    source_tree.write({"notes.txt": "nothing here"})
    report = Annotator(_config(source_tree, tmp_path)).run()
    assert report.outcomes == []
    assert report.ok


def test_run_with_relative_paths_mirrors_source_tree(
    source_tree: SourceTreeBuilder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    source_tree.write({"lib/a.js": "// doc\na();\n"})
    monkeypatch.chdir(tmp_path)

    report = Annotator(AnnoteConfig(path=Path("src"), write_to=Path("docs"))).run()

    assert report.ok
    assert report.outcomes[0].output == Path("docs/src/lib/a.js.html")
    html = (tmp_path / "docs" / "src" / "lib" / "a.js.html").read_text(encoding="utf-8")
    assert "<title>src/lib/a.js - annote</title>" in html


def test_render_document_counts_blocks_from_one_segmentation() -> None:
    config = AnnoteConfig(markdown=False, highlight=False)
    document = Annotator(config).render_document("a();\n//\n// doc\nb();\n", "x.js")

    assert document.blocks == 2
    assert document.html.count('<div class="block">') == 2
    assert '<div class="annotation">doc</div>' in document.html


def test_highlighted_document_embeds_style_rules() -> None:
    html = Annotator(AnnoteConfig()).annotate_source("// doc\nvar a = 1;\n", "x.js")
    assert ".annotated-code .k {" in html
    assert '<span class="' in html
