"""Tests for output rendering."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tokenpack.render import EmittedFile, OutputFormat, RenderContext, render_part


@pytest.fixture()
def emitted(make_candidate) -> list[EmittedFile]:
    return [
        EmittedFile(make_candidate("src/app.ts", 20), "const a = 1;\nconst b = 2;", 5),
        EmittedFile(
            make_candidate("big.py", 4000), "x" * 40 + "[cut]", 10, truncated=True
        ),
    ]


@pytest.fixture()
def context() -> RenderContext:
    return RenderContext(source=Path("/repo"), generated="2025-02-07 12:00:00")


class TestRenderText:
    """Tests for the text format."""

    def test_sections_and_footer(self, emitted, context) -> None:
        out = render_part(OutputFormat.TEXT, emitted, context)
        assert out.startswith("=" * 80 + "\nFILE AGGREGATION REPORT\n")
        assert "Source: /repo" in out
        assert "\nsrc/app.ts\n\nconst a = 1;" in out
        assert "Files: 2 | Tokens: ~15" in out

    def test_part_title(self, emitted, context) -> None:
        ctx = RenderContext(context.source, context.generated, part=3)
        assert "FILE AGGREGATION REPORT - Part 3" in render_part("text", emitted, ctx)

    def test_line_numbers(self, emitted, context) -> None:
        ctx = RenderContext(context.source, context.generated, line_numbers=True)
        out = render_part(OutputFormat.TEXT, emitted, ctx)
        assert "     1\tconst a = 1;\n     2\tconst b = 2;" in out


class TestRenderMarkdown:
    """Tests for the markdown format."""

    def test_headings_and_fences(self, emitted, context) -> None:
        out = render_part(OutputFormat.MARKDOWN, emitted, context)
        assert out.startswith("# Code Aggregation Report\n")
        assert "## `src/app.ts`  (~5 tokens)\n" in out
        assert "```ts\nconst a = 1;" in out
        assert "## `big.py`  (~10 tokens) [truncated]" in out
        assert "**Files:** 2 | **Tokens:** ~15" in out

    def test_nested_fence_widened(self, make_candidate, context) -> None:
        files = [EmittedFile(make_candidate("README.md", 10), "```sh\nls\n```", 4)]
        out = render_part(OutputFormat.MARKDOWN, files, context)
        assert "````md\n```sh" in out


class TestRenderJson:
    """Tests for the json format."""

    def test_valid_document(self, emitted, context) -> None:
        ctx = RenderContext(context.source, context.generated, part=2)
        document = json.loads(render_part(OutputFormat.JSON, emitted, ctx))
        assert document["meta"]["part"] == 2
        assert document["meta"]["source"] == "/repo"
        assert [f["path"] for f in document["files"]] == ["src/app.ts", "big.py"]
        assert document["files"][1]["truncated"] is True
        assert document["files"][0]["origin"] == "direct"
        assert document["stats"] == {"files": 2, "tokens": 15}

    def test_no_part_key_when_single(self, emitted, context) -> None:
        document = json.loads(render_part(OutputFormat.JSON, emitted, context))
        assert "part" not in document["meta"]
