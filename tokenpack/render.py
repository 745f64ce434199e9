"""Render emitted files into text, markdown, or JSON output."""

from __future__ import annotations

import enum
import json
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from tokenpack import __version__
from tokenpack.models import Candidate

_RULE = "=" * 80


class OutputFormat(str, enum.Enum):
    """Supported output formats."""

    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"


@dataclass(frozen=True)
class EmittedFile:
    """A selected file's content as it will be written."""

    candidate: Candidate
    text: str
    tokens: int
    truncated: bool = False
    read_error: bool = False


@dataclass(frozen=True)
class RenderContext:
    """Run-level values shown in every part's header."""

    source: Path
    generated: str
    part: int | None = None
    line_numbers: bool = False


def render_part(
    fmt: OutputFormat,
    files: Sequence[EmittedFile],
    context: RenderContext,
) -> str:
    """Render one part's files, with header and footer, in the given format."""
    renderer = _RENDERERS[OutputFormat(fmt)]
    return renderer(files, context)


def _numbered(text: str) -> str:
    lines = text.split("\n")
    return "\n".join(f"{i:6d}\t{line}" for i, line in enumerate(lines, start=1))


def _body(file: EmittedFile, context: RenderContext) -> str:
    return _numbered(file.text) if context.line_numbers else file.text


def _tokens(files: Sequence[EmittedFile]) -> int:
    return sum(f.tokens for f in files)


def _render_text(files: Sequence[EmittedFile], context: RenderContext) -> str:
    title = "FILE AGGREGATION REPORT"
    if context.part is not None:
        title += f" - Part {context.part}"
    lines = [
        _RULE,
        title,
        f"Source: {context.source}",
        f"Generated: {context.generated}",
        f"Tool: tokenpack v{__version__}",
        _RULE,
        "",
    ]
    for file in files:
        lines.extend(["", file.candidate.rel_path.as_posix(), "", _body(file, context)])
    lines.extend(
        [
            "",
            _RULE,
            f"Files: {len(files)} | Tokens: ~{_tokens(files)}",
            _RULE,
        ]
    )
    return "\n".join(lines) + "\n"


def _render_markdown(files: Sequence[EmittedFile], context: RenderContext) -> str:
    lines = ["# Code Aggregation Report"]
    if context.part is not None:
        lines.append(f"## Part {context.part}")
    lines.extend(
        [
            "",
            f"- **Source:** `{context.source}`",
            f"- **Generated:** {context.generated}",
            f"- **Tool:** tokenpack v{__version__}",
            "",
            "---",
        ]
    )
    for file in files:
        label = " [truncated]" if file.truncated else ""
        fence = "````" if "```" in file.text else "```"
        lines.extend(
            [
                "",
                f"## `{file.candidate.rel_path.as_posix()}`  "
                f"(~{file.tokens} tokens){label}",
                "",
                f"{fence}{file.candidate.extension}",
                _body(file, context),
                fence,
            ]
        )
    lines.extend(
        [
            "",
            "---",
            f"**Files:** {len(files)} | **Tokens:** ~{_tokens(files)}",
        ]
    )
    return "\n".join(lines) + "\n"


def _render_json(files: Sequence[EmittedFile], context: RenderContext) -> str:
    meta: dict[str, object] = {
        "source": str(context.source),
        "date": context.generated,
        "version": __version__,
    }
    if context.part is not None:
        meta["part"] = context.part
    document = {
        "meta": meta,
        "files": [
            {
                "path": f.candidate.rel_path.as_posix(),
                "origin": f.candidate.origin.value,
                "tokens": f.tokens,
                "truncated": f.truncated,
                "content": _body(f, context),
            }
            for f in files
        ],
        "stats": {"files": len(files), "tokens": _tokens(files)},
    }
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


_RENDERERS = {
    OutputFormat.TEXT: _render_text,
    OutputFormat.MARKDOWN: _render_markdown,
    OutputFormat.JSON: _render_json,
}
