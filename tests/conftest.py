"""Shared test fixtures for tokenpack."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from tokenpack.models import Candidate, Origin

MakeCandidate = Callable[..., Candidate]


@pytest.fixture()
def make_candidate() -> MakeCandidate:
    """Factory for in-memory candidates under a fake /repo root."""

    def _make(
        name: str,
        size_bytes: int = 0,
        *,
        tokens: int | None = None,
        modified_at: float = 0.0,
        origin: Origin = Origin.DIRECT,
    ) -> Candidate:
        if tokens is not None:
            size_bytes = tokens * 4
        return Candidate(
            path=Path("/repo") / name,
            rel_path=Path(name),
            size_bytes=size_bytes,
            modified_at=modified_at,
            origin=origin,
        )

    return _make


def write_file(path: Path, content: str, mtime: float | None = None) -> Path:
    """Write content to path (creating parents) and optionally set its mtime."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture()
def sample_repo(tmp_path: Path) -> Path:
    """A small source tree with distinct mtimes: newest is page.tsx."""
    src = tmp_path / "src"
    base = 1_700_000_000.0
    write_file(
        src / "page.tsx",
        'import { helper } from "./utils";\n'
        'import Button from "./components/Button";\n'
        'import React from "react";\n'
        "export default function Page() { return helper(); }\n",
        mtime=base + 500,
    )
    write_file(
        src / "utils.ts",
        'import { deep } from "./deep";\n'
        "export const helper = () => deep();\n",
        mtime=base + 100,
    )
    write_file(src / "deep.ts", "export const deep = () => 42;\n", mtime=base + 50)
    write_file(
        src / "components" / "Button" / "index.tsx",
        "export default function Button() { return null; }\n",
        mtime=base + 10,
    )
    write_file(src / "config.json", '{"name": "demo"}\n', mtime=base + 300)
    write_file(src / "notes.md", "# Notes\n" + "x" * 400 + "\n", mtime=base + 400)
    return src


@pytest.fixture()
def out_dir(tmp_path: Path) -> Path:
    """An output directory outside the sample source tree."""
    out = tmp_path / "out"
    out.mkdir()
    return out
