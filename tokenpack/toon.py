"""TOON (Token-Oriented Object Notation) manifests for --list and --dry-run."""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from tokenpack.config import BudgetConfig
from tokenpack.models import Candidate, PackPlan

_NEEDS_QUOTING = re.compile(r'[,:"\\{}\[\]]')
_LOOKS_NUMERIC = re.compile(r"^-?(?:0|[1-9]\d*)(?:\.\d+)?$")
_KEYWORDS = frozenset({"true", "false", "null"})


def encode_listing(candidates: Sequence[Candidate], config: BudgetConfig) -> str:
    """Encode a flat file listing with sizes, estimates and mtimes.

    Args:
        candidates: Files to list, in selection order.
        config: Budget settings (for the capped contribution column).

    Returns:
        TOON-formatted string (no trailing newline).
    """
    rows = [
        [
            str(i),
            c.rel_path.as_posix(),
            str(c.size_bytes),
            str(c.estimated_tokens),
            str(config.contribution(c)),
            _format_mtime(c.modified_at),
            c.origin.value,
        ]
        for i, c in enumerate(candidates, start=1)
    ]
    total = sum(config.contribution(c) for c in candidates)
    return "\n".join(
        [
            _format_tabular(
                "files",
                ["n", "path", "size", "tokens", "contribution", "modified", "origin"],
                rows,
            ),
            f"total_files: {len(candidates)}",
            f"total_tokens: {total}",
        ]
    )


def encode_plan(plan: PackPlan) -> str:
    """Encode a full selection plan: budget, files, parts, imports.

    Args:
        plan: The plan to describe.

    Returns:
        TOON-formatted string (no trailing newline).
    """
    config = plan.config
    ledger = plan.ledger
    parts: list[str] = []

    parts.append(f"root: {_encode_value(plan.root.name)}")
    parts.append(
        "budget: "
        f"max_tokens={config.max_total_tokens} "
        f"max_file_tokens={config.max_file_tokens} "
        f"split_tokens={config.split_tokens} "
        f"overflow={config.overflow_tolerance}"
    )
    parts.append(f"candidates: {len(plan.candidates)}")
    parts.append(f"selected: {len(ledger.admitted)}")
    parts.append(f"skipped: {ledger.skipped}")
    parts.append(f"tokens: {ledger.total_tokens}")

    file_rows: list[list[str | bool]] = []
    for c in ledger.admitted:
        part = plan.part_of(c)
        file_rows.append(
            [
                c.rel_path.as_posix(),
                c.origin.value,
                str(c.estimated_tokens),
                str(config.contribution(c)),
                config.max_file_tokens > 0
                and c.estimated_tokens > config.max_file_tokens,
                "" if part is None else str(part),
            ]
        )
    parts.append(
        _format_tabular(
            "files",
            ["path", "origin", "tokens", "contribution", "truncate", "part"],
            file_rows,
        )
    )

    part_rows = [
        [str(p.index), str(len(p.members)), str(p.total_tokens)] for p in plan.parts
    ]
    parts.append(_format_tabular("parts", ["index", "files", "tokens"], part_rows))

    dep_rows = [
        [
            _relative(plan, d.source),
            _relative(plan, d.target),
            d.reference,
        ]
        for d in plan.dependencies
    ]
    parts.append(
        _format_tabular("imports", ["source", "target", "reference"], dep_rows)
    )

    return "\n".join(parts)


def _relative(plan: PackPlan, path: Path) -> str:
    try:
        return path.relative_to(plan.root).as_posix()
    except ValueError:
        return path.as_posix()


def _format_mtime(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def _format_tabular(
    name: str,
    columns: Sequence[str],
    rows: Sequence[Sequence[str | bool]],
) -> str:
    """Format a tabular array in TOON notation.

    Args:
        name: The array field name.
        columns: Column header names.
        rows: Row data; each cell is a string or a bool.

    Returns:
        TOON tabular array string.
    """
    header = f"{name}[{len(rows)}]{{{','.join(columns)}}}:"
    lines = [header]
    for row in rows:
        encoded = [_encode_cell(cell) for cell in row]
        lines.append(f"  {','.join(encoded)}")
    return "\n".join(lines)


def _encode_cell(value: str | bool) -> str:
    # Only real booleans are emitted bare; strings go through quoting.
    if isinstance(value, bool):
        return "true" if value else "false"
    return _encode_value(value)


def _encode_value(value: str) -> str:
    """Encode a single value, quoting if necessary per TOON rules.

    Args:
        value: The raw string value.

    Returns:
        The value, possibly double-quoted with escapes applied.
    """
    if not value:
        return '""'

    if value != value.strip():
        return _quote(value)

    if any(c in value for c in "\n\r\t"):
        return _quote(value)

    if value.lower() in _KEYWORDS:
        return _quote(value)

    if _LOOKS_NUMERIC.match(value):
        return value

    if _NEEDS_QUOTING.search(value):
        return _quote(value)

    if value.startswith("-"):
        return _quote(value)

    return value


def _quote(value: str) -> str:
    """Double-quote a string with TOON escape rules."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    escaped = escaped.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return f'"{escaped}"'
