"""Emission of a plan's parts to disk, guarded by the write-target check."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from tokenpack.estimate import estimate_text
from tokenpack.exceptions import (
    ConfigError,
    OutputWriteError,
    PartialReadError,
    SafetyViolation,
)
from tokenpack.models import Candidate, PackPlan, Part
from tokenpack.partition import part_targets
from tokenpack.render import EmittedFile, OutputFormat, RenderContext, render_part
from tokenpack.truncate import truncate_content

logger = logging.getLogger(__name__)

ReadText = Callable[[Path], str]


def _read_utf8(path: Path) -> str:
    # Bytes in, so CRLF line endings keep the size the selector counted.
    return path.read_bytes().decode("utf-8", errors="replace")


@dataclass(frozen=True)
class PartReport:
    """What was actually written for one part."""

    index: int
    path: Path
    files: int
    tokens: int
    size_bytes: int
    truncated: int


@dataclass
class EmitResult:
    """Per-run totals accumulated while writing parts."""

    parts: list[PartReport] = field(default_factory=list)
    errors: list[PartialReadError] = field(default_factory=list)

    @property
    def files(self) -> int:
        return sum(p.files for p in self.parts)

    @property
    def tokens(self) -> int:
        return sum(p.tokens for p in self.parts)

    @property
    def size_bytes(self) -> int:
        return sum(p.size_bytes for p in self.parts)

    @property
    def truncated(self) -> int:
        return sum(p.truncated for p in self.parts)


def check_output_safety(root: Path, targets: Sequence[Path]) -> None:
    """Verify every output target lies outside the source tree.

    Must run before the first byte of output is written. Targets are
    resolved in full, so a symlinked output pointing into the tree is
    rejected too.

    Raises:
        ConfigError: If a target's directory does not exist.
        SafetyViolation: If a target resolves inside root.
    """
    source = root.resolve()
    for target in targets:
        parent = target.parent.resolve()
        if not parent.is_dir():
            raise ConfigError(f"Output directory not found: {target.parent}")
        resolved = target.resolve()
        if resolved.is_relative_to(source):
            raise SafetyViolation(resolved, source)


def emit_file(
    candidate: Candidate,
    max_file_tokens: int,
    read_text: ReadText | None = None,
) -> tuple[EmittedFile, PartialReadError | None]:
    """Read and truncate one file; unreadable files become a placeholder."""
    try:
        content = (read_text or _read_utf8)(candidate.path)
    except OSError as exc:
        error = PartialReadError(candidate.rel_path, exc.strerror or str(exc))
        placeholder = f"[Error reading file: {error.reason}]"
        file = EmittedFile(
            candidate, placeholder, estimate_text(placeholder), read_error=True
        )
        return file, error
    cut = truncate_content(content, max_file_tokens)
    return EmittedFile(candidate, cut.text, cut.tokens, truncated=cut.truncated), None


def write_parts(
    plan: PackPlan,
    output: Path,
    fmt: OutputFormat = OutputFormat.TEXT,
    *,
    line_numbers: bool = False,
    read_text: ReadText | None = None,
    now: datetime | None = None,
) -> EmitResult:
    """Render and write every part of plan.

    The safety check covers all targets before anything is written. Read
    failures are absorbed: the file is emitted as a placeholder, counted,
    and reported in ``EmitResult.errors``.

    Raises:
        SafetyViolation: If any target resolves inside the source tree.
        ConfigError: If the output directory is missing.
        OutputWriteError: If a part file cannot be written.
    """
    targets = part_targets(output, plan.parts, plan.config)
    check_output_safety(plan.root, targets)

    generated = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    split = plan.config.split_tokens > 0
    result = EmitResult()

    for part, target in zip(plan.parts, targets):
        emitted = _emit_part(part, plan.config.max_file_tokens, read_text, result)
        context = RenderContext(
            source=plan.root,
            generated=generated,
            part=part.index if split else None,
            line_numbers=line_numbers,
        )
        text = render_part(fmt, emitted, context)
        try:
            target.write_text(text, encoding="utf-8", newline="")
        except OSError as exc:
            raise OutputWriteError(target, exc.strerror or str(exc)) from exc
        report = PartReport(
            index=part.index,
            path=target,
            files=len(emitted),
            tokens=sum(f.tokens for f in emitted),
            size_bytes=len(text.encode("utf-8")),
            truncated=sum(1 for f in emitted if f.truncated),
        )
        result.parts.append(report)
        logger.debug(
            "Wrote part %d to %s (%d files, %d tok)",
            report.index,
            target,
            report.files,
            report.tokens,
        )
    return result


def _emit_part(
    part: Part,
    max_file_tokens: int,
    read_text: ReadText | None,
    result: EmitResult,
) -> list[EmittedFile]:
    emitted: list[EmittedFile] = []
    for candidate in part.members:
        file, error = emit_file(candidate, max_file_tokens, read_text)
        if error is not None:
            logger.debug("Read failed: %s", error)
            result.errors.append(error)
        emitted.append(file)
    return emitted
