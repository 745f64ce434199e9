"""Sequential packing of selected files into output parts."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from tokenpack.config import BudgetConfig
from tokenpack.exceptions import EmptySelection
from tokenpack.models import Candidate, Part

logger = logging.getLogger(__name__)


def partition(
    candidates: Sequence[Candidate], config: BudgetConfig
) -> tuple[Part, ...]:
    """Split candidates into ordered, non-empty parts of about split_tokens.

    A part is sealed when adding the next file would push it past
    ``split_tokens``, unless the part is still empty: the first file of a
    part is always accepted, so a single file larger than the limit forms
    a part on its own. Files are never divided between parts.

    Args:
        candidates: Admitted files in emission order.
        config: Budget settings; ``split_tokens == 0`` yields one part.

    Returns:
        Parts numbered from 1 in seal order.

    Raises:
        EmptySelection: If there are no candidates.
    """
    if not candidates:
        raise EmptySelection("Nothing to partition (0 selected files)")

    if config.split_tokens == 0:
        total = sum(config.contribution(c) for c in candidates)
        return (Part(index=1, members=tuple(candidates), total_tokens=total),)

    parts: list[Part] = []
    members: list[Candidate] = []
    part_total = 0

    for candidate in candidates:
        tokens = config.contribution(candidate)
        if members and part_total + tokens > config.split_tokens:
            parts.append(_seal(len(parts) + 1, members, part_total))
            members = []
            part_total = 0
        members.append(candidate)
        part_total += tokens

    parts.append(_seal(len(parts) + 1, members, part_total))
    return tuple(parts)


def _seal(index: int, members: list[Candidate], total: int) -> Part:
    logger.debug("Seal part %d: %d files, %d tok", index, len(members), total)
    return Part(index=index, members=tuple(members), total_tokens=total)


def part_filename(output: Path, index: int) -> Path:
    """Insert ``_part{index}`` before the extension (``.txt`` if none)."""
    suffix = output.suffix or ".txt"
    return output.with_name(f"{output.stem}_part{index}{suffix}")


def part_targets(
    output: Path, parts: Sequence[Part], config: BudgetConfig
) -> list[Path]:
    """Output path for each part.

    Without splitting the single part is written to output itself; with
    splitting every part gets a numbered name, even if only one was needed.
    """
    if config.split_tokens == 0:
        return [output]
    return [part_filename(output, part.index) for part in parts]
