"""Core data structures for tokenpack."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from tokenpack.estimate import estimate_tokens

if TYPE_CHECKING:
    from tokenpack.config import BudgetConfig


class Origin(enum.Enum):
    """How a candidate entered the working set."""

    DIRECT = "direct"
    BOOSTED = "boosted"
    IMPORT = "import"


@dataclass(frozen=True)
class Candidate:
    """A discovered file eligible for inclusion."""

    path: Path
    rel_path: Path
    size_bytes: int
    modified_at: float
    origin: Origin = Origin.DIRECT

    @property
    def estimated_tokens(self) -> int:
        """Token estimate derived from the byte size."""
        return estimate_tokens(self.size_bytes)

    @property
    def extension(self) -> str:
        """Lowercased extension without the dot, or empty string."""
        return self.rel_path.suffix.lstrip(".").lower()


@dataclass(frozen=True)
class SelectionLedger:
    """Outcome of one budget selection scan."""

    admitted: tuple[Candidate, ...] = ()
    total_tokens: int = 0
    skipped: int = 0
    overshoot: int = 0


@dataclass(frozen=True)
class Part:
    """One sealed output batch."""

    index: int
    members: tuple[Candidate, ...]
    total_tokens: int


@dataclass(frozen=True)
class Dependency:
    """An import edge: source refers to target through reference."""

    source: Path
    target: Path
    reference: str


@dataclass(frozen=True)
class PackPlan:
    """The complete selection and partitioning decision for one run."""

    root: Path
    config: BudgetConfig
    candidates: tuple[Candidate, ...]
    ledger: SelectionLedger
    parts: tuple[Part, ...]
    dependencies: tuple[Dependency, ...] = field(default_factory=tuple)

    @property
    def selected(self) -> tuple[Candidate, ...]:
        return self.ledger.admitted

    def part_of(self, candidate: Candidate) -> int | None:
        """Return the 1-based part index holding candidate, if any."""
        for part in self.parts:
            if candidate in part.members:
                return part.index
        return None
