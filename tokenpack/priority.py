"""Boost-pattern classification: matching candidates move to the front."""

from __future__ import annotations

import fnmatch
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from tokenpack.models import Candidate, Origin


@dataclass(frozen=True)
class BoostPattern:
    """A glob pattern compiled once, matched case-sensitively."""

    pattern: str
    regex: re.Pattern[str]

    def matches(self, candidate: Candidate) -> bool:
        """Match against the basename or the full relative path."""
        rel = candidate.rel_path.as_posix()
        return bool(
            self.regex.match(candidate.rel_path.name) or self.regex.match(rel)
        )


def compile_patterns(patterns: Iterable[str]) -> tuple[BoostPattern, ...]:
    """Compile glob-style patterns, skipping blanks and duplicates."""
    compiled: list[BoostPattern] = []
    seen: set[str] = set()
    for raw in patterns:
        pattern = raw.strip()
        if not pattern or pattern in seen:
            continue
        seen.add(pattern)
        compiled.append(BoostPattern(pattern, re.compile(fnmatch.translate(pattern))))
    return tuple(compiled)


def classify(
    candidates: Sequence[Candidate],
    patterns: Sequence[BoostPattern],
) -> list[Candidate]:
    """Stable-partition candidates into boosted-first, then the rest.

    Matching candidates are tagged ``Origin.BOOSTED``. Relative order
    within each group is the input order.
    """
    if not patterns:
        return list(candidates)

    boosted: list[Candidate] = []
    normal: list[Candidate] = []
    for candidate in candidates:
        if any(p.matches(candidate) for p in patterns):
            boosted.append(replace(candidate, origin=Origin.BOOSTED))
        else:
            normal.append(candidate)
    return boosted + normal
