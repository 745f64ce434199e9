"""Selection pipeline: classify, augment, select, partition."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from tokenpack.augment import ReadText, augment_with_imports
from tokenpack.config import BudgetConfig
from tokenpack.models import Candidate, Dependency, PackPlan
from tokenpack.partition import partition
from tokenpack.priority import classify, compile_patterns
from tokenpack.selection import select_within_budget


def build_plan(
    root: Path,
    candidates: Sequence[Candidate],
    config: BudgetConfig,
    *,
    boost: Sequence[str] = (),
    follow_imports: bool = False,
    read_text: ReadText | None = None,
) -> PackPlan:
    """Run the selection stages over provider output and return the plan.

    Args:
        root: Source directory the candidates were discovered in.
        candidates: Provider output, newest first.
        config: Validated budget settings.
        boost: Glob patterns whose matches are placed first.
        follow_imports: Append files imported by the candidates.
        read_text: Content reader for import scanning.

    Returns:
        An immutable PackPlan.

    Raises:
        EmptySelection: If nothing is admitted.
    """
    ordered = classify(candidates, compile_patterns(boost))

    dependencies: tuple[Dependency, ...] = ()
    if follow_imports:
        kwargs = {} if read_text is None else {"read_text": read_text}
        augmented = augment_with_imports(ordered, root, **kwargs)
        ordered = augmented.candidates
        dependencies = tuple(augmented.dependencies)

    ledger = select_within_budget(ordered, config)
    parts = partition(ledger.admitted, config)

    return PackPlan(
        root=root,
        config=config,
        candidates=tuple(ordered),
        ledger=ledger,
        parts=parts,
        dependencies=dependencies,
    )
