"""Greedy token-budget selection with bounded overshoot."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tokenpack.config import BudgetConfig
from tokenpack.exceptions import EmptySelection
from tokenpack.models import Candidate, SelectionLedger

logger = logging.getLogger(__name__)


def select_within_budget(
    candidates: Sequence[Candidate],
    config: BudgetConfig,
) -> SelectionLedger:
    """Admit candidates in order while the running total fits the budget.

    For each candidate, ``projected = total + contribution``:

    1. Unlimited budget (``max_total_tokens == 0``): admit.
    2. ``projected <= budget``: admit.
    3. ``projected <= budget + overflow_tolerance``: admit (overshoot).
    4. Otherwise skip it and keep scanning; a smaller file later in the
       sequence may still fit.

    The result depends on input order and favours breadth over strict
    adherence to the budget.

    Args:
        candidates: Ordered candidates (boosted first, imports last).
        config: Budget settings.

    Returns:
        The selection ledger.

    Raises:
        EmptySelection: If nothing was admitted.
    """
    budget = config.max_total_tokens
    ceiling = budget + config.overflow_tolerance

    admitted: list[Candidate] = []
    total = 0
    skipped = 0
    overshoot = 0

    for candidate in candidates:
        tokens = config.contribution(candidate)
        projected = total + tokens

        if config.unlimited or projected <= budget:
            admitted.append(candidate)
            total = projected
            logger.debug(
                "+ %s (%d tok, total %d/%d)", candidate.rel_path, tokens, total, budget
            )
        elif projected <= ceiling:
            admitted.append(candidate)
            total = projected
            overshoot += 1
            logger.debug(
                "+ %s (%d tok, overflow ok: %d/%d)",
                candidate.rel_path,
                tokens,
                total,
                budget,
            )
        else:
            skipped += 1
            logger.debug(
                "- skip %s (%d tok would exceed budget by %d)",
                candidate.rel_path,
                tokens,
                projected - budget,
            )

    if not candidates:
        raise EmptySelection("No files matched criteria (0 candidates)")
    if not admitted:
        contributions = [config.contribution(c) for c in candidates]
        raise EmptySelection(
            f"No files fit the token budget: budget={budget}, "
            f"overflow={config.overflow_tolerance}, candidates={len(candidates)}, "
            f"available~{sum(contributions)} tokens, "
            f"smallest={min(contributions)} tokens"
        )

    return SelectionLedger(
        admitted=tuple(admitted),
        total_tokens=total,
        skipped=skipped,
        overshoot=overshoot,
    )
