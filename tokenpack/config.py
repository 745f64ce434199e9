"""Budget configuration and option value parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from datetime import datetime
from typing import TYPE_CHECKING

from tokenpack.exceptions import ConfigError

if TYPE_CHECKING:
    from tokenpack.models import Candidate

DEFAULT_OVERFLOW = 3000
DEFAULT_MAX_SIZE = "10M"

_SIZE_RE = re.compile(r"^\s*(\d+)\s*([KMGT]?)(?:i?B)?\s*$", re.IGNORECASE)
_SIZE_UNITS: dict[str, int] = {
    "": 1,
    "K": 1024,
    "M": 1024**2,
    "G": 1024**3,
    "T": 1024**4,
}


@dataclass(frozen=True)
class BudgetConfig:
    """Token budget settings for one run. Zero means unlimited/disabled."""

    max_total_tokens: int = 0
    max_file_tokens: int = 0
    split_tokens: int = 0
    overflow_tolerance: int = DEFAULT_OVERFLOW

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(
                    f"{f.name} must be a non-negative integer, got {value!r}"
                )
            if value < 0:
                raise ConfigError(f"{f.name} must be >= 0, got {value}")

    @classmethod
    def from_values(
        cls,
        *,
        max_total_tokens: object = 0,
        max_file_tokens: object = 0,
        split_tokens: object = 0,
        overflow_tolerance: object = DEFAULT_OVERFLOW,
    ) -> BudgetConfig:
        """Build a config from loosely typed values (ints or numeric strings).

        Raises:
            ConfigError: If any value is non-numeric or negative.
        """
        return cls(
            max_total_tokens=_coerce("max_total_tokens", max_total_tokens),
            max_file_tokens=_coerce("max_file_tokens", max_file_tokens),
            split_tokens=_coerce("split_tokens", split_tokens),
            overflow_tolerance=_coerce("overflow_tolerance", overflow_tolerance),
        )

    @property
    def unlimited(self) -> bool:
        return self.max_total_tokens == 0

    def contribution(self, candidate: Candidate) -> int:
        """Token cost of candidate toward any budget sum (capped if set)."""
        return self.cap(candidate.estimated_tokens)

    def cap(self, tokens: int) -> int:
        if self.max_file_tokens > 0:
            return min(tokens, self.max_file_tokens)
        return tokens


def _coerce(name: str, value: object) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")


def parse_size(text: str) -> int:
    """Parse a byte size with an optional IEC suffix (``512``, ``64K``, ``10M``).

    Raises:
        ConfigError: If text is not a recognised size.
    """
    match = _SIZE_RE.match(text)
    if match is None:
        raise ConfigError(f"invalid size {text!r} (expected e.g. 512, 64K, 10M)")
    number, unit = match.groups()
    return int(number) * _SIZE_UNITS[unit.upper()]


def parse_since(text: str) -> float:
    """Parse an ISO date or datetime into epoch seconds (local time).

    Raises:
        ConfigError: If text is not an ISO date.
    """
    try:
        return datetime.fromisoformat(text).timestamp()
    except ValueError as exc:
        raise ConfigError(f"invalid --since date {text!r}: {exc}") from exc


def split_extensions(values: list[str] | None) -> frozenset[str]:
    """Normalise ``["ts,tsx", ".JSON"]`` into ``{"ts", "tsx", "json"}``."""
    exts: set[str] = set()
    for value in values or []:
        for item in value.split(","):
            item = item.strip().lstrip(".").lower()
            if item:
                exts.add(item)
    return frozenset(exts)
