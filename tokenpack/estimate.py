"""Character-count token estimation."""

from __future__ import annotations

CHARS_PER_TOKEN = 4


def estimate_tokens(count: int) -> int:
    """Estimate tokens for a byte or character count as ``ceil(count / 4)``.

    Raises:
        ValueError: If count is negative.
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    return -(-count // CHARS_PER_TOKEN)


def estimate_text(text: str) -> int:
    """Estimate tokens for a string by its UTF-8 length, the unit file sizes use."""
    return estimate_tokens(len(text.encode("utf-8")))


def format_tokens(tokens: int) -> str:
    """Render a token count compactly: ``950``, ``12k``."""
    if tokens >= 1000:
        return f"{tokens // 1000}k"
    return str(tokens)
