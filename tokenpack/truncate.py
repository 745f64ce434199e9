"""Per-file truncation applied when content is emitted."""

from __future__ import annotations

import re
from dataclasses import dataclass

from tokenpack.estimate import CHARS_PER_TOKEN, estimate_text

_MARKER = "\n\n[... TRUNCATED at ~{cap} tokens (original: ~{original} tokens) ...]"
_MARKER_RE = re.compile(
    r"\n\n\[\.\.\. TRUNCATED at ~(\d+) tokens \(original: ~(\d+) tokens\) \.\.\.\]\Z"
)


@dataclass(frozen=True)
class TruncatedContent:
    """Content as it will be written, with its reported token count."""

    text: str
    truncated: bool
    original_tokens: int
    tokens: int


def truncation_marker(cap: int, original_tokens: int) -> str:
    return _MARKER.format(cap=cap, original=original_tokens)


def truncate_content(content: str, max_file_tokens: int) -> TruncatedContent:
    """Cut content to ``max_file_tokens * 4`` UTF-8 bytes and append a marker.

    Content within the cap, or any content when the cap is 0, passes
    through unchanged. Content already truncated at the same cap is
    returned as is, so truncation is idempotent.

    Args:
        content: Full file content.
        max_file_tokens: Per-file cap; 0 disables truncation.

    Returns:
        The content to emit and the token count to report for it.
    """
    original = estimate_text(content)
    if max_file_tokens == 0 or original <= max_file_tokens:
        return TruncatedContent(content, False, original, original)

    limit = max_file_tokens * CHARS_PER_TOKEN
    encoded = content.encode("utf-8")
    existing = _MARKER_RE.search(content)
    if existing and int(existing.group(1)) == max_file_tokens:
        if len(content[: existing.start()].encode("utf-8")) <= limit:
            return TruncatedContent(
                content, True, int(existing.group(2)), max_file_tokens
            )

    # A multi-byte character straddling the limit is dropped whole.
    head = encoded[:limit].decode("utf-8", errors="ignore")
    text = head + truncation_marker(max_file_tokens, original)
    return TruncatedContent(text, True, original, max_file_tokens)
