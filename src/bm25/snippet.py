"""Query-anchored snippet extraction for search results."""

from typing import Sequence

ELLIPSIS = "..."


def extract_snippet(
    content: str,
    query_terms: Sequence[str],
    chars_before: int = 60,
    chars_after: int = 200,
    fallback_chars: int = 150,
) -> str:
    """
    Cut a window of content around the first query term found in it.

    Terms are tried in query order (not relevance order); the first one that
    occurs as a case-insensitive substring anchors the window. The window is
    [position - chars_before, position + chars_after), clipped to the content,
    with "..." added on each side that was cut.

    If no term occurs, the first `fallback_chars` characters plus "..." are returned.

    Examples:
        >>> extract_snippet("The quick brown fox jumps", ["fox"])
        'The quick brown fox jumps'

        >>> extract_snippet("abc", ["zzz"])
        'abc...'
    """
    lowered = content.lower()
    position = -1

    for term in query_terms:
        position = lowered.find(term.lower())
        if position != -1:
            break

    if position == -1:
        return content[:fallback_chars] + ELLIPSIS

    start = max(0, position - chars_before)
    end = min(len(content), position + chars_after)

    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(content) else ""

    return prefix + content[start:end] + suffix
