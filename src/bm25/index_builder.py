"""
BM25 index builder - per-document term statistics.

Turns one document's text into the numbers the inverted index stores:
normalized term frequencies plus the document length in tokens.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict

from .tokenizer import tokenize

logger = logging.getLogger(__name__)


@dataclass
class TermStatistics:
    """Term statistics for a single document"""
    length: int                                         # Total token count
    term_frequencies: Dict[str, float] = field(default_factory=dict)  # term -> count / length

    @property
    def is_empty(self) -> bool:
        return self.length == 0


def build_term_statistics(text: str) -> TermStatistics:
    """
    Build normalized term frequencies for one document.

    Normalized TF = raw count / total token count. A document that tokenizes
    to nothing has length 0 and no term frequencies (it contributes no
    postings).

    Args:
        text: Raw document content

    Returns:
        TermStatistics with length and {term: normalized_tf}

    Example:
        >>> stats = build_term_statistics("pod deployment pod configuration")
        >>> stats.length
        4
        >>> stats.term_frequencies
        {'pod': 0.5, 'deployment': 0.25, 'configuration': 0.25}
    """
    tokens = tokenize(text)
    length = len(tokens)

    if length == 0:
        return TermStatistics(length=0)

    # Counter keeps first-occurrence order of terms
    counts = Counter(tokens)
    term_frequencies = {term: count / length for term, count in counts.items()}

    logger.debug(f"Built term statistics: {len(term_frequencies)} unique terms from {length} tokens")

    return TermStatistics(length=length, term_frequencies=term_frequencies)
