"""
Tokenizer for BM25 text processing.

Tokenization pipeline (shared by indexing and querying):
1. Lowercase conversion
2. Replace everything that is not a-z, 0-9 or whitespace with a space
3. Split on whitespace runs
4. Drop tokens shorter than 2 characters
5. Drop stopwords (common English function words)
6. Return list of terms, duplicates kept (term frequency depends on them)

No stemming: "databases" and "database" are different terms.
"""

import re
from typing import List

# English stopwords.
# Contractions ("isn't", "don't", ...) are not listed: apostrophes are replaced
# before the stopword check, so such entries could never match.
STOPWORDS = frozenset([
    'a', 'about', 'above', 'after', 'again', 'against', 'all', 'am', 'an', 'and', 'any', 'are', 'as', 'at',
    'be', 'because', 'been', 'before', 'being', 'below', 'between', 'both', 'but', 'by',
    'can', 'cannot', 'could', 'did', 'do', 'does', 'doing', 'down', 'during',
    'each', 'few', 'for', 'from', 'further',
    'had', 'has', 'have', 'having', 'he', 'her', 'here', 'hers', 'herself', 'him', 'himself', 'his', 'how',
    'i', 'if', 'in', 'into', 'is', 'it', 'its', 'itself',
    'me', 'more', 'most', 'my', 'myself',
    'no', 'nor', 'not', 'of', 'off', 'on', 'once', 'only', 'or', 'other', 'ought', 'our', 'ours',
    'ourselves', 'out', 'over', 'own',
    'same', 'she', 'should', 'so', 'some', 'such',
    'than', 'that', 'the', 'their', 'theirs', 'them', 'themselves', 'then', 'there', 'these', 'they',
    'this', 'those', 'through', 'to', 'too',
    'under', 'until', 'up', 'very',
    'was', 'we', 'were', 'what', 'when', 'where', 'which', 'while', 'who', 'whom', 'why', 'with', 'would',
    'you', 'your', 'yours', 'yourself', 'yourselves',
])

MIN_TOKEN_LENGTH = 2

_NON_TERM_CHARS = re.compile(r'[^a-z0-9\s]')


def tokenize(text: str) -> List[str]:
    """
    Tokenize text into index terms.

    The same function is used for documents and queries, so a query term
    matches exactly the terms produced at indexing time.

    Args:
        text: Input text to tokenize

    Returns:
        List of lowercase terms in document order (duplicates retained)

    Examples:
        >>> tokenize("The quick brown fox jumps!")
        ['quick', 'brown', 'fox', 'jumps']

        >>> tokenize("Revenue grew 12% in 2023")
        ['revenue', 'grew', '12', '2023']

        >>> tokenize("It's a test")
        ['test']

        >>> tokenize("   ")
        []
    """
    if not text:
        return []

    text = _NON_TERM_CHARS.sub(' ', text.lower())

    return [
        token for token in text.split()
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOPWORDS
    ]
