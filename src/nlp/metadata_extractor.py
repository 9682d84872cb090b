"""
Rule-based document metadata extraction (entities + topics).

Runs once per document at ingestion time; the result is stored in the
document metadata and never recomputed.

Entities (max 10, discovery order, deduplicated):
1. Email addresses
2. Years 1900-2099
3. Capitalized words (^[A-Z][a-z]+$, > 2 chars after stripping punctuation)
   that are not common words

Capitalized-word detection has no notion of sentences: "Contact" at the start
of a sentence is reported just like "Apple". This is a known limitation of
the heuristic, not something to patch with sentence splitting.

Topics (max 5): most frequent lowercase terms longer than 3 characters,
common words excluded, ties kept in first-occurrence order.
"""

import re
from collections import Counter
from typing import Dict, List

MAX_ENTITIES = 10
MAX_TOPICS = 5

# Common words filtered out of entities and topics (not the tokenizer stopword list)
COMMON_WORDS = frozenset([
    'the', 'be', 'to', 'of', 'and', 'a', 'in', 'that', 'have', 'i', 'it', 'for', 'not', 'on', 'with', 'he',
    'as', 'you', 'do', 'at', 'this', 'but', 'his', 'by', 'from', 'they', 'we', 'say', 'her', 'she', 'or',
    'an', 'will', 'my', 'one', 'all', 'would', 'there', 'their', 'what', 'so', 'up', 'out', 'if', 'about',
    'who', 'get', 'which', 'go', 'me', 'when', 'make', 'can', 'like', 'time', 'no', 'just', 'him', 'know',
    'take', 'people', 'into', 'year', 'your', 'good', 'some', 'could', 'them', 'see', 'other', 'than',
    'then', 'now', 'look', 'only', 'come', 'its', 'over', 'think', 'also', 'back', 'after', 'use', 'two',
    'how', 'our', 'work', 'first', 'well', 'way', 'even', 'new', 'want', 'because', 'any', 'these', 'give',
    'day', 'most', 'us', 'is', 'are', 'was', 'were', 'has', 'had', 'been',
    'introduction', 'conclusion', 'chapter', 'page', 'fig', 'figure', 'table',
])

EMAIL_PATTERN = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')
YEAR_PATTERN = re.compile(r'\b(?:19|20)\d{2}\b', re.ASCII)  # ASCII digits and word boundaries only
CAPITALIZED_PATTERN = re.compile(r'^[A-Z][a-z]+$')

_NON_ALNUM = re.compile(r'[^a-zA-Z0-9]')
_NON_TERM_CHARS = re.compile(r'[^a-z0-9\s]')


def extract_entities(text: str) -> List[str]:
    """
    Extract candidate named entities.

    Examples:
        >>> extract_entities("Apple reported strong revenue in 2023. Contact: sales@apple.com")
        ['sales@apple.com', '2023', 'Apple', 'Contact']
    """
    # dict as an insertion-ordered set
    entities: Dict[str, None] = {}

    for match in EMAIL_PATTERN.finditer(text):
        entities[match.group(0)] = None

    for match in YEAR_PATTERN.finditer(text):
        entities[match.group(0)] = None

    for raw_word in text.split():
        word = _NON_ALNUM.sub('', raw_word)
        if len(word) > 2 and CAPITALIZED_PATTERN.match(word) and word.lower() not in COMMON_WORDS:
            entities[word] = None

    return list(entities)[:MAX_ENTITIES]


def extract_topics(text: str) -> List[str]:
    """
    Extract key topics by raw term frequency.

    Examples:
        >>> extract_topics("Database tuning. The database index and database cache.")
        ['database', 'tuning', 'index', 'cache']
    """
    tokens = [
        token for token in _NON_TERM_CHARS.sub(' ', text.lower()).split()
        if len(token) > 3 and token not in COMMON_WORDS
    ]

    # most_common keeps first-seen order among equal counts
    return [term for term, _count in Counter(tokens).most_common(MAX_TOPICS)]


def analyze(text: str) -> Dict[str, List[str]]:
    """
    Extract entities and topics from document text.

    Args:
        text: Plain document text

    Returns:
        Dict with:
            "entities": List[str] (at most 10)
            "topics": List[str] (at most 5)
    """
    return {
        "entities": extract_entities(text),
        "topics": extract_topics(text),
    }
