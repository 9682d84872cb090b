"""
BM25 (Best Match 25) lexical search over an in-memory inverted index.

Components:
- tokenizer: Text tokenization for term extraction (shared by index and query)
- index_builder: Per-document normalized term frequencies
- index_store: Inverted index, document registry, chunked incremental ingestion
- scorer: BM25 scoring with idf and query coverage boost
- snippet: Query-anchored result snippets

Retrieval is bag-of-words: no stemming, no embeddings.
"""

from .tokenizer import tokenize, STOPWORDS
from .index_builder import build_term_statistics, TermStatistics
from .index_store import Document, IndexStore, Posting
from .scorer import BM25Scorer, round_score
from .snippet import extract_snippet

__all__ = [
    "tokenize",
    "STOPWORDS",
    "build_term_statistics",
    "TermStatistics",
    "Document",
    "IndexStore",
    "Posting",
    "BM25Scorer",
    "round_score",
    "extract_snippet",
]
