"""
Search engine facade: ingestion, querying and text analysis over one collection.

Each SearchEngine owns its own index; there is no shared module-level instance.
Lifecycle: create -> ingest* -> query* -> clear?

Concurrency: queries are read-only and may run concurrently with each other,
but not with ingest/clear. The HTTP layer serializes writers with a lock.
"""

import copy
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from . import config
from .bm25.index_store import Document, DocumentLike, IndexStore, ProgressCallback
from .bm25.scorer import BM25Scorer
from .bm25.snippet import extract_snippet
from .bm25.tokenizer import tokenize
from .nlp.metadata_extractor import analyze

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """Single ranked document"""
    document_id: str
    filename: str
    score: float            # BM25 × coverage boost, 2 decimals
    snippet: str            # Content window around the first matching query term
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document_id": self.document_id,
            "filename": self.filename,
            "score": self.score,
            "snippet": self.snippet,
            "metadata": self.metadata,
        }


class SearchEngine:
    """
    Incremental BM25 search over plain-text documents.

    Duplicate policy: documents are idempotent by id. Ingesting an id that is
    already indexed is a silent no-op, even if the content differs.
    """

    def __init__(
        self,
        k1: float = config.BM25_K1,
        b: float = config.BM25_B,
        chunk_size: int = config.INGEST_CHUNK_SIZE,
        default_limit: int = config.DEFAULT_SEARCH_LIMIT,
        snippet_window: Tuple[int, int, int] = (
            config.SNIPPET_CHARS_BEFORE,
            config.SNIPPET_CHARS_AFTER,
            config.SNIPPET_FALLBACK_CHARS,
        ),
    ):
        """
        Args:
            k1: BM25 term frequency saturation
            b: BM25 length normalization strength
            chunk_size: Documents per ingestion chunk
            default_limit: Result cap when query() gets no limit
            snippet_window: (chars before match, chars after match, fallback length)
        """
        self.index = IndexStore(chunk_size=chunk_size)
        self.scorer = BM25Scorer(k1=k1, b=b)
        self.default_limit = default_limit
        self.snippet_window = snippet_window

    def __len__(self) -> int:
        return len(self.index)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self.index

    # Ingestion

    def ingest(self, documents: Sequence[DocumentLike], on_progress: Optional[ProgressCallback] = None) -> None:
        """Index a batch synchronously (see IndexStore.add_documents)."""
        self.index.add_documents(documents, on_progress)

    async def ingest_async(
        self,
        documents: Sequence[DocumentLike],
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        """Index a batch, yielding to the event loop after every chunk."""
        await self.index.add_documents_async(documents, on_progress)

    def clear(self) -> None:
        self.index.clear()

    # Query

    def query(self, text: str, limit: Optional[int] = None) -> List[SearchResult]:
        """
        Rank documents for a free-text query.

        Args:
            text: Query text (tokenized exactly like documents)
            limit: Maximum number of results (default: engine default_limit)

        Returns:
            Results sorted by score descending, then document id ascending.
            Empty if the query has no terms or the index is empty.
        """
        if limit is None:
            limit = self.default_limit

        query_terms = tokenize(text)
        if not query_terms:
            logger.debug("Query has no index terms, returning no results")
            return []

        if len(self.index) == 0:
            logger.debug("Index is empty, returning no results")
            return []

        ranked = self.scorer.rank(query_terms, self.index, limit)

        results = []
        for document_id, score in ranked:
            document = self.index.get_document(document_id)
            assert document is not None, f"Posting references unknown document {document_id}"

            results.append(SearchResult(
                document_id=document.id,
                filename=document.filename,
                score=score,
                snippet=extract_snippet(document.content, query_terms, *self.snippet_window),
                metadata=copy.deepcopy(document.metadata),
            ))

        logger.debug(f"Query {text!r}: {len(query_terms)} terms, {len(results)} results")
        return results

    # Lookups / analysis

    def has_document(self, document_id: str) -> bool:
        return document_id in self.index

    def get_document(self, document_id: str) -> Optional[Document]:
        """Copy of an indexed document (None if the id is unknown)."""
        document = self.index.get_document(document_id)
        if document is None:
            return None
        return replace(document, metadata=copy.deepcopy(document.metadata))

    @staticmethod
    def analyze_text(text: str) -> Dict[str, List[str]]:
        """Entities (≤10) and topics (≤5) for a text, independent of the index."""
        return analyze(text)

    def stats(self) -> Dict[str, Any]:
        return {
            "documents": self.index.document_count,
            "terms": self.index.term_count,
            "average_document_length": round(self.index.average_document_length(), 2),
        }
