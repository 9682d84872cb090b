"""
In-memory inverted index with incremental, chunked ingestion.

Structures:
- Document registry: document_id -> Document (authoritative "already indexed" check)
- Inverted index: term -> [Posting(document_id, normalized tf), ...] in ingestion order
- Length cache: document_id -> token count (pure function of content)

Ingestion policy:
- Idempotent by id: a document whose id is already registered is skipped,
  never re-indexed and never reported as an error
- Documents that tokenize to nothing are registered with length 0 and no postings
- Batches are processed in fixed-size chunks; progress is reported after each
  chunk and the async variant yields to the event loop between chunks

Not thread-safe: one writer at a time. Callers that share an instance between
concurrent tasks must serialize add/clear themselves.
"""

import asyncio
import copy
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Union

from .index_builder import build_term_statistics

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 100

ProgressCallback = Callable[[float], None]


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Document:
    """Plain-text document as supplied by the ingestion layer"""
    id: str
    content: str
    filename: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Document":
        """
        Build a Document from a {id, content, filename, metadata?} mapping.

        Missing or None text fields become ""; other non-string values are
        converted with str().
        """
        return cls(
            id=str(data["id"]),
            content=_as_text(data.get("content")),
            filename=_as_text(data.get("filename")),
            metadata=dict(data.get("metadata") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "filename": self.filename,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class Posting:
    """Occurrence of a term in one document"""
    document_id: str
    term_frequency: float   # raw count / document length


DocumentLike = Union[Document, Mapping[str, Any]]


class IndexStore:
    """
    Inverted index + document registry.

    Lifecycle: empty -> populated (add_documents*) -> empty again only via clear().
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Args:
            chunk_size: Documents processed between two progress reports / yield points
        """
        assert chunk_size > 0, "chunk_size must be positive"
        self.chunk_size = chunk_size
        self._documents: Dict[str, Document] = {}
        self._index: Dict[str, List[Posting]] = {}
        self._lengths: Dict[str, int] = {}

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._documents

    @property
    def document_count(self) -> int:
        return len(self._documents)

    @property
    def term_count(self) -> int:
        return len(self._index)

    def get_document(self, document_id: str) -> Optional[Document]:
        return self._documents.get(document_id)

    def postings(self, term: str) -> Sequence[Posting]:
        """Postings list for a term (empty if the term was never indexed)."""
        return self._index.get(term, ())

    def document_length(self, document_id: str) -> int:
        return self._lengths.get(document_id, 0)

    def average_document_length(self) -> float:
        """Mean token count over all registered documents (0.0 when empty)."""
        if not self._lengths:
            return 0.0
        return sum(self._lengths.values()) / len(self._lengths)

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def add_documents(
        self,
        documents: Sequence[DocumentLike],
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        """
        Index a batch of documents synchronously.

        Args:
            documents: Documents (or {id, content, filename, metadata?} mappings)
            on_progress: Called with percent complete (0-100] after each chunk;
                values never decrease and the last one is exactly 100
        """
        for _ in self._ingest_chunks(documents, on_progress):
            pass

    async def add_documents_async(
        self,
        documents: Sequence[DocumentLike],
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        """
        Index a batch of documents, yielding to the event loop between chunks.

        Cancelling the awaiting task stops ingestion at the next chunk
        boundary; chunks already processed stay fully indexed.
        """
        for _ in self._ingest_chunks(documents, on_progress):
            await asyncio.sleep(0)

    def clear(self) -> None:
        """Drop every document, posting and cached length."""
        self._documents = {}
        self._index = {}
        self._lengths = {}
        logger.info("Index cleared")

    def _ingest_chunks(
        self,
        documents: Sequence[DocumentLike],
        on_progress: Optional[ProgressCallback],
    ) -> Iterator[float]:
        """Process the batch chunk by chunk, yielding the progress percentage after each."""
        total = len(documents)

        if total == 0:
            if on_progress:
                on_progress(100.0)
            return

        indexed = 0
        skipped = 0
        empty = 0

        for start in range(0, total, self.chunk_size):
            chunk = documents[start:start + self.chunk_size]

            for item in chunk:
                document = item if isinstance(item, Document) else Document.from_dict(item)

                if document.id in self._documents:
                    skipped += 1
                    continue

                if not self._index_document(document):
                    empty += 1
                indexed += 1

            processed = min(start + self.chunk_size, total)
            progress = processed / total * 100
            logger.debug(f"Ingestion progress: {processed}/{total} documents ({progress:.1f}%)")

            if on_progress:
                on_progress(progress)

            yield progress

        logger.info(
            f"Ingested batch of {total}: {indexed} indexed, {skipped} duplicate ids skipped, "
            f"{empty} without terms (index now {len(self._documents)} documents, {len(self._index)} terms)"
        )

    def _index_document(self, document: Document) -> bool:
        """Register one document and append its postings. Returns False if it has no terms."""
        # Own copy: later changes to the caller's metadata must not reach the index
        document = replace(document, metadata=copy.deepcopy(document.metadata))
        stats = build_term_statistics(document.content)

        for term, tf in stats.term_frequencies.items():
            self._index.setdefault(term, []).append(Posting(document.id, tf))

        self._documents[document.id] = document
        self._lengths[document.id] = stats.length

        return not stats.is_empty
