"""
BM25 scorer with query coverage boost.

BM25 (Best Match 25) is a probabilistic ranking function used for information retrieval.
Statistics (N, document frequency, average length) come from the live index and
are recomputed for every query, since they change as documents are added.

Formula:
    idf(term)        = ln((N - df + 0.5) / (df + 0.5) + 1)
    lengthNorm(doc)  = (1 - b) + b × dl/avgdl
    score(term, doc) = idf × tf × (k1 + 1) / (tf + k1 × lengthNorm)

Where:
    N     = number of documents in the index
    df    = number of documents containing the term
    tf    = raw term count in the document (normalized tf × dl)
    dl    = document length (number of tokens)
    avgdl = mean document length over the index
    k1    = term frequency saturation parameter (default: 1.5)
    b     = length normalization parameter (default: 0.75)

The "+1" inside the logarithm keeps idf positive even for terms found in
every document.

Coverage boost (applied once per document, after summing term scores):
    final = score × (1 + matched distinct query terms / distinct query terms)
"""

import logging
import math
from typing import Dict, List, Sequence, Set, Tuple

from .index_store import IndexStore

logger = logging.getLogger(__name__)


def round_score(score: float) -> float:
    """Round half-up to 2 decimal places."""
    return math.floor(score * 100 + 0.5) / 100


class BM25Scorer:
    """
    BM25 scoring against an IndexStore.

    Stateless between calls: all corpus statistics are read from the index
    at query time.
    """

    def __init__(self, k1: float = 1.5, b: float = 0.75):
        """
        Initialize BM25 scorer.

        Args:
            k1: Term frequency saturation parameter
                Higher = more weight to repeated terms
                Default: 1.5

            b: Length normalization parameter
                Higher = more penalty for long documents
                Range: 0.0 - 1.0
                Default: 0.75
        """
        self.k1 = k1
        self.b = b

    @staticmethod
    def idf(document_frequency: int, document_count: int) -> float:
        return math.log((document_count - document_frequency + 0.5) / (document_frequency + 0.5) + 1)

    def term_score(self, idf: float, term_frequency: float, document_length: int, average_length: float) -> float:
        """
        BM25 contribution of one term to one document.

        Args:
            idf: Inverse document frequency of the term
            term_frequency: Raw count of the term in the document
            document_length: Token count of the document
            average_length: Mean token count over the index

        Returns:
            Non-negative term score
        """
        length_norm = (1 - self.b) + self.b * (document_length / average_length)
        return idf * term_frequency * (self.k1 + 1) / (term_frequency + self.k1 * length_norm)

    @staticmethod
    def coverage_boost(score: float, matched_terms: int, query_terms: int) -> float:
        """Multiply score by (1 + coverage), coverage = matched / total distinct query terms."""
        coverage = matched_terms / query_terms
        return score * (1 + coverage)

    def score(self, query_terms: Sequence[str], index: IndexStore) -> Dict[str, float]:
        """
        Score every document matching at least one query term.

        Args:
            query_terms: Tokenized query (duplicates are scored once)
            index: Index to score against

        Returns:
            {document_id: rounded final score} for documents with a nonzero score
        """
        distinct_terms = list(dict.fromkeys(query_terms))
        document_count = index.document_count

        if not distinct_terms or document_count == 0:
            return {}

        average_length = index.average_document_length()

        scores: Dict[str, float] = {}
        matched: Dict[str, Set[str]] = {}

        for term in distinct_terms:
            postings = index.postings(term)
            if not postings:
                continue

            idf = self.idf(len(postings), document_count)

            for posting in postings:
                document_length = index.document_length(posting.document_id)
                term_frequency = posting.term_frequency * document_length

                scores[posting.document_id] = scores.get(posting.document_id, 0.0) + self.term_score(
                    idf, term_frequency, document_length, average_length
                )
                matched.setdefault(posting.document_id, set()).add(term)

        return {
            document_id: round_score(
                self.coverage_boost(score, len(matched[document_id]), len(distinct_terms))
            )
            for document_id, score in scores.items()
            if score > 0
        }

    def rank(self, query_terms: Sequence[str], index: IndexStore, limit: int) -> List[Tuple[str, float]]:
        """
        Score, sort and cap.

        Order: score descending, ties broken by document id ascending.

        Returns:
            Up to `limit` (document_id, score) pairs
        """
        scores = self.score(query_terms, index)
        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))

        logger.debug(f"BM25 ranked {len(ranked)} documents for {len(query_terms)} query terms")

        return ranked[:max(limit, 0)]
