"""
Unit tests for BM25Scorer.
"""

import math

import pytest
from src.bm25.index_store import Document, IndexStore
from src.bm25.scorer import BM25Scorer, round_score


def build_index(*contents):
    """Index documents d0, d1, ... with the given contents"""
    index = IndexStore()
    index.add_documents([
        Document(id=f"d{i}", content=content, filename=f"d{i}.txt")
        for i, content in enumerate(contents)
    ])
    return index


class TestFormulaParts:
    """Test the individual pieces of the BM25 formula"""

    def test_idf_values(self):
        """Test idf = ln((N - df + 0.5) / (df + 0.5) + 1)"""
        assert BM25Scorer.idf(1, 1) == pytest.approx(math.log(0.5 / 1.5 + 1))
        assert BM25Scorer.idf(1, 10) == pytest.approx(math.log(9.5 / 1.5 + 1))

    def test_idf_positive_for_term_in_every_document(self):
        """Test smoothing keeps idf positive for very common terms"""
        for n in (1, 2, 10, 1000):
            assert BM25Scorer.idf(n, n) > 0

    def test_idf_decreases_with_document_frequency(self):
        """Test rarer terms weigh more"""
        assert BM25Scorer.idf(1, 100) > BM25Scorer.idf(10, 100) > BM25Scorer.idf(90, 100)

    def test_term_score_matches_formula(self):
        """Test term score against a hand computation"""
        scorer = BM25Scorer(k1=1.5, b=0.75)
        idf = 0.5
        tf, dl, avgdl = 3.0, 10, 8.0

        length_norm = 0.25 + 0.75 * (dl / avgdl)
        expected = idf * tf * 2.5 / (tf + 1.5 * length_norm)

        assert scorer.term_score(idf, tf, dl, avgdl) == pytest.approx(expected)

    def test_length_normalization(self):
        """Test that longer documents get penalized"""
        scorer = BM25Scorer(b=0.75)

        score_short = scorer.term_score(1.0, 2.0, 50, 100.0)
        score_long = scorer.term_score(1.0, 2.0, 200, 100.0)

        assert score_short > score_long

    def test_no_length_normalization_when_b_is_zero(self):
        """Test b=0 ignores document length"""
        scorer = BM25Scorer(b=0.0)
        assert scorer.term_score(1.0, 2.0, 50, 100.0) == pytest.approx(scorer.term_score(1.0, 2.0, 500, 100.0))

    def test_term_frequency_saturation(self):
        """Test k1 parameter controls TF saturation"""
        scorer = BM25Scorer(k1=1.5)

        score_low_tf = scorer.term_score(1.0, 1.0, 100, 100.0)
        score_high_tf = scorer.term_score(1.0, 100.0, 100, 100.0)

        # High TF should score higher, but bounded by idf × (k1 + 1)
        assert score_high_tf > score_low_tf
        assert score_high_tf < 2.5
        assert score_high_tf < score_low_tf * 10

    def test_coverage_boost(self):
        """Test score × (1 + matched / total)"""
        assert BM25Scorer.coverage_boost(2.0, 1, 2) == pytest.approx(3.0)
        assert BM25Scorer.coverage_boost(2.0, 2, 2) == pytest.approx(4.0)

    @pytest.mark.parametrize("value,expected", [
        (1.234, 1.23),
        (1.235, 1.24),
        (0.005, 0.01),
        (2.0, 2.0),
        (0.0, 0.0),
    ])
    def test_round_score_half_up(self, value, expected):
        """Test 2-decimal half-up rounding"""
        assert round_score(value) == pytest.approx(expected)


class TestScoring:
    """Test scoring against a live index"""

    def test_single_document_end_to_end(self):
        """Test exact score for a one-document index"""
        index = build_index("alpha beta gamma")
        scores = BM25Scorer().score(["alpha"], index)

        # N=1, df=1, tf=1, dl=avgdl=3 -> lengthNorm=1
        idf = math.log(0.5 / 1.5 + 1)
        term = idf * 1 * 2.5 / (1 + 1.5)
        expected = round_score(term * (1 + 1 / 1))

        assert scores == {"d0": expected}

    def test_zero_score_no_matches(self):
        """Test that documents without query terms are absent"""
        index = build_index("kubernetes deployment", "docker container")
        assert BM25Scorer().score(["nonexistent", "terms"], index) == {}

    def test_empty_query(self):
        """Test handling of empty query"""
        index = build_index("kubernetes deployment")
        assert BM25Scorer().score([], index) == {}

    def test_empty_index(self):
        """Test handling of empty index"""
        assert BM25Scorer().score(["kubernetes"], IndexStore()) == {}

    def test_higher_term_frequency_ranks_first(self):
        """Test five occurrences beat one occurrence in equal-length documents"""
        index = build_index(
            "database database database database database",
            "database storage engine layout tuning",
        )
        ranked = BM25Scorer().rank(["database"], index, limit=10)

        assert [doc_id for doc_id, _ in ranked] == ["d0", "d1"]
        assert ranked[0][1] > ranked[1][1]

    def test_coverage_rewards_matching_more_terms(self):
        """Test document matching {A, B} beats otherwise-identical document matching only A"""
        index = build_index(
            "apple banana filler words",
            "apple cherry filler words",
        )
        scores = BM25Scorer().score(["apple", "banana"], index)

        assert scores["d0"] > scores["d1"] > 0

    def test_duplicate_query_terms_scored_once(self):
        """Test repeating a query term changes nothing"""
        index = build_index("apple banana", "apple cherry", "kiwi")
        scorer = BM25Scorer()

        assert scorer.score(["apple", "apple", "banana"], index) == scorer.score(["apple", "banana"], index)

    def test_zero_length_documents_do_not_break_scoring(self):
        """Test documents without terms count toward N but never score"""
        index = build_index("the of and", "apple pie")
        scores = BM25Scorer().score(["apple"], index)

        assert list(scores) == ["d1"]
        assert scores["d1"] > 0

    def test_rank_tie_break_by_document_id(self):
        """Test equal scores are ordered by document id ascending"""
        index = IndexStore()
        index.add_documents([
            Document(id="b", content="same words here", filename="b.txt"),
            Document(id="a", content="same words here", filename="a.txt"),
            Document(id="c", content="same words here", filename="c.txt"),
        ])
        ranked = BM25Scorer().rank(["words"], index, limit=10)

        assert [doc_id for doc_id, _ in ranked] == ["a", "b", "c"]

    def test_rank_limit(self):
        """Test result cap"""
        index = build_index(*["shared term %d" % i for i in range(30)])
        ranked = BM25Scorer().rank(["shared"], index, limit=5)
        assert len(ranked) == 5

    def test_scores_are_rounded(self):
        """Test every score has at most 2 decimals"""
        index = build_index("apple banana cherry", "banana kiwi", "apple apple mango papaya")
        for score in BM25Scorer().score(["apple", "banana"], index).values():
            assert score == pytest.approx(round(score, 2), abs=1e-9)
