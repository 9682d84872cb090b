"""
Unit tests for result snippet extraction.
"""

from src.bm25.snippet import extract_snippet


class TestSnippet:
    """Test window placement and ellipsis rules"""

    def test_short_content_returned_whole(self):
        """Test window covering the whole content has no ellipsis"""
        snippet = extract_snippet("The quick brown fox jumps", ["fox"])
        assert snippet == "The quick brown fox jumps"
        assert "fox" in snippet

    def test_window_bounds(self):
        """Test 60 chars before and 200 chars after the match"""
        content = "a" * 100 + "needle" + "b" * 300
        snippet = extract_snippet(content, ["needle"])

        assert snippet.startswith("...")
        assert snippet.endswith("...")
        body = snippet[3:-3]
        assert body == content[40:300]
        assert len(body) == 260
        assert body.index("needle") == 60

    def test_match_near_start_has_no_prefix(self):
        content = "needle " + "x" * 400
        snippet = extract_snippet(content, ["needle"])

        assert not snippet.startswith("...")
        assert snippet == content[:200] + "..."

    def test_match_near_end_has_no_suffix(self):
        content = "x" * 400 + " needle"
        snippet = extract_snippet(content, ["needle"])

        assert snippet == "..." + content[341:]
        assert not snippet.endswith("...")

    def test_case_insensitive_match(self):
        snippet = extract_snippet("Revenue grew in 2023", ["revenue"])
        assert snippet == "Revenue grew in 2023"

    def test_first_query_term_wins(self):
        """Test terms are tried in query order, not by position in content"""
        content = "alpha " + "x" * 100 + " omega " + "y" * 300
        snippet = extract_snippet(content, ["omega", "alpha"])

        assert snippet.startswith("...")
        assert "omega" in snippet
        assert "alpha" not in snippet

    def test_falls_through_to_later_terms(self):
        snippet = extract_snippet("only beta here", ["missing", "beta"])
        assert snippet == "only beta here"

    def test_substring_match(self):
        """Test matching is substring based ("data" matches inside "database")"""
        content = "z" * 100 + "database"
        snippet = extract_snippet(content, ["data"])
        assert snippet == "..." + content[40:]

    def test_no_match_fallback(self):
        """Test first 150 chars plus ellipsis when no term occurs"""
        content = "w" * 500
        assert extract_snippet(content, ["zzz"]) == "w" * 150 + "..."

    def test_no_match_short_content(self):
        """Test fallback always appends the ellipsis"""
        assert extract_snippet("short", ["zzz"]) == "short..."

    def test_custom_window(self):
        content = "0123456789needle0123456789"
        snippet = extract_snippet(content, ["needle"], chars_before=5, chars_after=8)
        assert snippet == "...56789needle01..."

    def test_never_exceeds_content(self):
        content = "The quick brown fox jumps"
        snippet = extract_snippet(content, ["fox"])
        assert len(snippet.replace("...", "")) <= len(content)
