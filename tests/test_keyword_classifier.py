"""
Unit tests for the keyword fallback classifier.
"""

import pytest

from services.keyword_classifier import classify_keywords
from database.seeds.problem_taxonomy import DEFAULT_PROBLEM_SLUG, TAXONOMY_SLUGS


class TestClassifyKeywords:
    """Test classify_keywords."""

    def test_matches_anxiety(self):
        """An explicit mention of anxiety should map to the anxiety category."""
        assert classify_keywords("I'm struggling with anxiety") == ["anxiety"]

    def test_case_insensitive(self):
        """Keyword matching should ignore case."""
        assert classify_keywords("I FEEL SO ANXIOUS") == ["anxiety"]

    def test_multiple_categories_in_taxonomy_order(self):
        """Several matches should come back in canonical taxonomy order."""
        result = classify_keywords("My boss makes me angry and I can't decide what to do")
        assert result == ["leadership", "anger", "decision-making"]

    def test_substring_matching(self):
        """Keywords should match inside longer words."""
        # "friendship" contains "friend"
        assert "relationships" in classify_keywords("my friendship is falling apart")

    @pytest.mark.parametrize("text", ["xyzzy quux", "", "   ", "12345"])
    def test_no_match_defaults(self, text):
        """Text with no keywords should fall back to the default category."""
        assert classify_keywords(text) == [DEFAULT_PROBLEM_SLUG]

    def test_results_are_unique_known_slugs(self):
        """Repeated triggers should yield one known slug."""
        result = classify_keywords("scared, afraid, fear, dread and terrified")
        assert result == ["fear"]
        assert all(slug in TAXONOMY_SLUGS for slug in result)

    def test_deterministic(self):
        """The same text should always classify the same way."""
        text = "worried about my family and my team"
        assert classify_keywords(text) == classify_keywords(text)
