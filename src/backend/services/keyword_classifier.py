"""
Keyword classifier used when AI classification is unavailable.

Maps free text to problem slugs by substring matching against each taxonomy
category's trigger keywords. Deterministic and never returns an empty list.
"""

from typing import List

from database.seeds.problem_taxonomy import PROBLEM_TAXONOMY, DEFAULT_PROBLEM_SLUG


def classify_keywords(text: str) -> List[str]:
    """
    Classify text into problem slugs.

    Args:
        text: Arbitrary user text, any length, any case

    Returns:
        Matched slugs in canonical taxonomy order, or [DEFAULT_PROBLEM_SLUG]
        when no keyword occurs in the text
    """
    lowered = (text or "").lower()

    matched = [
        category["slug"]
        for category in PROBLEM_TAXONOMY
        if any(keyword in lowered for keyword in category["keywords"])
    ]

    if not matched:
        matched.append(DEFAULT_PROBLEM_SLUG)

    return matched
