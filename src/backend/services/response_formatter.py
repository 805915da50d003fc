"""
Response Formatter for search and problem endpoints.

Converts ORM rows into the JSON shapes the frontend consumes.
"""

from typing import Dict, Any, List
from database.models import Problem, Shlok


def format_shlok_summary(shlok: Shlok) -> Dict[str, Any]:
    """
    Format a verse as a search result item.

    Args:
        shlok: Shlok model instance with its chapter loaded

    Returns:
        Dict containing:
            - id: Verse UUID as string
            - chapter_number: Chapter number (1 if the chapter is missing)
            - verse_number: Verse number within the chapter
            - english_meaning: Short meaning text
            - life_application: Optional life application text
    """
    chapter = shlok.chapter
    return {
        "id": str(shlok.id),
        "chapter_number": chapter.chapter_number if chapter is not None else 1,
        "verse_number": shlok.verse_number,
        "english_meaning": shlok.english_meaning,
        "life_application": shlok.life_application,
    }


def format_problem(problem: Problem) -> Dict[str, Any]:
    """Format a problem category for listings and problem tags."""
    return {
        "id": str(problem.id),
        "name": problem.name,
        "slug": problem.slug,
        "description": problem.description_english,
        "icon": problem.icon,
        "color": problem.color,
        "display_order": problem.display_order,
    }


def format_search_response(results: List[Dict[str, Any]], guidance: str) -> Dict[str, Any]:
    """Uniform search payload, identical for the AI and keyword paths."""
    return {
        "results": results,
        "guidance": guidance,
    }
