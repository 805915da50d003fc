"""
Retrieval Ranker.

Turns a set of problem slugs into an ordered, de-duplicated list of verse
summaries using stored relevance scores.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database.models import ShlokProblem
from database.repositories import ProblemRepository, ShlokProblemRepository
from services.response_formatter import format_shlok_summary

logger = logging.getLogger(__name__)


class StorageUnavailableError(Exception):
    """Raised when the content store cannot be read."""
    pass


def _score(link: ShlokProblem) -> float:
    return link.relevance_score if link.relevance_score is not None else float("-inf")


def order_and_dedupe(links: List[ShlokProblem], limit: int) -> List[ShlokProblem]:
    """
    Order associations by relevance (highest first) and keep one per verse.

    The sort is stable, so equal scores keep storage order. Associations whose
    verse is missing are skipped.
    """
    ordered = sorted(links, key=_score, reverse=True)

    seen = set()
    unique: List[ShlokProblem] = []
    for link in ordered:
        if link.shlok is None or link.shlok_id in seen:
            continue
        seen.add(link.shlok_id)
        unique.append(link)
        if len(unique) >= limit:
            break

    return unique


class RetrievalRanker:
    """Ranks verses for matched problem categories."""

    def __init__(self, db_session: AsyncSession):
        """Initialize with database session."""
        self.problem_repo = ProblemRepository(db_session)
        self.link_repo = ShlokProblemRepository(db_session)

    async def rank(self, slugs: Iterable[str], limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Rank verses associated with the given problem slugs.

        Args:
            slugs: Problem slugs; unknown slugs are ignored
            limit: Maximum number of results (defaults to SEARCH_RESULT_LIMIT)

        Returns:
            Verse summaries ordered by relevance, no verse repeated. Empty when
            no slug resolves to a stored problem.

        Raises:
            StorageUnavailableError: If the database read fails
        """
        if limit is None:
            limit = settings.SEARCH_RESULT_LIMIT

        slug_list = list(slugs)
        if not slug_list or limit <= 0:
            return []

        try:
            problems = await self.problem_repo.get_by_slugs(slug_list)
            if not problems:
                logger.info("No stored problems for slugs %s", slug_list)
                return []

            links = await self.link_repo.get_for_problems([p.id for p in problems])
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Failed to read verse associations: {str(e)}")

        return [format_shlok_summary(link.shlok) for link in order_and_dedupe(links, limit)]
