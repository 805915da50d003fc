"""
Repository pattern for database operations.

Read-side access to the problem taxonomy and verse associations used by the
search pipeline.
"""

from typing import Iterable, List, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from database.models import Problem, Shlok, ShlokProblem


class ProblemRepository:
    """Repository for Problem operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_all(self) -> List[Problem]:
        """Get every problem category in display order."""
        result = await self.session.execute(
            select(Problem).order_by(Problem.display_order.asc().nullslast(), Problem.name)
        )
        return list(result.scalars().all())

    async def get_by_slug(self, slug: str) -> Optional[Problem]:
        """Get a problem category by slug."""
        result = await self.session.execute(
            select(Problem).where(Problem.slug == slug)
        )
        return result.scalar_one_or_none()

    async def get_by_slugs(self, slugs: Iterable[str]) -> List[Problem]:
        """
        Resolve slugs to problem rows.

        Unknown slugs are silently absent from the result.
        """
        slug_list = list(slugs)
        if not slug_list:
            return []

        result = await self.session.execute(
            select(Problem).where(Problem.slug.in_(slug_list))
        )
        return list(result.scalars().all())

    async def create(self, problem: Problem) -> Problem:
        """Create a new problem category."""
        self.session.add(problem)
        await self.session.flush()
        await self.session.refresh(problem)
        return problem


class ShlokProblemRepository:
    """Repository for verse/problem association reads."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_problems(self, problem_ids: Iterable[UUID]) -> List[ShlokProblem]:
        """
        Get all associations for the given problems.

        Each association has its shlok and the shlok's chapter loaded.
        Ordered by relevance score (highest first, NULL scores last).
        """
        id_list = list(problem_ids)
        if not id_list:
            return []

        result = await self.session.execute(
            select(ShlokProblem)
            .options(
                selectinload(ShlokProblem.shlok).selectinload(Shlok.chapter),
            )
            .where(ShlokProblem.problem_id.in_(id_list))
            .order_by(ShlokProblem.relevance_score.desc().nullslast())
        )
        return list(result.scalars().all())

    async def get_problems_for_shlok(self, shlok_id: UUID) -> List[Problem]:
        """Get the problem tags of one verse, most relevant first."""
        result = await self.session.execute(
            select(Problem)
            .join(ShlokProblem, ShlokProblem.problem_id == Problem.id)
            .where(ShlokProblem.shlok_id == shlok_id)
            .order_by(ShlokProblem.relevance_score.desc().nullslast())
        )
        return list(result.scalars().unique().all())
