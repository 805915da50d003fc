"""
Seed script for the problems table.

Inserts every taxonomy category that is not in the database yet. Existing rows
are left alone: slugs are immutable and display fields may have been edited by
an administrator.
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Problem
from database.repositories import ProblemRepository
from database.seeds.problem_taxonomy import PROBLEM_TAXONOMY

logger = logging.getLogger(__name__)


async def seed_problems(session: AsyncSession) -> int:
    """
    Create missing taxonomy categories.

    Returns:
        Number of problems created
    """
    repo = ProblemRepository(session)
    created = 0

    for category in PROBLEM_TAXONOMY:
        existing = await repo.get_by_slug(category["slug"])
        if existing:
            logger.info("Problem '%s' already present, skipping", category["slug"])
            continue

        problem = Problem(
            name=category["name"],
            slug=category["slug"],
            description_english=category["description"].capitalize(),
            icon=category["icon"],
            color=category["color"],
            display_order=category["display_order"],
        )
        await repo.create(problem)
        created += 1
        logger.info("Created problem '%s'", category["slug"])

    await session.commit()
    return created


async def main():
    from database.session import AsyncSessionFactory

    async with AsyncSessionFactory() as session:
        created = await seed_problems(session)
    logger.info("Seeded %d problem categories", created)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    asyncio.run(main())
