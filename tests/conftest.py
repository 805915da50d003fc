"""
Shared fixtures.

Environment is set before any application module imports settings: a dummy
database password, and no LLM keys so the AI path is disabled unless a test
injects a client.
"""

import os

os.environ.setdefault("POSTGRES_PASSWORD", "test")
os.environ["OPENAI_API_KEY"] = ""
os.environ["ANTHROPIC_API_KEY"] = ""

import uuid

import pytest
from unittest.mock import AsyncMock
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Chapter, Shlok, ShlokProblem, Problem


@pytest.fixture
def mock_db_session():
    """Mock database session."""
    session = AsyncMock(spec=AsyncSession)
    return session


@pytest.fixture
def make_problem():
    """Factory for transient Problem rows."""
    def _make(slug, display_order=1):
        return Problem(
            id=uuid.uuid4(),
            name=slug.replace("-", " ").title(),
            slug=slug,
            description_english=f"About {slug}",
            icon="circle",
            color="#000000",
            display_order=display_order,
        )
    return _make


@pytest.fixture
def make_link():
    """Factory for a verse association with its verse and chapter attached."""
    def _make(score, shlok_id=None, chapter_number=2, verse_number=47, with_chapter=True):
        shlok_id = shlok_id or uuid.uuid4()
        chapter = None
        if with_chapter:
            chapter = Chapter(
                id=uuid.uuid4(),
                chapter_number=chapter_number,
                title_english="Sankhya Yoga",
                theme="Knowledge",
            )
        shlok = Shlok(
            id=shlok_id,
            verse_number=verse_number,
            sanskrit_text="...",
            english_meaning=f"Meaning of {chapter_number}.{verse_number}",
            life_application="Act without attachment to results.",
        )
        shlok.chapter = chapter
        link = ShlokProblem(
            id=uuid.uuid4(),
            shlok_id=shlok_id,
            problem_id=uuid.uuid4(),
            relevance_score=score,
        )
        link.shlok = shlok
        return link
    return _make
