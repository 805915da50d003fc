"""
Unit tests for the Retrieval Ranker.

Repositories are patched; association rows are transient model instances.
"""

import uuid

import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy.exc import SQLAlchemyError

from services.retrieval import RetrievalRanker, StorageUnavailableError, order_and_dedupe


@pytest.fixture
def mock_repos():
    """Patch both repositories used by the ranker."""
    with patch('services.retrieval.ProblemRepository') as mock_problem_repo_class, \
            patch('services.retrieval.ShlokProblemRepository') as mock_link_repo_class:
        problem_repo = AsyncMock()
        link_repo = AsyncMock()
        mock_problem_repo_class.return_value = problem_repo
        mock_link_repo_class.return_value = link_repo
        yield problem_repo, link_repo


class TestOrderAndDedupe:
    """Test order_and_dedupe."""

    def test_sorted_descending(self, make_link):
        """Associations should be ordered by relevance score, highest first."""
        links = [make_link(0.2), make_link(0.9), make_link(0.5)]
        ordered = order_and_dedupe(links, limit=5)
        assert [l.relevance_score for l in ordered] == [0.9, 0.5, 0.2]

    def test_keeps_highest_scored_duplicate(self, make_link):
        """Duplicate verses should keep only the highest-scored association."""
        shared = uuid.uuid4()
        low = make_link(0.3, shlok_id=shared)
        high = make_link(0.8, shlok_id=shared)
        other = make_link(0.5)

        ordered = order_and_dedupe([low, other, high], limit=5)

        assert ordered == [high, other]

    def test_null_scores_rank_last(self, make_link):
        """Associations without a score should sort after scored ones."""
        unscored = make_link(None)
        scored = make_link(0.1)
        assert order_and_dedupe([unscored, scored], limit=5) == [scored, unscored]

    def test_truncates_after_dedupe(self, make_link):
        """The limit should apply to distinct verses."""
        shared = uuid.uuid4()
        links = [make_link(1.0, shlok_id=shared), make_link(0.9, shlok_id=shared)]
        links += [make_link(0.5 - i * 0.01) for i in range(10)]

        ordered = order_and_dedupe(links, limit=5)

        assert len(ordered) == 5
        assert len({l.shlok_id for l in ordered}) == 5

    def test_skips_missing_shlok(self, make_link):
        """Associations whose verse is missing should be skipped."""
        orphan = make_link(0.9)
        orphan.shlok = None
        kept = make_link(0.1)
        assert order_and_dedupe([orphan, kept], limit=5) == [kept]


class TestRank:
    """Test RetrievalRanker.rank."""

    @pytest.mark.asyncio
    async def test_rank_returns_formatted_results(self, mock_db_session, mock_repos, make_problem, make_link):
        """rank should return formatted verse summaries in score order."""
        problem_repo, link_repo = mock_repos
        anxiety = make_problem("anxiety")
        problem_repo.get_by_slugs.return_value = [anxiety]
        best = make_link(0.95, chapter_number=2, verse_number=47)
        link_repo.get_for_problems.return_value = [make_link(0.4), best]

        ranker = RetrievalRanker(mock_db_session)
        results = await ranker.rank(["anxiety"], limit=5)

        problem_repo.get_by_slugs.assert_called_once_with(["anxiety"])
        link_repo.get_for_problems.assert_called_once_with([anxiety.id])
        assert len(results) == 2
        assert results[0] == {
            "id": str(best.shlok_id),
            "chapter_number": 2,
            "verse_number": 47,
            "english_meaning": "Meaning of 2.47",
            "life_application": "Act without attachment to results.",
        }

    @pytest.mark.asyncio
    async def test_rank_never_repeats_verses(self, mock_db_session, mock_repos, make_problem, make_link):
        """A verse tagged with several matched problems should appear once."""
        problem_repo, link_repo = mock_repos
        problem_repo.get_by_slugs.return_value = [make_problem("anxiety"), make_problem("fear")]
        shared = uuid.uuid4()
        link_repo.get_for_problems.return_value = [
            make_link(0.9, shlok_id=shared),
            make_link(0.7, shlok_id=shared),
            make_link(0.6),
        ]

        ranker = RetrievalRanker(mock_db_session)
        results = await ranker.rank(["anxiety", "fear"])

        ids = [r["id"] for r in results]
        assert len(ids) == len(set(ids)) == 2

    @pytest.mark.asyncio
    async def test_default_limit_is_five(self, mock_db_session, mock_repos, make_problem, make_link):
        """rank without a limit should return at most five verses."""
        problem_repo, link_repo = mock_repos
        problem_repo.get_by_slugs.return_value = [make_problem("anxiety")]
        link_repo.get_for_problems.return_value = [make_link(i / 10) for i in range(8)]

        ranker = RetrievalRanker(mock_db_session)
        results = await ranker.rank(["anxiety"])

        assert len(results) == 5

    @pytest.mark.asyncio
    async def test_missing_chapter_defaults_to_one(self, mock_db_session, mock_repos, make_problem, make_link):
        """A verse without a loaded chapter should report chapter 1."""
        problem_repo, link_repo = mock_repos
        problem_repo.get_by_slugs.return_value = [make_problem("anger")]
        link_repo.get_for_problems.return_value = [make_link(0.5, with_chapter=False)]

        ranker = RetrievalRanker(mock_db_session)
        results = await ranker.rank(["anger"])

        assert results[0]["chapter_number"] == 1

    @pytest.mark.asyncio
    async def test_unknown_slugs_return_empty(self, mock_db_session, mock_repos):
        """Slugs with no stored problem should yield no results."""
        problem_repo, link_repo = mock_repos
        problem_repo.get_by_slugs.return_value = []

        ranker = RetrievalRanker(mock_db_session)
        results = await ranker.rank(["unknown_slug"])

        assert results == []
        link_repo.get_for_problems.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_slugs_skip_storage(self, mock_db_session, mock_repos):
        """An empty slug list should return [] without querying storage."""
        problem_repo, link_repo = mock_repos

        ranker = RetrievalRanker(mock_db_session)
        results = await ranker.rank([])

        assert results == []
        problem_repo.get_by_slugs.assert_not_called()

    @pytest.mark.asyncio
    async def test_storage_failure_raises(self, mock_db_session, mock_repos, make_problem):
        """Database errors should be raised as StorageUnavailableError."""
        problem_repo, link_repo = mock_repos
        problem_repo.get_by_slugs.return_value = [make_problem("fear")]
        link_repo.get_for_problems.side_effect = SQLAlchemyError("connection refused")

        ranker = RetrievalRanker(mock_db_session)
        with pytest.raises(StorageUnavailableError):
            await ranker.rank(["fear"])
