"""
Search orchestration for free-text problem queries.

Composes AI classification, keyword fallback and retrieval ranking into one
uniform response: {"results": [...], "guidance": "..."}.

Flow (explicit state machine):
    ATTEMPT_AI --ok, categories--> RANK
    ATTEMPT_AI --failure / no usable categories--> ATTEMPT_FALLBACK
    ATTEMPT_FALLBACK --always--> RANK
    RANK --> DONE

AI problems never reach the caller. Storage failures do.
"""

import enum
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from services.ai_classifier import ProblemClassifier, ClassificationError
from services.keyword_classifier import classify_keywords
from services.llm_client import LLMClient
from services.response_formatter import format_search_response
from services.retrieval import RetrievalRanker

logger = logging.getLogger(__name__)

FALLBACK_GUIDANCE = "Here are some verses that might help with what you're going through."
NO_MATCH_GUIDANCE = (
    "I understand you're going through something difficult. "
    "Let me help you find relevant wisdom."
)


class SearchError(Exception):
    """Base exception for search errors."""
    pass


class InvalidQueryError(SearchError):
    """Raised when the query is missing, not a string, or blank."""
    pass


class SearchState(str, enum.Enum):
    """States of a single search run."""
    ATTEMPT_AI = "attempt_ai"
    ATTEMPT_FALLBACK = "attempt_fallback"
    RANK = "rank"
    DONE = "done"


def validate_query(query: Any) -> str:
    """Return the trimmed query or raise InvalidQueryError."""
    if not isinstance(query, str):
        raise InvalidQueryError("Query is required")

    trimmed = query.strip()
    if not trimmed:
        raise InvalidQueryError("Query cannot be empty")

    return trimmed


class SearchService:
    """
    Stateless per-request search orchestrator.

    Classifier and ranker can be injected; by default they are built from the
    request's database session and the given (usually app-wide) LLM client.
    """

    def __init__(
        self,
        db_session: Optional[AsyncSession] = None,
        classifier: Optional[ProblemClassifier] = None,
        ranker: Optional[RetrievalRanker] = None,
        result_limit: Optional[int] = None,
        llm_client: Optional[LLMClient] = None
    ):
        self.classifier = classifier or ProblemClassifier(llm_client or LLMClient())
        self.ranker = ranker or RetrievalRanker(db_session)
        self.result_limit = result_limit or settings.SEARCH_RESULT_LIMIT

    async def search(self, query: Any) -> Dict[str, Any]:
        """
        Find verses for a free-text problem description.

        Returns:
            Dict containing:
                - results: Ranked verse summaries (possibly empty)
                - guidance: Non-empty guidance sentence

        Raises:
            InvalidQueryError: Query missing or blank (no AI call, no storage read)
            StorageUnavailableError: Content store could not be read
        """
        text = validate_query(query)

        state = SearchState.ATTEMPT_AI
        slugs: List[str] = []
        ai_guidance = ""
        results: List[Dict[str, Any]] = []

        while state is not SearchState.DONE:
            if state is SearchState.ATTEMPT_AI:
                try:
                    classification = await self.classifier.classify(text)
                except ClassificationError as e:
                    logger.warning("AI classification failed, using keyword fallback: %s", e)
                    state = SearchState.ATTEMPT_FALLBACK
                    continue

                ai_guidance = classification.guidance
                if classification.categories:
                    slugs = classification.categories
                    state = SearchState.RANK
                else:
                    logger.info("AI returned no known categories, using keyword fallback")
                    state = SearchState.ATTEMPT_FALLBACK

            elif state is SearchState.ATTEMPT_FALLBACK:
                slugs = classify_keywords(text)
                state = SearchState.RANK

            elif state is SearchState.RANK:
                results = await self.ranker.rank(slugs, self.result_limit)
                state = SearchState.DONE

        logger.info("Search matched %s -> %d result(s)", slugs, len(results))
        return format_search_response(results, self._pick_guidance(ai_guidance, results))

    @staticmethod
    def _pick_guidance(ai_guidance: str, results: List[Dict[str, Any]]) -> str:
        if ai_guidance:
            return ai_guidance
        return FALLBACK_GUIDANCE if results else NO_MATCH_GUIDANCE
