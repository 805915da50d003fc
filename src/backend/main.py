"""
Gita problem search FastAPI application.

Main entry point for the backend API server.
"""

import logging
from typing import Any, Dict
from uuid import UUID

from fastapi import FastAPI, Depends, Query, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database.session import get_db
from database.repositories import ProblemRepository, ShlokProblemRepository
from services.llm_client import LLMClient
from services.problem_matcher import (
    ProblemMatcherError,
    questions_payload,
    resolve_answers,
    tally_votes,
)
from services.response_formatter import format_problem
from services.retrieval import RetrievalRanker, StorageUnavailableError
from services.search_service import SearchService, InvalidQueryError


logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Create FastAPI application
app = FastAPI(
    title="Gita Wisdom Search API",
    description="Problem-based Bhagavad Gita verse search with AI classification and keyword fallback",
    version="0.1.0",
)

# Configure CORS (open, the search endpoint is called from the public site)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Shared by every request, closed on shutdown
llm_client = LLMClient()


# Request models
class SearchRequest(BaseModel):
    """Request model for verse search. query is validated by SearchService."""
    query: Any = None


class MatcherResolveRequest(BaseModel):
    """Request model for resolving a completed problem matcher quiz."""
    answers: Dict[str, int]


# Every error response uses {"error": message}
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


@app.on_event("startup")
async def startup_event():
    """Report which classifier path is available."""
    if llm_client.is_configured(settings.AI_PROVIDER):
        logger.info("AI classifier enabled (%s / %s)", settings.AI_PROVIDER, settings.AI_MODEL)
    else:
        logger.warning("AI classifier not configured, searches will use keyword matching")


@app.on_event("shutdown")
async def shutdown_event():
    """Close the shared LLM client."""
    await llm_client.close()


@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns basic service status.
    """
    return {
        "status": "healthy",
        "service": "gita-search-api",
        "version": "0.1.0"
    }


@app.options("/api/search-shloks")
async def search_shloks_preflight():
    """CORS preflight for clients that send a bare OPTIONS request."""
    return Response(status_code=200, headers={"Access-Control-Allow-Origin": "*"})


@app.post("/api/search-shloks")
async def search_shloks(
    request: SearchRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Free-text verse search.

    Flow:
    1. AI classifier maps the query onto problem categories
    2. On any AI failure, keyword classifier takes over
    3. Verses for the matched categories are ranked by relevance

    Returns:
        JSON response containing:
        - results: Up to SEARCH_RESULT_LIMIT verse summaries
        - guidance: One empathetic sentence

    Errors:
        400 if query is missing, not a string or blank
        500 if the content store cannot be read
    """
    try:
        service = SearchService(db, llm_client=llm_client)
        return await service.search(request.query)

    except InvalidQueryError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except StorageUnavailableError:
        logger.exception("Verse store unavailable during search")
        return JSONResponse(
            status_code=500,
            content={"error": "Unable to load verses right now. Please try again in a moment."}
        )
    except Exception:
        logger.exception("Unexpected error in search endpoint")
        return JSONResponse(
            status_code=500,
            content={"error": "An unexpected error occurred. Please try again."}
        )


@app.get("/api/problems")
async def list_problems(db: AsyncSession = Depends(get_db)):
    """
    List problem categories in display order.

    Returns:
        problems: List of categories
        count: Number of categories
    """
    try:
        problems = await ProblemRepository(db).get_all()
    except SQLAlchemyError:
        logger.exception("Failed to list problems")
        raise HTTPException(status_code=500, detail="Failed to load problem categories")

    return {
        "problems": [format_problem(p) for p in problems],
        "count": len(problems),
    }


@app.get("/api/problems/{slug}")
async def get_problem(slug: str, db: AsyncSession = Depends(get_db)):
    """Get one problem category by slug."""
    try:
        problem = await ProblemRepository(db).get_by_slug(slug)
    except SQLAlchemyError:
        logger.exception("Failed to load problem %s", slug)
        raise HTTPException(status_code=500, detail="Failed to load problem category")

    if not problem:
        raise HTTPException(status_code=404, detail="Problem not found")

    return format_problem(problem)


@app.get("/api/problems/{slug}/shloks")
async def list_problem_shloks(
    slug: str,
    limit: int = Query(20, ge=1, le=100, description="Maximum number of verses to return"),
    db: AsyncSession = Depends(get_db)
):
    """
    Verses linked to one problem category, most relevant first.

    An unknown slug yields an empty list, same as search.
    """
    try:
        results = await RetrievalRanker(db).rank([slug], limit=limit)
    except StorageUnavailableError:
        logger.exception("Verse store unavailable for problem %s", slug)
        raise HTTPException(status_code=500, detail="Unable to load verses right now")

    return {
        "slug": slug,
        "results": results,
        "count": len(results),
    }


@app.get("/api/shloks/{shlok_id}/problems")
async def list_shlok_problems(shlok_id: UUID, db: AsyncSession = Depends(get_db)):
    """Problem tags of a verse, most relevant first."""
    try:
        problems = await ShlokProblemRepository(db).get_problems_for_shlok(shlok_id)
    except SQLAlchemyError:
        logger.exception("Failed to load problems for shlok %s", shlok_id)
        raise HTTPException(status_code=500, detail="Failed to load problem tags")

    return {
        "shlok_id": str(shlok_id),
        "problems": [format_problem(p) for p in problems],
    }


@app.get("/api/problem-matcher/questions")
async def problem_matcher_questions():
    """The static three-question quiz tree."""
    return {"questions": questions_payload()}


@app.post("/api/problem-matcher/resolve")
async def problem_matcher_resolve(request: MatcherResolveRequest):
    """
    Resolve a completed quiz.

    Args:
        request: answers mapping question id -> selected option index

    Returns:
        slug: Winning problem slug
        votes: Vote count per slug
    """
    try:
        state = resolve_answers(request.answers)
    except ProblemMatcherError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "slug": state.match,
        "votes": tally_votes(state.answers),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.SERVICE_HOST,
        port=settings.SERVICE_PORT,
        reload=True,
    )
