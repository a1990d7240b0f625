"""API routes exposing the helpdesk search pipeline and the article catalog."""

from __future__ import annotations

import logging
import re
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from eventinsight.config import SERVICE_NAME
from eventinsight.errors import NotFoundError, PipelineError, StorageError
from eventinsight.models import Article, ErrorResponse, HealthResponse, SearchRequest, SearchResponse
from eventinsight.services.search import SearchService

logger = logging.getLogger(__name__)

router = APIRouter()

_ARTICLE_ID_RE = re.compile(r"[+-]?[0-9]+")
_MIN_ARTICLE_ID = -(2**63)
_MAX_ARTICLE_ID = 2**63 - 1


def get_search_service(request: Request) -> SearchService:
    """Return the service attached to the application by ``create_app``."""

    return request.app.state.search_service


SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]


def api_error(status_code: int, error: str, message: str | None = None) -> HTTPException:
    """Build an :class:`HTTPException` carrying the ``{error, message?}`` body."""

    payload = ErrorResponse(error=error, message=message or None)
    return HTTPException(status_code=status_code, detail=payload.model_dump(exclude_none=True))


def _parse_article_id(raw: str) -> int:
    # SQLite integers are signed 64-bit; the length cap keeps int() under its digit limit.
    if len(raw) > 20 or not _ARTICLE_ID_RE.fullmatch(raw):
        raise api_error(400, "Invalid article ID")
    article_id = int(raw)
    if not _MIN_ARTICLE_ID <= article_id <= _MAX_ARTICLE_ID:
        raise api_error(400, "Invalid article ID")
    return article_id


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report that the service is up."""

    return HealthResponse(status="healthy", service=SERVICE_NAME)


@router.post("/search-query", response_model=SearchResponse)
async def search_query(payload: SearchRequest, service: SearchServiceDep) -> SearchResponse:
    """Answer a support question and return the matching articles."""

    query_text = payload.query
    if query_text is None or not query_text.strip():
        raise api_error(400, "Query is required")

    logger.info("Processing search query: %s", query_text[:100])

    try:
        return await run_in_threadpool(service.process_query, query_text)
    except PipelineError as exc:
        logger.exception("Search pipeline failed")
        raise api_error(500, "Failed to process search query", str(exc)) from exc


@router.get("/articles", response_model=List[Article])
async def list_articles(service: SearchServiceDep) -> List[Article]:
    """Return every knowledge-base article ordered by ID."""

    try:
        return await run_in_threadpool(service.list_articles)
    except StorageError as exc:
        logger.exception("Failed to list articles")
        raise api_error(500, "Failed to get articles", "failed to list articles") from exc


@router.get("/articles/{article_id}", response_model=Article)
async def get_article(article_id: str, service: SearchServiceDep) -> Article:
    """Return a single article by ID."""

    parsed_id = _parse_article_id(article_id)

    try:
        return await run_in_threadpool(service.get_article, parsed_id)
    except NotFoundError as exc:
        raise api_error(404, "Article not found") from exc
    except StorageError as exc:
        logger.exception("Failed to load article %d", parsed_id)
        raise api_error(500, "Failed to get article", "failed to get article") from exc
