"""Domain models used across the application."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Article(BaseModel):
    """A knowledge-base article."""

    id: int
    title: str
    content: str


class Query(BaseModel):
    """A persisted user question."""

    id: int
    query: str
    created_at: datetime


class SearchResult(BaseModel):
    """Outcome of analysing a :class:`Query`."""

    id: int
    query_id: int
    ai_summary_answer: str
    ai_relevant_articles: Optional[List[int]] = None
    created_at: datetime


class AnalysisResult(BaseModel):
    """Summary and relevant article IDs produced by a relevance analyzer."""

    summary: str
    relevant_article_ids: List[int] = Field(default_factory=list)


class SearchRequest(BaseModel):
    query: Optional[str] = None


class SearchResponse(BaseModel):
    query: str
    ai_summary_answer: str
    ai_relevant_articles: List[Article] = Field(default_factory=list)
    query_id: int
    timestamp: datetime


class HealthResponse(BaseModel):
    status: str
    service: str


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
