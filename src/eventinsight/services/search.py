"""Search orchestration combining storage and relevance analysis."""

from __future__ import annotations

import logging
from typing import List

from eventinsight.errors import PipelineError
from eventinsight.models import Article, SearchResponse
from eventinsight.services.analysis import RelevanceAnalyzer
from eventinsight.storage.base import ArticleStore

__all__ = ["SearchService"]

logger = logging.getLogger(__name__)


class SearchService:
    """Process support questions and serve knowledge-base articles."""

    def __init__(self, store: ArticleStore, analyzer: RelevanceAnalyzer) -> None:
        self._store = store
        self._analyzer = analyzer

    @property
    def store(self) -> ArticleStore:
        return self._store

    @property
    def analyzer(self) -> RelevanceAnalyzer:
        return self._analyzer

    def process_query(self, query_text: str) -> SearchResponse:
        """Record ``query_text``, analyze it and return the assembled answer.

        Each step raises :class:`PipelineError` naming the step on failure.
        Records written by earlier steps are kept.
        """

        try:
            query = self._store.create_query(query_text)
        except Exception as exc:
            raise PipelineError("create query") from exc

        try:
            articles = self._store.list_articles()
        except Exception as exc:
            raise PipelineError("get articles") from exc

        try:
            analysis = self._analyzer.analyze(query_text, articles)
        except Exception as exc:
            raise PipelineError("analyze query") from exc

        try:
            self._store.create_search_result(query.id, analysis.summary, analysis.relevant_article_ids)
        except Exception as exc:
            raise PipelineError("save search result") from exc

        try:
            found = self._store.get_articles_by_ids(analysis.relevant_article_ids)
        except Exception as exc:
            raise PipelineError("get relevant articles") from exc

        by_id = {article.id: article for article in found}
        relevant: List[Article] = [by_id[i] for i in analysis.relevant_article_ids if i in by_id]

        logger.info(
            "Query %d answered with %d relevant article(s)", query.id, len(relevant)
        )

        return SearchResponse(
            query=query_text,
            ai_summary_answer=analysis.summary,
            ai_relevant_articles=relevant,
            query_id=query.id,
            timestamp=query.created_at,
        )

    def get_article(self, article_id: int) -> Article:
        return self._store.get_article(article_id)

    def list_articles(self) -> List[Article]:
        return self._store.list_articles()
