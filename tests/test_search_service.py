from __future__ import annotations

from typing import Sequence
from unittest.mock import patch

import pytest

from eventinsight.errors import AnalysisError, NotFoundError, PipelineError, StorageError
from eventinsight.models import AnalysisResult, Article
from eventinsight.services.search import SearchService
from eventinsight.storage import SQLStore


class StaticAnalyzer:
    def __init__(self, result: AnalysisResult) -> None:
        self.result = result
        self.calls: list[tuple[str, int]] = []

    def analyze(self, query: str, articles: Sequence[Article]) -> AnalysisResult:
        self.calls.append((query, len(articles)))
        return self.result


class FailingAnalyzer:
    def analyze(self, query: str, articles: Sequence[Article]) -> AnalysisResult:
        raise AnalysisError("upstream unavailable")


def test_process_query_returns_full_articles(service: SearchService, store: SQLStore) -> None:
    response = service.process_query("How do I reset my password?")

    assert "password" in response.ai_summary_answer.lower()
    assert [article.id for article in response.ai_relevant_articles] == [1, 2, 4]
    assert response.ai_relevant_articles[0].title == "Password Reset Instructions"
    assert response.query == "How do I reset my password?"

    stored_query = store.get_query(response.query_id)
    assert stored_query.created_at == response.timestamp

    stored_result = store.get_search_result_for_query(response.query_id)
    assert stored_result.ai_relevant_articles == [1, 2, 4]
    assert stored_result.ai_summary_answer == response.ai_summary_answer


def test_process_query_without_matches(service: SearchService) -> None:
    response = service.process_query("random unrelated question")

    assert response.ai_summary_answer
    assert response.ai_relevant_articles == []


def test_articles_follow_analyzer_order(store: SQLStore) -> None:
    analyzer = StaticAnalyzer(AnalysisResult(summary="s", relevant_article_ids=[6, 2]))
    service = SearchService(store, analyzer)

    response = service.process_query("printer and vpn")

    assert [article.id for article in response.ai_relevant_articles] == [6, 2]
    assert analyzer.calls == [("printer and vpn", 10)]


def test_relevant_article_count_matches_ids(store: SQLStore) -> None:
    ids = [3, 5, 9]
    service = SearchService(store, StaticAnalyzer(AnalysisResult(summary="s", relevant_article_ids=ids)))

    response = service.process_query("anything")

    assert len(response.ai_relevant_articles) == len(ids)
    assert {article.id for article in response.ai_relevant_articles} <= set(ids)


def test_analysis_failure_keeps_query_record(store: SQLStore) -> None:
    service = SearchService(store, FailingAnalyzer())

    with pytest.raises(PipelineError) as excinfo:
        service.process_query("vpn")

    assert excinfo.value.step == "analyze query"
    assert isinstance(excinfo.value.__cause__, AnalysisError)
    assert store.get_query(1).query == "vpn"
    with pytest.raises(NotFoundError):
        store.get_search_result_for_query(1)


@pytest.mark.parametrize(
    ("method", "step"),
    [
        ("create_query", "create query"),
        ("list_articles", "get articles"),
        ("create_search_result", "save search result"),
        ("get_articles_by_ids", "get relevant articles"),
    ],
)
def test_storage_failures_name_the_step(service: SearchService, store: SQLStore, method: str, step: str) -> None:
    with patch.object(store, method, side_effect=StorageError("database is locked")):
        with pytest.raises(PipelineError) as excinfo:
            service.process_query("printer")

    assert excinfo.value.step == step
    assert str(excinfo.value) == f"failed to {step}"


def test_get_article_delegates(service: SearchService) -> None:
    assert service.get_article(6).title == "Printer Connection Issues"
    assert len(service.list_articles()) == 10

    with pytest.raises(NotFoundError):
        service.get_article(404)
