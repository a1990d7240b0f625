"""Relevance analysis: the analyzer interface and the keyword heuristic."""

from __future__ import annotations

from typing import Iterable, List, Protocol, Sequence

from eventinsight.config import HeuristicRules
from eventinsight.models import AnalysisResult, Article

__all__ = ["KeywordAnalyzer", "RelevanceAnalyzer", "filter_known_ids"]


class RelevanceAnalyzer(Protocol):
    """Interface for mapping a query and the article set to an answer."""

    def analyze(self, query: str, articles: Sequence[Article]) -> AnalysisResult: ...


def filter_known_ids(candidate_ids: Iterable[int], articles: Sequence[Article]) -> List[int]:
    """Keep the IDs present in ``articles``, first occurrence only, in input order."""

    known = {article.id for article in articles}
    kept: List[int] = []
    for article_id in candidate_ids:
        if article_id in known and article_id not in kept:
            kept.append(article_id)
    return kept


class KeywordAnalyzer:
    """Deterministic analyzer matching topic keywords by substring containment.

    An article is relevant when any configured keyword occurs both in the
    lower-cased query and in the article's title and content. The summary is
    the first rule in ``rules.summaries`` whose keyword occurs in the query,
    falling back to a generic message that depends on whether anything
    matched.
    """

    def __init__(self, rules: HeuristicRules | None = None) -> None:
        self._rules = rules or HeuristicRules()

    @property
    def rules(self) -> HeuristicRules:
        return self._rules

    def analyze(self, query: str, articles: Sequence[Article]) -> AnalysisResult:
        lowered = query.lower()
        query_keywords = [keyword for keyword in self._rules.keywords if keyword in lowered]

        relevant: List[int] = []
        for article in articles:
            haystack = f"{article.title} {article.content}".lower()
            if any(keyword in haystack for keyword in query_keywords):
                relevant.append(article.id)

        return AnalysisResult(
            summary=self._choose_summary(lowered, matched=bool(relevant)),
            relevant_article_ids=filter_known_ids(relevant, articles),
        )

    def _choose_summary(self, lowered_query: str, *, matched: bool) -> str:
        for rule in self._rules.summaries:
            if rule.keyword in lowered_query:
                return rule.summary
        if matched:
            return self._rules.matched_summary
        return self._rules.no_match_summary
