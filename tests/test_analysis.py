from __future__ import annotations

from typing import List

import pytest

from eventinsight.config import (
    MATCHED_SUMMARY,
    NO_MATCH_SUMMARY,
    PASSWORD_SUMMARY,
    VPN_SUMMARY,
    ArticleCatalog,
    HeuristicRules,
    SummaryRule,
)
from eventinsight.models import Article
from eventinsight.services.analysis import KeywordAnalyzer, filter_known_ids


@pytest.fixture
def catalog() -> List[Article]:
    seed = ArticleCatalog.from_file()
    return [
        Article(id=index, title=entry.title, content=entry.content)
        for index, entry in enumerate(seed.articles, start=1)
    ]


def test_password_question_matches_password_article(catalog: List[Article]) -> None:
    result = KeywordAnalyzer().analyze("How do I reset my password?", catalog)

    assert "password" in result.summary.lower()
    assert result.summary == PASSWORD_SUMMARY
    assert 1 in result.relevant_article_ids
    # Email troubleshooting and VPN setup also mention passwords.
    assert result.relevant_article_ids == [1, 2, 4]


def test_unrelated_question_has_no_matches(catalog: List[Article]) -> None:
    result = KeywordAnalyzer().analyze("random unrelated question", catalog)

    assert result.summary == NO_MATCH_SUMMARY
    assert result.relevant_article_ids == []


def test_analysis_is_deterministic(catalog: List[Article]) -> None:
    analyzer = KeywordAnalyzer()
    query = "My VPN and remote desktop are broken"

    results = [analyzer.analyze(query, catalog) for _ in range(5)]

    assert all(result == results[0] for result in results)


def test_summary_precedence_prefers_password_over_vpn(catalog: List[Article]) -> None:
    result = KeywordAnalyzer().analyze("VPN asks for my PASSWORD", catalog)

    assert result.summary == PASSWORD_SUMMARY


def test_vpn_summary_and_articles(catalog: List[Article]) -> None:
    result = KeywordAnalyzer().analyze("Cannot connect to VPN", catalog)

    assert result.summary == VPN_SUMMARY
    # The remote desktop article tells external users to connect to the VPN first.
    assert result.relevant_article_ids == [2, 8]


def test_keyword_without_canned_summary_uses_matched_message(catalog: List[Article]) -> None:
    result = KeywordAnalyzer().analyze("Where are my backup files?", catalog)

    assert result.summary == MATCHED_SUMMARY
    assert result.relevant_article_ids == [10]


def test_each_article_is_listed_once(catalog: List[Article]) -> None:
    result = KeywordAnalyzer().analyze("antivirus software", catalog)

    assert result.relevant_article_ids == [3, 9]


def test_empty_article_set() -> None:
    result = KeywordAnalyzer().analyze("password", [])

    assert result.summary == PASSWORD_SUMMARY
    assert result.relevant_article_ids == []


def test_custom_rules_replace_cascade() -> None:
    rules = HeuristicRules(
        keywords=["wifi"],
        summaries=[SummaryRule(keyword="wifi", summary="Join CorpNet.")],
        matched_summary="matched",
        no_match_summary="nothing",
    )
    articles = [
        Article(id=7, title="Wireless", content="Connect to WiFi named CorpNet."),
        Article(id=8, title="Password", content="Reset it."),
    ]

    analyzer = KeywordAnalyzer(rules)

    assert analyzer.analyze("wifi is down", articles).relevant_article_ids == [7]
    assert analyzer.analyze("wifi is down", articles).summary == "Join CorpNet."
    assert analyzer.analyze("password", articles).summary == "nothing"


def test_filter_known_ids_drops_unknown_and_repeated() -> None:
    articles = [Article(id=1, title="a", content="a"), Article(id=3, title="c", content="c")]

    assert filter_known_ids([3, 99, 1, 3], articles) == [3, 1]
    assert filter_known_ids([], articles) == []
