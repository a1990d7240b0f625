"""Tests for the OpenAI-backed analyzer and its response parser."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, List

import pytest
from openai import OpenAIError

from eventinsight.errors import AnalysisError
from eventinsight.models import Article
from eventinsight.services.generative import (
    FALLBACK_SUMMARY,
    OpenAIAnalyzer,
    build_prompt,
    parse_response,
)

ARTICLES = [
    Article(id=1, title="Password Reset Instructions", content="Click 'Forgot Password'."),
    Article(id=2, title="VPN Connection Setup", content="Download the VPN client."),
    Article(id=3, title="Email Configuration", content="IMAP: mail.company.com"),
]


class FakeCompletions:
    def __init__(self, content: str | None = None, error: Exception | None = None, choices: bool = True) -> None:
        self.content = content
        self.error = error
        self.choices = choices
        self.calls: List[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if not self.choices:
            return SimpleNamespace(choices=[])
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


def _client(completions: FakeCompletions) -> Any:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_prompt_embeds_articles_and_query() -> None:
    prompt = build_prompt('My "VPN" drops', ARTICLES)

    assert "Article ID: 2\nTitle: VPN Connection Setup\nContent: Download the VPN client.\n" in prompt
    assert 'User Query: "My "VPN" drops"' in prompt
    assert "SUMMARY: [Your concise answer here]" in prompt
    assert 'RELEVANT_ARTICLES: [comma-separated Article IDs or "none"]' in prompt


def test_parse_two_line_answer() -> None:
    result = parse_response("SUMMARY: Reset it from the login page.\nRELEVANT_ARTICLES: 1,3", ARTICLES)

    assert result.summary == "Reset it from the login page."
    assert result.relevant_article_ids == [1, 3]


def test_parse_tolerates_order_and_surrounding_lines() -> None:
    text = "Sure, here you go:\n\n  RELEVANT_ARTICLES: 2 \n  SUMMARY: Use the VPN client.  \nThanks!"

    result = parse_response(text, ARTICLES)

    assert result.summary == "Use the VPN client."
    assert result.relevant_article_ids == [2]


@pytest.mark.parametrize("listed", ["none", "", "None"])
def test_parse_no_relevant_articles(listed: str) -> None:
    result = parse_response(f"SUMMARY: Contact IT.\nRELEVANT_ARTICLES: {listed}", ARTICLES)

    assert result.relevant_article_ids == []


def test_parse_skips_malformed_and_unknown_ids() -> None:
    result = parse_response("SUMMARY: ok\nRELEVANT_ARTICLES: 3, abc, 99, 1.5, , 2, 3", ARTICLES)

    assert result.relevant_article_ids == [3, 2]


def test_parse_missing_summary_uses_fallback() -> None:
    assert parse_response("RELEVANT_ARTICLES: 1", ARTICLES).summary == FALLBACK_SUMMARY
    assert parse_response("SUMMARY:   \nRELEVANT_ARTICLES: 1", ARTICLES).summary == FALLBACK_SUMMARY
    assert parse_response("", ARTICLES).relevant_article_ids == []


def test_analyze_sends_one_request() -> None:
    completions = FakeCompletions(content="SUMMARY: Use the VPN client.\nRELEVANT_ARTICLES: 2, 7")
    analyzer = OpenAIAnalyzer(client=_client(completions), model="gpt-test")

    result = analyzer.analyze("vpn help", ARTICLES)

    assert result.summary == "Use the VPN client."
    assert result.relevant_article_ids == [2]
    assert len(completions.calls) == 1
    call = completions.calls[0]
    assert call["model"] == "gpt-test"
    assert call["messages"][0]["role"] == "user"
    assert "vpn help" in call["messages"][0]["content"]


def test_analyze_wraps_api_errors_without_retry() -> None:
    completions = FakeCompletions(error=OpenAIError("connection reset"))
    analyzer = OpenAIAnalyzer(client=_client(completions))

    with pytest.raises(AnalysisError, match="failed to generate content"):
        analyzer.analyze("vpn", ARTICLES)

    assert len(completions.calls) == 1


@pytest.mark.parametrize(
    "completions",
    [FakeCompletions(choices=False), FakeCompletions(content=""), FakeCompletions(content=None)],
)
def test_analyze_rejects_empty_responses(completions: FakeCompletions) -> None:
    analyzer = OpenAIAnalyzer(client=_client(completions))

    with pytest.raises(AnalysisError, match="no response generated"):
        analyzer.analyze("vpn", ARTICLES)


def test_missing_api_key_raises_analysis_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    analyzer = OpenAIAnalyzer()

    with pytest.raises(AnalysisError, match="API key is required"):
        analyzer.analyze("vpn", ARTICLES)
