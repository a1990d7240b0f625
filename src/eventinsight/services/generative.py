"""Relevance analysis backed by the OpenAI Chat Completions API."""

from __future__ import annotations

import logging
import os
import re
from typing import List, Sequence

from openai import OpenAI, OpenAIError

from eventinsight.errors import AnalysisError
from eventinsight.models import AnalysisResult, Article
from eventinsight.services.analysis import filter_known_ids

__all__ = [
    "DEFAULT_MODEL",
    "FALLBACK_SUMMARY",
    "OpenAIAnalyzer",
    "build_articles_context",
    "build_prompt",
    "parse_response",
]

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

SUMMARY_PREFIX = "SUMMARY:"
RELEVANT_PREFIX = "RELEVANT_ARTICLES:"

FALLBACK_SUMMARY = (
    "I found some information that might help you. Please review the relevant articles below, "
    "or contact IT support for further assistance."
)

PROMPT_TEMPLATE = """\
You are an IT support assistant helping users find answers to their technical questions.

{articles_context}

User Query: "{query}"

Please analyze the user's query and provide:

1. SUMMARY: A concise, helpful answer based on the relevant articles above. If no articles are \
relevant, provide general guidance and suggest contacting IT support.

2. RELEVANT_ARTICLES: List the Article IDs (numbers only, comma-separated) of articles that are \
most relevant to answering this query. If no articles are relevant, return "none".

Format your response exactly as follows:
SUMMARY: [Your concise answer here]
RELEVANT_ARTICLES: [comma-separated Article IDs or "none"]

Example:
SUMMARY: To reset your password, go to the login page, click 'Forgot Password', enter your email, \
and follow the instructions sent to your email.
RELEVANT_ARTICLES: 1,3

Now analyze the user's query:"""

_ID_TOKEN_RE = re.compile(r"[+-]?[0-9]+")


def build_articles_context(articles: Sequence[Article]) -> str:
    """Render every article verbatim for inclusion in the prompt."""

    sections = ["Available Knowledge Base Articles:\n\n"]
    for article in articles:
        sections.append(
            f"Article ID: {article.id}\nTitle: {article.title}\nContent: {article.content}\n\n"
        )
    return "".join(sections)


def build_prompt(query: str, articles: Sequence[Article]) -> str:
    return PROMPT_TEMPLATE.format(articles_context=build_articles_context(articles), query=query)


def _parse_ids(raw: str) -> List[int]:
    ids: List[int] = []
    for token in raw.split(","):
        token = token.strip()
        if _ID_TOKEN_RE.fullmatch(token):
            ids.append(int(token))
    return ids


def parse_response(response_text: str, articles: Sequence[Article]) -> AnalysisResult:
    """Extract the summary and relevant IDs from a two-line model answer.

    Lines may appear in any order and among unrelated lines. ``none``, empty
    lists, malformed tokens and IDs outside ``articles`` yield no IDs. A
    missing or empty summary is replaced by :data:`FALLBACK_SUMMARY`.
    """

    summary = ""
    candidate_ids: List[int] = []

    for raw_line in response_text.splitlines():
        line = raw_line.strip()
        if line.startswith(SUMMARY_PREFIX):
            summary = line[len(SUMMARY_PREFIX):].strip()
        elif line.startswith(RELEVANT_PREFIX):
            listed = line[len(RELEVANT_PREFIX):].strip()
            if listed and listed.lower() != "none":
                candidate_ids.extend(_parse_ids(listed))

    return AnalysisResult(
        summary=summary or FALLBACK_SUMMARY,
        relevant_article_ids=filter_known_ids(candidate_ids, articles),
    )


class OpenAIAnalyzer:
    """Analyze queries with a single chat-completion call.

    Args:
        api_key: OpenAI API key (defaults to the OPENAI_API_KEY env var).
        model: Chat model ID.
        client: Pre-built client, mainly for tests. Created lazily otherwise.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        client: OpenAI | None = None,
        temperature: float = 0.3,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._client = client
        self._temperature = temperature

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> OpenAI:
        if self._client is not None:
            return self._client

        api_key = self._api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise AnalysisError("OpenAI API key is required. Set OPENAI_API_KEY.")

        try:
            self._client = OpenAI(api_key=api_key)
        except OpenAIError as exc:
            raise AnalysisError(f"Failed to initialise the OpenAI client: {exc}") from exc

        return self._client

    def analyze(self, query: str, articles: Sequence[Article]) -> AnalysisResult:
        client = self._get_client()
        prompt = build_prompt(query, articles)

        try:
            response = client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
            )
        except OpenAIError as exc:
            raise AnalysisError(f"failed to generate content: {exc}") from exc

        if not response.choices or not response.choices[0].message.content:
            raise AnalysisError("no response generated")

        content = response.choices[0].message.content
        logger.debug("Model answer for %r: %s", query[:100], content)
        return parse_response(content, articles)
