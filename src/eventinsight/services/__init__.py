"""Service layer entry points for Event-to-Insight."""

from __future__ import annotations

from .analysis import KeywordAnalyzer, RelevanceAnalyzer, filter_known_ids  # noqa: F401
from .factory import create_analyzer, create_search_service  # noqa: F401
from .generative import OpenAIAnalyzer  # noqa: F401
from .search import SearchService  # noqa: F401

__all__ = [
    "KeywordAnalyzer",
    "OpenAIAnalyzer",
    "RelevanceAnalyzer",
    "SearchService",
    "create_analyzer",
    "create_search_service",
    "filter_known_ids",
]
