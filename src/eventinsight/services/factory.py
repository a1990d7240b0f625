"""Build the storage and analysis components from an :class:`AppConfig`."""

from __future__ import annotations

import logging

from eventinsight.config import AppConfig
from eventinsight.services.analysis import KeywordAnalyzer, RelevanceAnalyzer
from eventinsight.services.generative import OpenAIAnalyzer
from eventinsight.services.search import SearchService
from eventinsight.storage import SQLStore

__all__ = ["create_analyzer", "create_search_service"]

logger = logging.getLogger(__name__)


def create_analyzer(config: AppConfig) -> RelevanceAnalyzer:
    """Return the analyzer selected by ``config``.

    The keyword analyzer is used unless mock analysis is disabled and an
    OpenAI key is configured.
    """

    if config.use_generative:
        logger.info("Using OpenAI analyzer (model %s)", config.openai_model)
        return OpenAIAnalyzer(api_key=config.openai_api_key, model=config.openai_model)

    if not config.use_mock_ai:
        logger.warning("USE_MOCK_AI is disabled but OPENAI_API_KEY is not set; using keyword analyzer")
    else:
        logger.info("Using keyword analyzer")
    return KeywordAnalyzer(config.load_heuristic_rules())


def create_search_service(config: AppConfig) -> SearchService:
    """Create a :class:`SearchService` backed by :class:`SQLStore`.

    The store is not initialised here; call ``service.store.initialize()``.
    """

    store = SQLStore(config.resolved_database_url)
    return SearchService(store, create_analyzer(config))
