"""Event-to-Insight: an IT helpdesk backend that answers support questions from a knowledge base.

Importing the package fills unset environment variables from the project's
``.env`` file so ``AppConfig.from_env`` sees them.
"""

from __future__ import annotations

from .config import AppConfig, ArticleCatalog, HeuristicRules, load_env_file

load_env_file()

__all__ = ["AppConfig", "ArticleCatalog", "HeuristicRules"]
