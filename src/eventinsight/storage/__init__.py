"""Storage layer for knowledge-base articles and search provenance."""

from __future__ import annotations

from .base import ArticleStore  # noqa: F401
from .sql import SQLStore  # noqa: F401

__all__ = ["ArticleStore", "SQLStore"]
