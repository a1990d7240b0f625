"""SQLAlchemy implementation of :class:`~eventinsight.storage.base.ArticleStore`."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Sequence

from sqlalchemy import create_engine, event, func, select, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from eventinsight.config import ArticleCatalog
from eventinsight.errors import NotFoundError, StorageError
from eventinsight.models import Article, Query, SearchResult
from eventinsight.storage.tables import ArticleRow, Base, QueryRow, SearchResultRow, utcnow

__all__ = ["SQLStore"]

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_article(row: ArticleRow) -> Article:
    return Article(id=row.id, title=row.title, content=row.content)


def _to_query(row: QueryRow) -> Query:
    return Query(id=row.id, query=row.query, created_at=_as_utc(row.created_at))


def _to_search_result(row: SearchResultRow) -> SearchResult:
    return SearchResult(
        id=row.id,
        query_id=row.query_id,
        ai_summary_answer=row.ai_summary_answer,
        ai_relevant_articles=row.ai_relevant_articles,
        created_at=_as_utc(row.created_at),
    )


class SQLStore:
    """Relational store for articles, queries and search results.

    Args:
        url: SQLAlchemy database URL. In-memory SQLite URLs share a single
            connection so every thread sees the same database.
        catalog: Articles used to seed an empty store. Loaded from the bundled
            catalog file on first use when omitted.
    """

    def __init__(self, url: str = "sqlite:///./data.db", *, catalog: ArticleCatalog | None = None) -> None:
        parsed = make_url(url)
        engine_kwargs: dict[str, object] = {}
        is_sqlite = parsed.get_backend_name() == "sqlite"
        if is_sqlite:
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if parsed.database in (None, "", ":memory:"):
                engine_kwargs["poolclass"] = StaticPool

        self._engine = create_engine(url, **engine_kwargs)
        if is_sqlite:
            event.listen(self._engine, "connect", _enable_sqlite_foreign_keys)
        self._sessions = sessionmaker(bind=self._engine, expire_on_commit=False)
        self._catalog = catalog

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        try:
            with self._sessions() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StorageError(f"{operation} failed: {exc}") from exc

    def initialize(self) -> int:
        """Create the schema and seed the catalog into an empty article table.

        Returns the number of articles inserted, which is zero when the table
        already held data.
        """

        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise StorageError(f"create tables failed: {exc}") from exc

        with self._session("seed articles") as session, session.begin():
            count = session.scalar(select(func.count()).select_from(ArticleRow))
            if count:
                return 0

            catalog = self._catalog or ArticleCatalog.from_file()
            session.add_all(
                ArticleRow(title=entry.title, content=entry.content) for entry in catalog.articles
            )
            logger.info("Seeded %d knowledge-base articles", len(catalog.articles))
            return len(catalog.articles)

    def ping(self) -> None:
        """Raise :class:`StorageError` when the database cannot be reached."""

        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StorageError(f"ping failed: {exc}") from exc

    def close(self) -> None:
        self._engine.dispose()

    def list_articles(self) -> List[Article]:
        with self._session("list articles") as session:
            rows = session.scalars(select(ArticleRow).order_by(ArticleRow.id)).all()
            return [_to_article(row) for row in rows]

    def get_article(self, article_id: int) -> Article:
        with self._session("get article") as session:
            row = session.get(ArticleRow, article_id)
            if row is None:
                raise NotFoundError("article", article_id)
            return _to_article(row)

    def get_articles_by_ids(self, article_ids: Sequence[int]) -> List[Article]:
        """Return the articles whose IDs appear in ``article_ids``.

        Unknown IDs are omitted and repeated IDs yield a single article. An
        empty input returns an empty list without touching the database.
        """

        wanted = set(article_ids)
        if not wanted:
            return []

        with self._session("get articles by ids") as session:
            rows = session.scalars(
                select(ArticleRow).where(ArticleRow.id.in_(wanted)).order_by(ArticleRow.id)
            ).all()
            return [_to_article(row) for row in rows]

    def create_query(self, query_text: str) -> Query:
        with self._session("create query") as session, session.begin():
            row = QueryRow(query=query_text, created_at=utcnow())
            session.add(row)
            session.flush()
            return _to_query(row)

    def get_query(self, query_id: int) -> Query:
        with self._session("get query") as session:
            row = session.get(QueryRow, query_id)
            if row is None:
                raise NotFoundError("query", query_id)
            return _to_query(row)

    def create_search_result(
        self,
        query_id: int,
        summary: str,
        relevant_article_ids: Optional[Sequence[int]],
    ) -> SearchResult:
        stored = None if relevant_article_ids is None else [int(i) for i in relevant_article_ids]
        with self._session("create search result") as session, session.begin():
            row = SearchResultRow(
                query_id=query_id,
                ai_summary_answer=summary,
                ai_relevant_articles=stored,
                created_at=utcnow(),
            )
            session.add(row)
            session.flush()
            return _to_search_result(row)

    def get_search_result(self, result_id: int) -> SearchResult:
        with self._session("get search result") as session:
            row = session.get(SearchResultRow, result_id)
            if row is None:
                raise NotFoundError("search result", result_id)
            return _to_search_result(row)

    def get_search_result_for_query(self, query_id: int) -> SearchResult:
        """Return the most recent search result recorded for ``query_id``."""

        with self._session("get search result by query") as session:
            row = session.scalars(
                select(SearchResultRow)
                .where(SearchResultRow.query_id == query_id)
                .order_by(SearchResultRow.id.desc())
                .limit(1)
            ).first()
            if row is None:
                raise NotFoundError("search result for query", query_id)
            return _to_search_result(row)
