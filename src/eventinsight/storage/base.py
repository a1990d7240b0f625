from typing import List, Optional, Protocol, Sequence

from eventinsight.models import Article, Query, SearchResult


class ArticleStore(Protocol):
    """Interface for persisting articles, queries and search results.

    Lookups of a missing record raise :class:`eventinsight.errors.NotFoundError`;
    backend failures raise :class:`eventinsight.errors.StorageError`.
    """

    def initialize(self) -> int: ...

    def close(self) -> None: ...

    def list_articles(self) -> List[Article]: ...

    def get_article(self, article_id: int) -> Article: ...

    def get_articles_by_ids(self, article_ids: Sequence[int]) -> List[Article]: ...

    def create_query(self, query_text: str) -> Query: ...

    def get_query(self, query_id: int) -> Query: ...

    def create_search_result(
        self,
        query_id: int,
        summary: str,
        relevant_article_ids: Optional[Sequence[int]],
    ) -> SearchResult: ...

    def get_search_result(self, result_id: int) -> SearchResult: ...

    def get_search_result_for_query(self, query_id: int) -> SearchResult: ...
