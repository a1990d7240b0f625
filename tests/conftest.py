from __future__ import annotations

from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from eventinsight.api.app import create_app
from eventinsight.config import AppConfig
from eventinsight.services.analysis import KeywordAnalyzer
from eventinsight.services.search import SearchService
from eventinsight.storage import SQLStore


@pytest.fixture
def store() -> Iterator[SQLStore]:
    """An initialised in-memory store seeded with the bundled catalog."""

    sql_store = SQLStore("sqlite://")
    sql_store.initialize()
    yield sql_store
    sql_store.close()


@pytest.fixture
def service(store: SQLStore) -> SearchService:
    return SearchService(store, KeywordAnalyzer())


@pytest.fixture
def app(service: SearchService) -> FastAPI:
    return create_app(AppConfig(database_url="sqlite://"), service=service)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
