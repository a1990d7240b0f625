"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from eventinsight.api.routes import router
from eventinsight.config import AppConfig
from eventinsight.models import ErrorResponse
from eventinsight.services.factory import create_search_service
from eventinsight.services.search import SearchService

logger = logging.getLogger(__name__)

INDEX_HTML = """
<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Event to Insight - IT Helpdesk</title>
    <style>
      :root {
        font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
        color: #1f2937;
        background: #f3f4f6;
      }

      body {
        margin: 0;
      }

      main {
        max-width: 820px;
        margin: 0 auto;
        padding: 48px 24px;
        display: grid;
        gap: 24px;
      }

      h1 {
        margin: 0;
        font-size: 1.9rem;
      }

      form {
        display: flex;
        gap: 12px;
      }

      input[type="text"] {
        flex: 1;
        padding: 12px 16px;
        border: 1px solid #d1d5db;
        border-radius: 10px;
        font-size: 1rem;
      }

      button {
        border: none;
        border-radius: 10px;
        padding: 12px 20px;
        font-size: 1rem;
        font-weight: 600;
        cursor: pointer;
        background: #2563eb;
        color: white;
      }

      button:disabled {
        opacity: 0.6;
        cursor: wait;
      }

      .status {
        min-height: 20px;
        color: #b91c1c;
      }

      .answer,
      .article-card {
        background: white;
        border-radius: 14px;
        padding: 20px 24px;
        box-shadow: 0 6px 18px rgba(15, 23, 42, 0.08);
      }

      .answer[hidden] {
        display: none;
      }

      .articles {
        display: grid;
        gap: 12px;
      }

      .article-card {
        cursor: pointer;
      }

      .article-card h3 {
        margin: 0 0 6px;
        font-size: 1.05rem;
      }

      .article-card p {
        margin: 0;
        color: #4b5563;
      }

      .modal {
        position: fixed;
        inset: 0;
        background: rgba(15, 23, 42, 0.45);
        display: flex;
        align-items: center;
        justify-content: center;
        padding: 24px;
      }

      .modal[hidden] {
        display: none;
      }

      .modal-body {
        background: white;
        border-radius: 16px;
        max-width: 640px;
        width: 100%;
        padding: 28px;
        display: grid;
        gap: 16px;
      }

      .modal-body p {
        margin: 0;
        line-height: 1.6;
        white-space: pre-wrap;
      }
    </style>
  </head>
  <body>
    <main>
      <header>
        <h1>IT Helpdesk</h1>
        <p>Describe your problem and we will point you to the right knowledge-base article.</p>
      </header>

      <form id="search-form">
        <input id="query" type="text" placeholder="How do I reset my password?" autocomplete="off" />
        <button id="search-button" type="submit">Search</button>
      </form>
      <div class="status" id="status" role="status"></div>

      <section class="answer" id="answer" hidden>
        <h2>Answer</h2>
        <p id="summary"></p>
        <h3>Relevant articles</h3>
        <div class="articles" id="articles"></div>
      </section>
    </main>

    <div class="modal" id="modal" hidden>
      <div class="modal-body" role="dialog" aria-modal="true" aria-labelledby="modal-title">
        <h2 id="modal-title"></h2>
        <p id="modal-content"></p>
        <button id="modal-close" type="button">Close</button>
      </div>
    </div>

    <script>
      const form = document.getElementById("search-form");
      const input = document.getElementById("query");
      const button = document.getElementById("search-button");
      const statusEl = document.getElementById("status");
      const answer = document.getElementById("answer");
      const summary = document.getElementById("summary");
      const articles = document.getElementById("articles");
      const modal = document.getElementById("modal");

      async function readError(response) {
        try {
          const payload = await response.json();
          return payload.message ? `${payload.error}: ${payload.message}` : payload.error;
        } catch (err) {
          return `Request failed with status ${response.status}`;
        }
      }

      async function openArticle(id) {
        statusEl.textContent = "";
        const response = await fetch(`/api/articles/${id}`);
        if (!response.ok) {
          statusEl.textContent = await readError(response);
          return;
        }
        const article = await response.json();
        document.getElementById("modal-title").textContent = article.title;
        document.getElementById("modal-content").textContent = article.content;
        modal.hidden = false;
      }

      function renderArticles(items) {
        articles.replaceChildren();
        if (!items.length) {
          const empty = document.createElement("p");
          empty.textContent = "No matching articles.";
          articles.appendChild(empty);
          return;
        }
        for (const item of items) {
          const card = document.createElement("article");
          card.className = "article-card";
          const title = document.createElement("h3");
          title.textContent = item.title;
          const preview = document.createElement("p");
          preview.textContent = item.content.length > 140 ? `${item.content.slice(0, 140)}...` : item.content;
          card.append(title, preview);
          card.addEventListener("click", () => openArticle(item.id));
          articles.appendChild(card);
        }
      }

      form.addEventListener("submit", async (event) => {
        event.preventDefault();
        const query = input.value;
        if (!query.trim()) {
          statusEl.textContent = "Please enter a question.";
          return;
        }

        button.disabled = true;
        statusEl.textContent = "";
        try {
          const response = await fetch("/api/search-query", {
            method: "POST",
            headers: { "Content-Type": "application/json" },
            body: JSON.stringify({ query }),
          });
          if (!response.ok) {
            statusEl.textContent = await readError(response);
            return;
          }
          const payload = await response.json();
          summary.textContent = payload.ai_summary_answer;
          renderArticles(payload.ai_relevant_articles);
          answer.hidden = false;
        } catch (err) {
          statusEl.textContent = "Could not reach the helpdesk service.";
        } finally {
          button.disabled = false;
        }
      });

      document.getElementById("modal-close").addEventListener("click", () => {
        modal.hidden = true;
      });
      modal.addEventListener("click", (event) => {
        if (event.target === modal) {
          modal.hidden = true;
        }
      });
    </script>
  </body>
</html>
"""


def _error_response(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    payload = ErrorResponse(error=error, message=message or None)
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


def create_app(config: AppConfig | None = None, *, service: SearchService | None = None) -> FastAPI:
    """Create the API application.

    Args:
        config: Settings; read from the environment when omitted.
        service: Pre-built search service. Built from ``config`` when omitted.
    """

    config = config or AppConfig.from_env()
    search_service = service or create_search_service(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        seeded = await run_in_threadpool(search_service.store.initialize)
        logger.info("Storage initialised (%d articles seeded)", seeded)
        yield
        search_service.store.close()

    app = FastAPI(
        title="Event to Insight",
        description="IT helpdesk knowledge-base search API",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.search_service = search_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Authorization", "Content-Type", "X-CSRF-Token"],
        expose_headers=["Link"],
        max_age=300,
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if isinstance(exc.detail, dict):
            response = JSONResponse(status_code=exc.status_code, content=exc.detail)
        else:
            response = _error_response(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        if any(error.get("type") == "json_invalid" for error in errors):
            error = "Invalid JSON"
        else:
            error = "Invalid request body"
        message = str(errors[0].get("msg")) if errors else None
        return _error_response(400, error, message)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error while serving %s %s", request.method, request.url.path)
        return _error_response(500, "Internal server error")

    app.include_router(router, prefix="/api")

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        return INDEX_HTML

    return app


app = create_app()
