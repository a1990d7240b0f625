"""Run the Event-to-Insight API with Uvicorn."""

from __future__ import annotations

import logging
import sys

import uvicorn

from eventinsight.config import AppConfig


def main() -> None:
    """Load the configuration from the environment and serve the API."""

    try:
        config = AppConfig.from_env()
    except ValueError as exc:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
        logging.error("%s", exc)
        sys.exit(1)

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger = logging.getLogger("eventinsight")
    logger.info("Server starting on port %d", config.port)
    logger.info("Using database: %s", config.resolved_database_url)
    logger.info("Health check: http://localhost:%d/api/health", config.port)

    uvicorn.run("eventinsight.api.app:app", host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
