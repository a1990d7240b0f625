"""Exception hierarchy shared by the storage, analysis and service layers."""

from __future__ import annotations

__all__ = [
    "AnalysisError",
    "EventInsightError",
    "NotFoundError",
    "PipelineError",
    "StorageError",
]


class EventInsightError(Exception):
    """Base class for all errors raised by the backend."""


class NotFoundError(EventInsightError):
    """A requested record does not exist."""

    def __init__(self, entity: str, identifier: int) -> None:
        super().__init__(f"{entity} {identifier} not found")
        self.entity = entity
        self.identifier = identifier


class StorageError(EventInsightError):
    """The backing store could not complete an operation."""


class AnalysisError(EventInsightError):
    """The relevance-analysis service failed or could not be initialised."""


class PipelineError(EventInsightError):
    """A step of the search pipeline failed.

    ``step`` names the failing step; the underlying exception is available as
    ``__cause__``.
    """

    def __init__(self, step: str) -> None:
        super().__init__(f"failed to {step}")
        self.step = step
