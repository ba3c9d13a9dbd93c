"""
Error taxonomy for the scraping pipeline.

FetchError, ExtractionError and GenerationError are item-scoped: the batch
coordinator turns them into placeholder text on the affected result.
NoValidReferences is batch-scoped and is raised before any network activity.
"""

from __future__ import annotations

from typing import Any


class PipelineError(Exception):
    """Base class for all pipeline errors. Messages are meant for display."""


class FallbackExhausted(PipelineError):
    """Every candidate in a fallback chain failed.

    Attributes:
        failures: (candidate, exception) pairs in the order they were tried
    """

    def __init__(self, failures: list[tuple[Any, Exception]]):
        self.failures = failures
        if failures:
            detail = "; ".join(f"{candidate}: {exc}" for candidate, exc in failures)
        else:
            detail = "no candidates configured"
        super().__init__(f"all {len(failures)} candidates failed ({detail})")


class FetchError(PipelineError):
    """No mirror returned content for a post."""

    def __init__(self, message: str = "no mirror returned content", failures=None):
        self.failures = list(failures or [])
        super().__init__(message)


class ExtractionError(PipelineError):
    """No extraction rule located usable post text."""


class GenerationError(PipelineError):
    """The reply provider failed (quota, network, malformed response)."""


class NoValidReferences(PipelineError):
    """No post identifier survived parsing of the batch input."""

    def __init__(self, message: str = "No valid post links found. Please check your input."):
        super().__init__(message)
